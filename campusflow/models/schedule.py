"""Schedule model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Schedule(Base):
    """Represents an entry in a user's personal weekly calendar."""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    course = Column(String, nullable=False)
    time = Column(String, nullable=False)
    location = Column(String, nullable=False)
    instructor = Column(String, nullable=False)
    type = Column(String, nullable=False)
    day_of_week = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
