"""Assignment model definitions."""

from sqlalchemy import Boolean, Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String)
    class_name = Column("class", String, nullable=False)
    submission_date = Column(DateTime(timezone=True), nullable=False)
    portal_open = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
