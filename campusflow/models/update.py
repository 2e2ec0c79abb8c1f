"""Announcement model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Update(Base):
    """Represents an announcement. A null or "all" target reaches everyone."""
    __tablename__ = "updates"

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(String, nullable=False)
    target_class = Column(String)
    created_at = Column(DateTime(timezone=True), default=utc_now)
