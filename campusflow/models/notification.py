"""Notification model definitions."""

from sqlalchemy import JSON, Boolean, Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Notification(Base):
    """Represents a message addressed to one user.

    Rows are append-only apart from ``read``, which only moves to True.
    """
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    type = Column(String, nullable=False, default="general")
    read = Column(Boolean, nullable=False, default=False)
    # ``metadata`` is reserved on declarative classes.
    extra = Column("metadata", JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
