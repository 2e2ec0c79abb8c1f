"""Feedback model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    feedback_type = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    description = Column(String, nullable=False)
    priority = Column(String, nullable=False, default="medium")
    rating = Column(Integer)
    status = Column(String, nullable=False, default="under_review")
    response = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
