"""Consultation model definitions."""

from sqlalchemy import CheckConstraint, Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Consultation(Base):
    """Represents a student's consultation request handled by a lecturer."""
    __tablename__ = "consultations"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'declined')", name="ck_consultations_status"),
    )

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    student_name = Column(String, nullable=False)
    student_email = Column(String, nullable=False)
    consultation_date = Column(DateTime(timezone=True), nullable=False)
    reason = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
