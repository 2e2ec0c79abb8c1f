"""Appointment model definitions."""

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Appointment(Base):
    """Represents an appointment a user requested with a campus service."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    service_type = Column(String, nullable=False)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(String, nullable=False)
    purpose = Column(String)
    status = Column(String, nullable=False, default="pending")
    with_person = Column(String)
    location = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
