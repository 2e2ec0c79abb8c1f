"""Timetable model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Time
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class TimetableEntry(Base):
    """Represents a recurring class session taught by a lecturer."""
    __tablename__ = "timetable"

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    subject = Column(String, nullable=False)
    class_name = Column("class", String, nullable=False)
    room = Column(String)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
