"""Student roster model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Student(Base):
    """Represents a student on a lecturer's roster."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    student_name = Column(String, nullable=False)
    student_email = Column(String, nullable=False)
    student_id = Column(String, nullable=False, unique=True)
    class_name = Column("class", String, nullable=False)
    phone = Column(String)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
