"""Study material model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class StudyMaterial(Base):
    """Represents a file or link a lecturer shares with a class."""
    __tablename__ = "study_materials"

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String)
    file_url = Column(String)
    class_name = Column("class", String, nullable=False)
    subject = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
