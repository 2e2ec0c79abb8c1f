"""Report model definitions."""

from sqlalchemy import CheckConstraint, Column, Integer, DateTime, ForeignKey, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint("report_type IN ('sent', 'received')", name="ck_reports_report_type"),
    )

    id = Column(Integer, primary_key=True)
    lecturer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    report_type = Column(String, nullable=False)
    student_name = Column(String, nullable=False)
    title = Column(String, nullable=False)
    content = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
