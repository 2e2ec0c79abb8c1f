"""Profile model definitions."""

import uuid

from sqlalchemy import Column, DateTime, String
from campusflow.database import Base
from campusflow.utils.datetime_utils import utc_now


class Profile(Base):
    """Represents a signed-in account. One row per identity."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    department = Column(String)
    phone = Column(String)
    bio = Column(String)
    avatar_url = Column(String)
    role = Column(String, nullable=False, default="student")  # student/lecturer
    sso_provider = Column(String)
    sso_subject = Column(String, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
