from datetime import datetime

from pydantic import BaseModel, field_validator

from campusflow.schemas.choices import PROFILE_ROLES, optional_text, require_text


class UpdateProfileRequest(BaseModel):
    full_name: str | None = None
    department: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, value: str | None) -> str:
        return require_text(value or '', 'Full name')

    @field_validator('department', 'phone', 'bio', 'avatar_url')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class ProfileResponse(BaseModel):
    id: str
    full_name: str
    email: str
    role: str
    department: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class SignInIdentity(BaseModel):
    """Identity asserted by the upstream provider at sign-in."""

    email: str
    subject: str
    full_name: str = 'User'
    role: str = 'student'
    department: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Email not found in SAML response')
        return normalized

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        return optional_text(value) or 'User'

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        # Unknown roles fall back to the least privileged one.
        normalized = value.strip().lower()
        return normalized if normalized in PROFILE_ROLES else 'student'

    @field_validator('department')
    @classmethod
    def validate_department(cls, value: str | None) -> str | None:
        return optional_text(value)


class LecturerDirectoryEntry(BaseModel):
    """Public fields shown in the faculty directory."""

    full_name: str
    email: str
    department: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None

    class Config:
        from_attributes = True
