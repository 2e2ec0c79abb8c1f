from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

from campusflow.schemas.choices import (
    APPOINTMENT_STATUSES,
    FEEDBACK_PRIORITIES,
    FEEDBACK_STATUSES,
    FEEDBACK_TYPES,
    NOTIFICATION_TYPES,
    normalize_choice,
    normalize_day,
    normalize_schedule_type,
    optional_text,
    require_text,
)


def _required(value: str | None, info: ValidationInfo) -> str:
    label = info.field_name.replace('_', ' ').capitalize()
    if value is None:
        raise ValueError(f'{label} is required.')
    return require_text(value, label)


class CreateScheduleRequest(BaseModel):
    course: str
    time: str
    location: str
    instructor: str
    type: str = 'Lecture'
    day_of_week: str

    @field_validator('course', 'time', 'location', 'instructor')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('type')
    @classmethod
    def validate_type(cls, value: str) -> str:
        return normalize_schedule_type(value)

    @field_validator('day_of_week')
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)


class UpdateScheduleRequest(BaseModel):
    course: str | None = None
    time: str | None = None
    location: str | None = None
    instructor: str | None = None
    type: str | None = None
    day_of_week: str | None = None

    @field_validator('course', 'time', 'location', 'instructor')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('type')
    @classmethod
    def validate_type(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Type is required.')
        return normalize_schedule_type(value)

    @field_validator('day_of_week')
    @classmethod
    def validate_day(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Day of week is required.')
        return normalize_day(value)


class ScheduleResponse(BaseModel):
    id: int
    user_id: str
    course: str
    time: str
    location: str
    instructor: str
    type: str
    day_of_week: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateAppointmentRequest(BaseModel):
    service_type: str
    appointment_date: date
    appointment_time: str
    purpose: str | None = None
    with_person: str | None = None
    location: str | None = None

    @field_validator('service_type', 'appointment_time')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('purpose', 'with_person', 'location')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class UpdateAppointmentRequest(BaseModel):
    service_type: str | None = None
    appointment_date: date | None = None
    appointment_time: str | None = None
    purpose: str | None = None
    status: str | None = None
    with_person: str | None = None
    location: str | None = None

    @field_validator('service_type', 'appointment_time')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('purpose', 'with_person', 'location')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Status is required.')
        return normalize_choice(value, APPOINTMENT_STATUSES, 'appointment status')


class AppointmentResponse(BaseModel):
    id: int
    user_id: str
    service_type: str
    appointment_date: date
    appointment_time: str
    purpose: str | None = None
    status: str
    with_person: str | None = None
    location: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateFeedbackRequest(BaseModel):
    feedback_type: str
    subject: str
    description: str
    priority: str = 'medium'
    rating: int | None = Field(default=None, ge=1, le=5)

    @field_validator('feedback_type')
    @classmethod
    def validate_feedback_type(cls, value: str) -> str:
        return normalize_choice(value, FEEDBACK_TYPES, 'feedback type')

    @field_validator('subject', 'description')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, value: str) -> str:
        return normalize_choice(value, FEEDBACK_PRIORITIES, 'priority')


class UpdateFeedbackRequest(BaseModel):
    """Owner edits. Status and response belong to administrators."""

    subject: str | None = None
    description: str | None = None
    priority: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)

    @field_validator('subject', 'description')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Priority is required.')
        return normalize_choice(value, FEEDBACK_PRIORITIES, 'priority')


class RespondFeedbackRequest(BaseModel):
    status: str
    response: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        return normalize_choice(value, FEEDBACK_STATUSES, 'feedback status')

    @field_validator('response')
    @classmethod
    def validate_response(cls, value: str | None) -> str | None:
        return optional_text(value)


class FeedbackResponse(BaseModel):
    id: int
    user_id: str
    feedback_type: str
    subject: str
    description: str
    priority: str
    rating: int | None = None
    status: str
    response: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateNotificationRequest(BaseModel):
    title: str
    message: str
    type: str = 'general'
    extra: Any | None = Field(default=None, alias='metadata')

    @field_validator('title', 'message')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('type')
    @classmethod
    def validate_type(cls, value: str) -> str:
        return normalize_choice(value, NOTIFICATION_TYPES, 'notification type')

    class Config:
        populate_by_name = True


class UpdateNotificationRequest(BaseModel):
    read: bool

    @field_validator('read')
    @classmethod
    def validate_read(cls, value: bool) -> bool:
        if not value:
            raise ValueError('A read notification cannot be marked unread.')
        return value


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    title: str
    message: str
    type: str
    read: bool
    metadata: Any | None = Field(default=None, validation_alias=AliasChoices('extra', 'metadata'))
    created_at: datetime

    class Config:
        from_attributes = True


class CreatePushSubscriptionRequest(BaseModel):
    endpoint: str
    p256dh: str
    auth: str

    @field_validator('endpoint', 'p256dh', 'auth')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)


class UpdatePushSubscriptionRequest(BaseModel):
    endpoint: str | None = None
    p256dh: str | None = None
    auth: str | None = None

    @field_validator('endpoint', 'p256dh', 'auth')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)


class PushSubscriptionResponse(BaseModel):
    id: int
    user_id: str
    endpoint: str
    p256dh: str
    auth: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
