from datetime import datetime, time

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from campusflow.schemas.choices import (
    CONSULTATION_STATUSES,
    REPORT_TYPES,
    normalize_choice,
    normalize_day,
    normalize_target_class,
    optional_text,
    require_text,
)


def _required(value: str | None, info: ValidationInfo) -> str:
    label = (info.field_name or 'value').replace('_', ' ').capitalize()
    if value is None:
        raise ValueError(f'{label} is required.')
    return require_text(value, label)


class _ClassScoped(BaseModel):
    """Models that carry the wire field ``class``."""

    class Config:
        from_attributes = True
        populate_by_name = True


class CreateStudentRequest(_ClassScoped):
    student_name: str
    student_email: str
    student_id: str
    class_name: str = Field(alias='class')
    phone: str | None = None

    @field_validator('student_name', 'student_id', 'class_name')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('student_email')
    @classmethod
    def validate_student_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('Student email is invalid.')
        return normalized

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return optional_text(value)


class UpdateStudentRequest(_ClassScoped):
    student_name: str | None = None
    student_email: str | None = None
    class_name: str | None = Field(default=None, alias='class')
    phone: str | None = None

    @field_validator('student_name', 'class_name')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('student_email')
    @classmethod
    def validate_student_email(cls, value: str | None) -> str:
        normalized = (value or '').strip().lower()
        if '@' not in normalized:
            raise ValueError('Student email is invalid.')
        return normalized

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return optional_text(value)


class StudentResponse(_ClassScoped):
    id: int
    lecturer_id: str
    student_name: str
    student_email: str
    student_id: str
    class_name: str = Field(alias='class')
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateTimetableRequest(_ClassScoped):
    day_of_week: str
    start_time: time
    end_time: time
    subject: str
    class_name: str = Field(alias='class')
    room: str | None = None

    @field_validator('day_of_week')
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator('subject', 'class_name')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('room')
    @classmethod
    def validate_room(cls, value: str | None) -> str | None:
        return optional_text(value)

    @model_validator(mode='after')
    def validate_time_range(self):
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class UpdateTimetableRequest(_ClassScoped):
    day_of_week: str | None = None
    start_time: time | None = None
    end_time: time | None = None
    subject: str | None = None
    class_name: str | None = Field(default=None, alias='class')
    room: str | None = None

    @field_validator('day_of_week')
    @classmethod
    def validate_day(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Day of week is required.')
        return normalize_day(value)

    @field_validator('subject', 'class_name')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('room')
    @classmethod
    def validate_room(cls, value: str | None) -> str | None:
        return optional_text(value)

    @model_validator(mode='after')
    def validate_time_range(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class TimetableResponse(_ClassScoped):
    id: int
    lecturer_id: str
    day_of_week: str
    start_time: time
    end_time: time
    subject: str
    class_name: str = Field(alias='class')
    room: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateAssignmentRequest(_ClassScoped):
    title: str
    description: str | None = None
    class_name: str = Field(alias='class')
    submission_date: datetime
    portal_open: bool = False

    @field_validator('title', 'class_name')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return optional_text(value)


class UpdateAssignmentRequest(_ClassScoped):
    title: str | None = None
    description: str | None = None
    class_name: str | None = Field(default=None, alias='class')
    submission_date: datetime | None = None
    portal_open: bool | None = None

    @field_validator('title', 'class_name')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return optional_text(value)


class AssignmentResponse(_ClassScoped):
    id: int
    lecturer_id: str
    title: str
    description: str | None = None
    class_name: str = Field(alias='class')
    submission_date: datetime
    portal_open: bool | None = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateConsultationRequest(BaseModel):
    student_name: str
    student_email: str
    consultation_date: datetime
    reason: str

    @field_validator('student_name', 'student_email', 'reason')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)


class UpdateConsultationRequest(BaseModel):
    consultation_date: datetime | None = None
    reason: str | None = None
    status: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Status is required.')
        return normalize_choice(value, CONSULTATION_STATUSES, 'consultation status')


class ConsultationResponse(BaseModel):
    id: int
    lecturer_id: str
    student_name: str
    student_email: str
    consultation_date: datetime
    reason: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class CreateReportRequest(BaseModel):
    report_type: str
    student_name: str
    title: str
    content: str

    @field_validator('report_type')
    @classmethod
    def validate_report_type(cls, value: str) -> str:
        return normalize_choice(value, REPORT_TYPES, 'report type')

    @field_validator('student_name', 'title', 'content')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)


class UpdateReportRequest(BaseModel):
    title: str | None = None
    content: str | None = None

    @field_validator('title', 'content')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)


class ReportResponse(BaseModel):
    id: int
    lecturer_id: str
    report_type: str
    student_name: str
    title: str
    content: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CreateStudyMaterialRequest(_ClassScoped):
    title: str
    description: str | None = None
    file_url: str | None = None
    class_name: str = Field(alias='class')
    subject: str

    @field_validator('title', 'class_name', 'subject')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('description', 'file_url')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class UpdateStudyMaterialRequest(_ClassScoped):
    title: str | None = None
    description: str | None = None
    file_url: str | None = None
    class_name: str | None = Field(default=None, alias='class')
    subject: str | None = None

    @field_validator('title', 'class_name', 'subject')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('description', 'file_url')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class StudyMaterialResponse(_ClassScoped):
    id: int
    lecturer_id: str
    title: str
    description: str | None = None
    file_url: str | None = None
    class_name: str = Field(alias='class')
    subject: str
    created_at: datetime | None = None


class CreateUpdateRequest(BaseModel):
    title: str
    content: str
    target_class: str | None = None

    @field_validator('title', 'content')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('target_class')
    @classmethod
    def validate_target_class(cls, value: str | None) -> str | None:
        return normalize_target_class(value)


class UpdateUpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    target_class: str | None = None

    @field_validator('title', 'content')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str:
        return _required(value, info)

    @field_validator('target_class')
    @classmethod
    def validate_target_class(cls, value: str | None) -> str | None:
        return normalize_target_class(value)


class UpdateResponse(BaseModel):
    id: int
    lecturer_id: str
    title: str
    content: str
    target_class: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
