"""Registry of the owned collections the record store serves."""

from dataclasses import dataclass, field
from typing import Callable

from pydantic import BaseModel

from campusflow.core.errors import NotFoundError
from campusflow.models.appointment import Appointment
from campusflow.models.assignment import Assignment
from campusflow.models.consultation import Consultation
from campusflow.models.feedback import Feedback
from campusflow.models.notification import Notification
from campusflow.models.push_subscription import PushSubscription
from campusflow.models.report import Report
from campusflow.models.schedule import Schedule
from campusflow.models.student import Student
from campusflow.models.study_material import StudyMaterial
from campusflow.models.timetable import TimetableEntry
from campusflow.models.update import Update
from campusflow.schemas import lecturer_schemas, personal_schemas
from campusflow.schemas.choices import (
    APPOINTMENT_STATUSES,
    CONSULTATION_STATUSES,
    FEEDBACK_PRIORITIES,
    FEEDBACK_STATUSES,
    FEEDBACK_TYPES,
    NOTIFICATION_TYPES,
    REPORT_TYPES,
    normalize_choice,
    normalize_day,
    normalize_schedule_type,
    normalize_target_class,
)
from campusflow.services.policy import owner_attribute


@dataclass(frozen=True)
class CollectionInfo:
    name: str
    model: type
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    response_schema: type[BaseModel]
    # (attribute, descending) pairs; the primary key breaks ties in the first pair's direction.
    order_by: tuple[tuple[str, bool], ...] = ()
    # Wire name -> model attribute for the filters ``list`` accepts.
    filters: dict[str, str] = field(default_factory=dict)
    # Model attribute -> the normalizer its create schema applies, reused on filter values.
    normalizers: dict[str, Callable[[str], str | None]] = field(default_factory=dict)
    deletable: bool = True

    @property
    def owner_attribute(self) -> str:
        return owner_attribute(self.name)

    @property
    def tracks_updates(self) -> bool:
        return hasattr(self.model, 'updated_at')

    def serialize(self, record) -> dict:
        return self.response_schema.model_validate(record).model_dump(mode='json', by_alias=True)


_CLASS_FILTER = {'class': 'class_name', 'class_name': 'class_name'}


def _choice(choices, label: str) -> Callable[[str], str]:
    return lambda value: normalize_choice(value, choices, label)

COLLECTIONS: dict[str, CollectionInfo] = {
    info.name: info
    for info in (
        CollectionInfo(
            name='schedules',
            model=Schedule,
            create_schema=personal_schemas.CreateScheduleRequest,
            update_schema=personal_schemas.UpdateScheduleRequest,
            response_schema=personal_schemas.ScheduleResponse,
            order_by=(('time', False),),
            filters={'day_of_week': 'day_of_week', 'type': 'type'},
            normalizers={'day_of_week': normalize_day, 'type': normalize_schedule_type},
        ),
        CollectionInfo(
            name='appointments',
            model=Appointment,
            create_schema=personal_schemas.CreateAppointmentRequest,
            update_schema=personal_schemas.UpdateAppointmentRequest,
            response_schema=personal_schemas.AppointmentResponse,
            order_by=(('appointment_date', False), ('appointment_time', False)),
            filters={'status': 'status', 'appointment_date': 'appointment_date'},
            normalizers={'status': _choice(APPOINTMENT_STATUSES, 'appointment status')},
        ),
        CollectionInfo(
            name='feedback',
            model=Feedback,
            create_schema=personal_schemas.CreateFeedbackRequest,
            update_schema=personal_schemas.UpdateFeedbackRequest,
            response_schema=personal_schemas.FeedbackResponse,
            order_by=(('created_at', True),),
            filters={'status': 'status', 'feedback_type': 'feedback_type', 'priority': 'priority'},
            normalizers={
                'status': _choice(FEEDBACK_STATUSES, 'feedback status'),
                'feedback_type': _choice(FEEDBACK_TYPES, 'feedback type'),
                'priority': _choice(FEEDBACK_PRIORITIES, 'priority'),
            },
        ),
        CollectionInfo(
            name='notifications',
            model=Notification,
            create_schema=personal_schemas.CreateNotificationRequest,
            update_schema=personal_schemas.UpdateNotificationRequest,
            response_schema=personal_schemas.NotificationResponse,
            order_by=(('created_at', True),),
            filters={'read': 'read', 'type': 'type'},
            normalizers={'type': _choice(NOTIFICATION_TYPES, 'notification type')},
            deletable=False,
        ),
        CollectionInfo(
            name='push_subscriptions',
            model=PushSubscription,
            create_schema=personal_schemas.CreatePushSubscriptionRequest,
            update_schema=personal_schemas.UpdatePushSubscriptionRequest,
            response_schema=personal_schemas.PushSubscriptionResponse,
            filters={'endpoint': 'endpoint'},
        ),
        CollectionInfo(
            name='students',
            model=Student,
            create_schema=lecturer_schemas.CreateStudentRequest,
            update_schema=lecturer_schemas.UpdateStudentRequest,
            response_schema=lecturer_schemas.StudentResponse,
            order_by=(('student_name', False),),
            filters={**_CLASS_FILTER, 'student_id': 'student_id'},
        ),
        CollectionInfo(
            name='timetable',
            model=TimetableEntry,
            create_schema=lecturer_schemas.CreateTimetableRequest,
            update_schema=lecturer_schemas.UpdateTimetableRequest,
            response_schema=lecturer_schemas.TimetableResponse,
            order_by=(('start_time', False),),
            filters={**_CLASS_FILTER, 'day_of_week': 'day_of_week'},
            normalizers={'day_of_week': normalize_day},
        ),
        CollectionInfo(
            name='assignments',
            model=Assignment,
            create_schema=lecturer_schemas.CreateAssignmentRequest,
            update_schema=lecturer_schemas.UpdateAssignmentRequest,
            response_schema=lecturer_schemas.AssignmentResponse,
            order_by=(('created_at', True),),
            filters={**_CLASS_FILTER, 'portal_open': 'portal_open'},
        ),
        CollectionInfo(
            name='consultations',
            model=Consultation,
            create_schema=lecturer_schemas.CreateConsultationRequest,
            update_schema=lecturer_schemas.UpdateConsultationRequest,
            response_schema=lecturer_schemas.ConsultationResponse,
            order_by=(('consultation_date', False),),
            filters={'status': 'status'},
            normalizers={'status': _choice(CONSULTATION_STATUSES, 'consultation status')},
        ),
        CollectionInfo(
            name='reports',
            model=Report,
            create_schema=lecturer_schemas.CreateReportRequest,
            update_schema=lecturer_schemas.UpdateReportRequest,
            response_schema=lecturer_schemas.ReportResponse,
            order_by=(('created_at', True),),
            filters={'report_type': 'report_type'},
            normalizers={'report_type': _choice(REPORT_TYPES, 'report type')},
        ),
        CollectionInfo(
            name='study_materials',
            model=StudyMaterial,
            create_schema=lecturer_schemas.CreateStudyMaterialRequest,
            update_schema=lecturer_schemas.UpdateStudyMaterialRequest,
            response_schema=lecturer_schemas.StudyMaterialResponse,
            order_by=(('created_at', True),),
            filters={**_CLASS_FILTER, 'subject': 'subject'},
        ),
        CollectionInfo(
            name='updates',
            model=Update,
            create_schema=lecturer_schemas.CreateUpdateRequest,
            update_schema=lecturer_schemas.UpdateUpdateRequest,
            response_schema=lecturer_schemas.UpdateResponse,
            order_by=(('created_at', True),),
            filters={'target_class': 'target_class'},
            normalizers={'target_class': normalize_target_class},
        ),
    )
}


def get_collection(name: str) -> CollectionInfo:
    info = COLLECTIONS.get(name)
    if info is None:
        raise NotFoundError(f'Unknown collection: {name}')
    return info
