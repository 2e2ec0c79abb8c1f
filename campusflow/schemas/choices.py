"""Closed value sets and the normalizers the request models share."""

DAYS_OF_WEEK = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

PROFILE_ROLES = {'student', 'lecturer'}
SCHEDULE_TYPES = {'lecture': 'Lecture', 'tutorial': 'Tutorial', 'lab': 'Lab', 'seminar': 'Seminar'}
APPOINTMENT_STATUSES = {'pending', 'approved', 'declined', 'completed', 'cancelled'}
FEEDBACK_TYPES = {'suggestion', 'complaint', 'compliment', 'bug_report', 'feature_request'}
FEEDBACK_PRIORITIES = {'low', 'medium', 'high'}
FEEDBACK_STATUSES = {'under_review', 'in_progress', 'resolved', 'closed'}
NOTIFICATION_TYPES = {
    'general', 'assignment', 'reminder', 'event', 'announcement',
    'update', 'system', 'alert', 'urgent', 'feedback',
}
CONSULTATION_STATUSES = {'pending', 'approved', 'declined'}
REPORT_TYPES = {'sent', 'received'}

BROADCAST_TARGET = 'all'


def normalize_choice(value: str, choices, label: str) -> str:
    normalized = value.strip().lower()
    if normalized not in choices:
        raise ValueError(f'Invalid {label}.')
    return normalized


def normalize_day(value: str) -> str:
    return normalize_choice(value, DAYS_OF_WEEK, 'day of week')


def require_text(value: str, label: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{label} is required.')
    return normalized


def optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def normalize_schedule_type(value: str) -> str:
    return SCHEDULE_TYPES[normalize_choice(value, SCHEDULE_TYPES, 'schedule type')]


def normalize_target_class(value: str | None) -> str | None:
    normalized = optional_text(value)
    if normalized is not None and normalized.lower() == BROADCAST_TARGET:
        return BROADCAST_TARGET
    return normalized
