"""Per-row ownership rules.

``authorize`` is a pure function of (operation, collection, caller, row) and
is evaluated for every row an operation touches; nothing is remembered
between calls.
"""

from dataclasses import dataclass
from enum import Enum

from campusflow.core import config
from campusflow.schemas.choices import BROADCAST_TARGET


class Operation(str, Enum):
    READ = 'read'
    CREATE = 'create'
    UPDATE = 'update'
    DELETE = 'delete'
    RESPOND = 'respond'


LECTURER_ROLE = 'lecturer'

PERSONAL_COLLECTIONS = frozenset({
    'schedules',
    'appointments',
    'feedback',
    'notifications',
    'push_subscriptions',
})

LECTURER_COLLECTIONS = frozenset({
    'students',
    'timetable',
    'assignments',
    'consultations',
    'reports',
    'study_materials',
    'updates',
})

# Collections readable beyond their owner, and the row attribute compared
# against the caller's department.
CLASS_SCOPE_ATTRIBUTES = {
    'timetable': 'class_name',
    'assignments': 'class_name',
    'study_materials': 'class_name',
    'updates': 'target_class',
}

BROADCAST_COLLECTIONS = frozenset({'updates'})

# Administrators read and answer feedback on behalf of the institution.
ADMIN_READABLE_COLLECTIONS = frozenset({'feedback'})


@dataclass(frozen=True)
class Caller:
    """The authenticated identity an operation runs as."""

    id: str
    role: str = 'student'
    department: str | None = None
    email: str = ''

    @property
    def is_lecturer(self) -> bool:
        return self.role == LECTURER_ROLE

    @property
    def is_admin(self) -> bool:
        return bool(self.email) and self.email.lower().endswith(config.ADMIN_EMAIL_DOMAIN)

    @classmethod
    def from_profile(cls, profile) -> 'Caller':
        return cls(
            id=profile.id,
            role=(profile.role or 'student').lower(),
            department=profile.department,
            email=profile.email or '',
        )


def owner_attribute(collection: str) -> str:
    if collection in PERSONAL_COLLECTIONS:
        return 'user_id'
    if collection in LECTURER_COLLECTIONS:
        return 'lecturer_id'
    raise KeyError(collection)


def is_broadcast(target_class: str | None) -> bool:
    return target_class is None or target_class.strip().lower() in {'', BROADCAST_TARGET}


def in_class_scope(collection: str, caller: Caller, row) -> bool:
    attribute = CLASS_SCOPE_ATTRIBUTES.get(collection)
    if attribute is None:
        return False

    scope = getattr(row, attribute, None)
    if collection in BROADCAST_COLLECTIONS and is_broadcast(scope):
        return True

    return bool(caller.department) and scope == caller.department


def authorize(operation: Operation, collection: str, caller: Caller, row) -> bool:
    try:
        owner_id = getattr(row, owner_attribute(collection), None)
    except KeyError:
        return False

    is_owner = owner_id is not None and owner_id == caller.id

    if operation is Operation.RESPOND:
        return collection in ADMIN_READABLE_COLLECTIONS and caller.is_admin

    if operation is Operation.READ:
        if is_owner:
            return True
        if collection in ADMIN_READABLE_COLLECTIONS and caller.is_admin:
            return True
        return in_class_scope(collection, caller, row)

    if collection in LECTURER_COLLECTIONS and not caller.is_lecturer:
        return False

    return is_owner
