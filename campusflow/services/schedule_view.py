"""Merged daily schedule: personal entries plus the caller's class timetable."""

import re
from dataclasses import asdict, dataclass
from datetime import date

from campusflow.core.errors import ValidationError
from campusflow.schemas.choices import DAYS_OF_WEEK, normalize_day
from campusflow.services.policy import Caller
from campusflow.services.record_store import RecordStore

PERSONAL_SOURCE = 'personal'
CLASS_SOURCE = 'class'

_SINGLE_DIGIT_HOUR = re.compile(r'^(\d)(?=[:.])')


@dataclass(frozen=True)
class ScheduleItem:
    source: str
    record_id: int
    day_of_week: str
    display_time: str
    title: str
    location: str | None = None
    instructor: str | None = None
    type: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def today_name(today: date | None = None) -> str:
    return DAYS_OF_WEEK[(today or date.today()).weekday()]


def display_time_key(display_time: str) -> str:
    # "9:00" must sort before "10:00".
    return _SINGLE_DIGIT_HOUR.sub(r'0\1', display_time.strip())


def personal_item(schedule) -> ScheduleItem:
    return ScheduleItem(
        source=PERSONAL_SOURCE,
        record_id=schedule.id,
        day_of_week=schedule.day_of_week,
        display_time=schedule.time.strip(),
        title=schedule.course,
        location=schedule.location,
        instructor=schedule.instructor,
        type=schedule.type,
    )


def class_item(entry) -> ScheduleItem:
    return ScheduleItem(
        source=CLASS_SOURCE,
        record_id=entry.id,
        day_of_week=entry.day_of_week,
        display_time=f'{entry.start_time:%H:%M}-{entry.end_time:%H:%M}',
        title=entry.subject,
        location=entry.room,
        type='Class',
    )


def merge_day(personal_rows, class_rows) -> list[ScheduleItem]:
    """Order both sources by display time.

    Ties keep insertion order within a source, and personal entries come
    before class entries at the same time.
    """
    items = [personal_item(row) for row in sorted(personal_rows, key=lambda row: row.id)]
    items += [class_item(row) for row in sorted(class_rows, key=lambda row: row.id)]
    return sorted(items, key=lambda item: display_time_key(item.display_time))


def build_day_view(store: RecordStore, caller: Caller, day_of_week: str) -> list[ScheduleItem]:
    try:
        day = normalize_day(day_of_week)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    personal_rows = store.list('schedules', caller, {'day_of_week': day})

    class_rows = []
    if caller.department:
        class_rows = store.list('timetable', caller, {'day_of_week': day, 'class': caller.department})

    return merge_day(personal_rows, class_rows)
