from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from campusflow.core import config
from campusflow.core.errors import AuthorizationError, NotFoundError, TransientStoreError, ValidationError
from campusflow.services.policy import Operation, authorize
from campusflow.services.record_store import run_read


def _schedule(**overrides) -> dict:
    fields = {
        'course': 'CS101',
        'day_of_week': 'monday',
        'time': '09:00-10:00',
        'location': 'SCI Building, Room 205',
        'instructor': 'Dr. Mensah',
        'type': 'Lecture',
    }
    fields.update(overrides)
    return fields


def _timetable(class_name: str = 'CS-Y2', **overrides) -> dict:
    fields = {
        'day_of_week': 'monday',
        'start_time': '09:00',
        'end_time': '10:30',
        'subject': 'Algorithms',
        'class': class_name,
        'room': 'B12',
    }
    fields.update(overrides)
    return fields


def test_list_excludes_schedules_owned_by_someone_else(store, make_caller) -> None:
    owner_a = make_caller()
    owner_b = make_caller()

    created = store.create('schedules', owner_a, _schedule())

    assert [row.id for row in store.list('schedules', owner_a)] == [created.id]
    assert store.list('schedules', owner_b) == []


def test_create_sets_owner_from_caller_and_ignores_spoofed_owner(store, make_caller) -> None:
    owner = make_caller()
    other = make_caller()

    record = store.create('schedules', owner, _schedule(user_id=other.id))

    assert record.user_id == owner.id


def test_create_normalizes_enumerations(store, make_caller) -> None:
    owner = make_caller()

    record = store.create('schedules', owner, _schedule(day_of_week=' Monday ', type='lab'))

    assert record.day_of_week == 'monday'
    assert record.type == 'Lab'


@pytest.mark.parametrize(
    ('overrides', 'message'),
    [
        ({'course': '   '}, 'Course is required.'),
        ({'day_of_week': 'someday'}, 'Invalid day of week.'),
        ({'type': 'party'}, 'Invalid schedule type.'),
    ],
)
def test_create_rejects_malformed_fields(store, make_caller, overrides: dict, message: str) -> None:
    owner = make_caller()

    with pytest.raises(ValidationError) as exception_info:
        store.create('schedules', owner, _schedule(**overrides))

    assert exception_info.value.message == message


def test_create_reports_missing_required_field(store, make_caller) -> None:
    owner = make_caller()
    fields = _schedule()
    del fields['location']

    with pytest.raises(ValidationError) as exception_info:
        store.create('schedules', owner, fields)

    assert exception_info.value.message == 'location is required.'


def test_feedback_rating_must_be_between_one_and_five(store, make_caller) -> None:
    owner = make_caller()

    with pytest.raises(ValidationError):
        store.create('feedback', owner, {
            'feedback_type': 'complaint',
            'subject': 'Wi-Fi',
            'description': 'Library Wi-Fi drops every hour.',
            'rating': 6,
        })


def test_new_feedback_starts_under_review_whatever_the_owner_sends(store, make_caller) -> None:
    owner = make_caller()

    record = store.create('feedback', owner, {
        'feedback_type': 'Suggestion',
        'subject': 'Longer library hours',
        'description': 'Open until midnight during exams.',
        'priority': 'HIGH',
        'status': 'resolved',
        'response': 'Done',
    })

    assert record.feedback_type == 'suggestion'
    assert record.priority == 'high'
    assert record.status == 'under_review'
    assert record.response is None


def test_students_cannot_create_lecturer_rows(store, make_caller) -> None:
    student = make_caller(department='CS-Y2')

    with pytest.raises(AuthorizationError):
        store.create('timetable', student, _timetable())

    assert store.list('timetable', student) == []


def test_update_by_owner_refreshes_updated_at(store, make_caller, monkeypatch: pytest.MonkeyPatch) -> None:
    owner = make_caller()
    record = store.create('schedules', owner, _schedule())
    later = datetime(2030, 1, 1, 12, 0)
    monkeypatch.setattr('campusflow.services.record_store.utc_now', lambda: later)

    updated = store.update('schedules', record.id, owner, {'location': 'Library, Room 3'})

    assert updated.location == 'Library, Room 3'
    assert updated.updated_at.replace(tzinfo=None) == later


def test_update_by_other_caller_fails_and_leaves_row_unchanged(store, make_caller) -> None:
    owner = make_caller()
    intruder = make_caller()
    record = store.create('schedules', owner, _schedule())

    with pytest.raises(AuthorizationError):
        store.update('schedules', record.id, intruder, {'course': 'Hijacked'})

    assert store.get('schedules', record.id, owner).course == 'CS101'


def test_update_with_no_fields_is_rejected(store, make_caller) -> None:
    owner = make_caller()
    record = store.create('schedules', owner, _schedule())

    with pytest.raises(ValidationError):
        store.update('schedules', record.id, owner, {})


def test_update_unknown_row_raises_not_found(store, make_caller) -> None:
    owner = make_caller()

    with pytest.raises(NotFoundError):
        store.update('schedules', 999, owner, {'course': 'CS102'})


def test_delete_by_owner_removes_row(store, make_caller) -> None:
    owner = make_caller()
    record = store.create('schedules', owner, _schedule())

    store.delete('schedules', record.id, owner)

    with pytest.raises(NotFoundError):
        store.get('schedules', record.id, owner)


def test_delete_by_other_caller_fails(store, make_caller) -> None:
    owner = make_caller()
    intruder = make_caller()
    record = store.create('schedules', owner, _schedule())

    with pytest.raises(AuthorizationError):
        store.delete('schedules', record.id, intruder)

    assert store.get('schedules', record.id, owner).id == record.id


def test_get_hides_rows_the_caller_cannot_read(store, make_caller) -> None:
    owner = make_caller()
    other = make_caller()
    record = store.create('schedules', owner, _schedule())

    with pytest.raises(NotFoundError):
        store.get('schedules', record.id, other)


def test_unknown_collection_raises_not_found(store, make_caller) -> None:
    with pytest.raises(NotFoundError):
        store.list('library_rooms', make_caller())


def test_unsupported_filter_is_rejected(store, make_caller) -> None:
    with pytest.raises(ValidationError):
        store.list('schedules', make_caller(), {'instructor': 'Dr. Mensah'})


def test_list_filters_and_orders_by_time(store, make_caller) -> None:
    owner = make_caller()
    store.create('schedules', owner, _schedule(course='Late', time='14:00-15:00'))
    store.create('schedules', owner, _schedule(course='Early', time='08:00-09:00'))
    store.create('schedules', owner, _schedule(course='Tuesday', day_of_week='tuesday'))

    rows = store.list('schedules', owner, {'day_of_week': 'monday'})

    assert [row.course for row in rows] == ['Early', 'Late']


def test_class_scoped_rows_are_readable_by_matching_department(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer', department='CS')
    cs_student = make_caller(department='CS-Y2')
    ee_student = make_caller(department='EE-Y1')

    entry = store.create('timetable', lecturer, _timetable('CS-Y2'))
    store.create('timetable', lecturer, _timetable('EE-Y1', subject='Circuits'))

    assert [row.id for row in store.list('timetable', cs_student)] == [entry.id]
    assert [row.subject for row in store.list('timetable', ee_student)] == ['Circuits']
    assert len(store.list('timetable', lecturer)) == 2


def test_broadcast_updates_reach_every_caller(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer')
    cs_student = make_caller(department='CS-Y2')
    ee_student = make_caller(department='EE-Y1')

    store.create('updates', lecturer, {'title': 'Campus closed', 'content': 'Storm warning.'})
    store.create('updates', lecturer, {'title': 'Exam hall', 'content': 'Hall B.', 'target_class': 'ALL'})
    store.create('updates', lecturer, {'title': 'CS lab', 'content': 'Lab moved.', 'target_class': 'CS-Y2'})

    assert {row.title for row in store.list('updates', cs_student)} == {'Campus closed', 'Exam hall', 'CS lab'}
    assert {row.title for row in store.list('updates', ee_student)} == {'Campus closed', 'Exam hall'}


def test_roster_is_private_to_the_lecturer(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer')
    student = make_caller(department='CS-Y2')

    store.create('students', lecturer, {
        'student_name': 'Ama Owusu',
        'student_email': 'AMA@campus.edu',
        'student_id': 'S-1001',
        'class': 'CS-Y2',
    })

    assert store.list('students', student) == []
    assert store.list('students', lecturer)[0].student_email == 'ama@campus.edu'


def test_duplicate_student_id_is_a_validation_error(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer')
    fields = {
        'student_name': 'Kofi Boateng',
        'student_email': 'kofi@campus.edu',
        'student_id': 'S-2001',
        'class': 'CS-Y2',
    }
    store.create('students', lecturer, fields)

    with pytest.raises(ValidationError):
        store.create('students', lecturer, fields)

    assert len(store.list('students', lecturer)) == 1


def test_list_returns_exactly_the_authorized_rows(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer', department='CS')
    callers = [lecturer, make_caller(department='CS-Y2'), make_caller(department='EE-Y1'), make_caller()]

    for class_name in ('CS-Y2', 'EE-Y1', 'ME-Y3'):
        store.create('assignments', lecturer, {
            'title': f'{class_name} project',
            'class': class_name,
            'submission_date': '2030-05-01T17:00:00',
        })
    every_row = store.list('assignments', lecturer)

    for caller in callers:
        visible = {row.id for row in store.list('assignments', caller)}
        expected = {row.id for row in every_row if authorize(Operation.READ, 'assignments', caller, row)}
        assert visible == expected


def test_timetable_end_must_follow_start(store, make_caller) -> None:
    lecturer = make_caller(role='lecturer')

    with pytest.raises(ValidationError) as exception_info:
        store.create('timetable', lecturer, _timetable(start_time='11:00', end_time='10:00'))

    assert exception_info.value.message == 'End time must be after start time.'


def test_notifications_cannot_be_marked_unread(store, make_caller) -> None:
    owner = make_caller()
    notification = store.create('notifications', owner, {'title': 'Hi', 'message': 'Welcome'})
    store.update('notifications', notification.id, owner, {'read': True})

    with pytest.raises(ValidationError):
        store.update('notifications', notification.id, owner, {'read': False})

    assert store.get('notifications', notification.id, owner).read is True


def test_notifications_cannot_be_deleted(store, make_caller) -> None:
    owner = make_caller()
    notification = store.create('notifications', owner, {'title': 'Hi', 'message': 'Welcome'})

    with pytest.raises(ValidationError):
        store.delete('notifications', notification.id, owner)


def test_deliver_rejects_unknown_owner(store) -> None:
    with pytest.raises(NotFoundError):
        store.deliver('notifications', 'missing-profile', {'title': 'Hi', 'message': 'Welcome'})


def test_run_read_retries_transient_failures(db, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'READ_RETRY_ATTEMPTS', 3)
    delays: list[float] = []
    attempts = {'count': 0}

    def flaky_read():
        attempts['count'] += 1
        if attempts['count'] < 3:
            raise OperationalError('SELECT 1', {}, Exception('connection reset'))
        return 'rows'

    assert run_read(db, flaky_read, sleep=delays.append) == 'rows'
    assert attempts['count'] == 3
    assert delays == [config.READ_RETRY_BACKOFF_SECONDS, config.READ_RETRY_BACKOFF_SECONDS * 2]


def test_run_read_surfaces_transient_error_after_retries(db, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'READ_RETRY_ATTEMPTS', 2)

    def failing_read():
        raise OperationalError('SELECT 1', {}, Exception('database is down'))

    with pytest.raises(TransientStoreError):
        run_read(db, failing_read, sleep=lambda _delay: None)


def test_list_filters_accept_the_spellings_create_accepts(store, make_caller) -> None:
    owner = make_caller()
    store.create('schedules', owner, _schedule(course='Lab session', type='lab'))
    store.create('schedules', owner, _schedule(course='Tuesday', day_of_week='tuesday'))

    by_day = store.list('schedules', owner, {'day_of_week': ' Monday '})
    by_type = store.list('schedules', owner, {'type': 'LAB'})

    assert [row.course for row in by_day] == ['Lab session']
    assert [row.course for row in by_type] == ['Lab session']


def test_status_filter_is_case_insensitive(store, make_caller) -> None:
    owner = make_caller()
    store.create('appointments', owner, {
        'service_type': 'Counselling',
        'appointment_date': '2030-02-04',
        'appointment_time': '10:00',
    })

    assert len(store.list('appointments', owner, {'status': 'Pending'})) == 1


def test_filter_with_unknown_choice_is_rejected(store, make_caller) -> None:
    with pytest.raises(ValidationError) as exception_info:
        store.list('schedules', make_caller(), {'day_of_week': 'someday'})

    assert exception_info.value.message == 'Invalid day of week.'
