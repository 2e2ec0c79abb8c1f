import pytest

from campusflow.core.errors import AuthorizationError, NotFoundError, ValidationError
from campusflow.services.feedback_service import respond_to_feedback
from campusflow.services.notification_service import NotificationService


def _submit_feedback(store, owner):
    return store.create('feedback', owner, {
        'feedback_type': 'complaint',
        'subject': 'Cafeteria hours',
        'description': 'The cafeteria closes before evening classes end.',
        'priority': 'high',
    })


def test_admin_response_updates_feedback_and_notifies_author(store, db, make_caller) -> None:
    author = make_caller()
    admin = make_caller(email='registrar@admin.edu')
    feedback = _submit_feedback(store, author)

    updated = respond_to_feedback(db, feedback.id, admin, {
        'status': 'Resolved',
        'response': 'Hours extended to 9pm.',
    }, store=store)

    assert updated.status == 'resolved'
    assert updated.response == 'Hours extended to 9pm.'

    notifications = NotificationService(db, store).list_recent(author.id)
    assert len(notifications) == 1
    assert notifications[0].type == 'feedback'
    assert notifications[0].message == 'Your feedback has been resolved.'
    assert notifications[0].extra == {'feedback_id': feedback.id, 'status': 'resolved'}


def test_status_only_response_keeps_existing_reply(store, db, make_caller) -> None:
    author = make_caller()
    admin = make_caller(email='dean@admin.edu')
    feedback = _submit_feedback(store, author)
    respond_to_feedback(db, feedback.id, admin, {'status': 'in_progress', 'response': 'Looking into it.'}, store=store)

    updated = respond_to_feedback(db, feedback.id, admin, {'status': 'closed'}, store=store)

    assert updated.status == 'closed'
    assert updated.response == 'Looking into it.'


def test_author_cannot_respond_to_own_feedback(store, db, make_caller) -> None:
    author = make_caller()
    feedback = _submit_feedback(store, author)

    with pytest.raises(AuthorizationError):
        respond_to_feedback(db, feedback.id, author, {'status': 'resolved'}, store=store)

    assert store.get('feedback', feedback.id, author).status == 'under_review'


def test_response_requires_a_known_status(store, db, make_caller) -> None:
    author = make_caller()
    admin = make_caller(email='dean@admin.edu')
    feedback = _submit_feedback(store, author)

    with pytest.raises(ValidationError):
        respond_to_feedback(db, feedback.id, admin, {'status': 'ignored'}, store=store)


def test_response_to_missing_feedback_is_not_found(store, db, make_caller) -> None:
    admin = make_caller(email='dean@admin.edu')

    with pytest.raises(NotFoundError):
        respond_to_feedback(db, 404, admin, {'status': 'resolved'}, store=store)


def test_admin_lists_every_feedback_row(store, make_caller) -> None:
    first_author = make_caller()
    second_author = make_caller()
    admin = make_caller(email='dean@admin.edu')
    _submit_feedback(store, first_author)
    _submit_feedback(store, second_author)

    assert len(store.list('feedback', admin)) == 2
    assert len(store.list('feedback', first_author)) == 1
