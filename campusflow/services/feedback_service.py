import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from campusflow.models.feedback import Feedback
from campusflow.schemas.personal_schemas import RespondFeedbackRequest
from campusflow.services.collections import get_collection
from campusflow.services.notification_service import NotificationService
from campusflow.services.policy import Caller, Operation
from campusflow.services.record_store import RecordStore, validate_fields

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    'under_review': 'is under review',
    'in_progress': 'is in progress',
    'resolved': 'has been resolved',
    'closed': 'has been closed',
}


def respond_to_feedback(db: Session, feedback_id: int, caller: Caller,
                        fields: Mapping[str, Any], store: RecordStore | None = None) -> Feedback:
    """Record an administrator's status change and reply, then tell the author."""
    store = store or RecordStore(db)
    data = validate_fields(RespondFeedbackRequest, fields)

    feedback = store.load_for(Operation.RESPOND, 'feedback', feedback_id, caller)
    feedback.status = data.status
    if data.response is not None:
        feedback.response = data.response
    feedback = store.save(get_collection('feedback'), feedback)

    logger.info('Feedback %s moved to %s by %s', feedback.id, feedback.status, caller.id)

    NotificationService(db, store).notify(
        feedback.user_id,
        title=f'Feedback update: {feedback.subject}',
        message=f'Your feedback {STATUS_LABELS[feedback.status]}.',
        type='feedback',
        metadata={'feedback_id': feedback.id, 'status': feedback.status},
    )
    return feedback
