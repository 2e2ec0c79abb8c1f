from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from campusflow.auth.dependencies import get_current_caller
from campusflow.database import get_db
from campusflow.schemas.personal_schemas import NotificationResponse
from campusflow.services.notification_service import NotificationService
from campusflow.services.policy import Caller

router = APIRouter(tags=['notifications'])


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


@router.get('', response_model=list[NotificationResponse])
def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=100),
    caller: Caller = Depends(get_current_caller),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_recent(caller.id, limit)


@router.get('/unread-count', response_model=UnreadCountResponse)
def unread_count(
    caller: Caller = Depends(get_current_caller),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountResponse(unread=service.unread_count(caller.id))


@router.post('/read-all', response_model=MarkAllReadResponse)
def mark_all_read(
    caller: Caller = Depends(get_current_caller),
    service: NotificationService = Depends(get_notification_service),
):
    return MarkAllReadResponse(updated=service.mark_all_read(caller.id))


@router.post('/{notification_id}/read', status_code=status.HTTP_204_NO_CONTENT)
def mark_read(
    notification_id: int,
    caller: Caller = Depends(get_current_caller),
    service: NotificationService = Depends(get_notification_service),
):
    service.mark_read(notification_id, caller.id)
