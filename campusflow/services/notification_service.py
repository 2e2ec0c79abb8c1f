import logging
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusflow.core import config
from campusflow.core.errors import NotFoundError, TransientStoreError
from campusflow.models.notification import Notification
from campusflow.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Reads and read-state transitions for a user's notifications.

    A notification moves from unread to read exactly once; nothing here
    resets the flag.
    """

    def __init__(self, db: Session, store: RecordStore | None = None):
        self.db = db
        self.store = store or RecordStore(db)

    def list_recent(self, owner_id: str, limit: int | None = None) -> list[Notification]:
        """Newest first, capped at ``limit`` (defaults to NOTIFICATION_LIST_LIMIT)."""
        limit = limit or config.NOTIFICATION_LIST_LIMIT
        query = (
            select(Notification)
            .where(Notification.user_id == owner_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(self.store.read(lambda: self.db.execute(query).scalars().all()))

    def unread_count(self, owner_id: str) -> int:
        query = select(func.count(Notification.id)).where(
            and_(
                Notification.user_id == owner_id,
                Notification.read.is_(False),
            )
        )
        return self.store.read(lambda: self.db.execute(query).scalar()) or 0

    def mark_read(self, notification_id: int, owner_id: str) -> None:
        query = select(Notification).where(
            and_(
                Notification.id == notification_id,
                Notification.user_id == owner_id,
            )
        )
        notification = self.store.read(lambda: self.db.execute(query).scalar_one_or_none())

        if notification is None:
            logger.warning('Notification %s not found for user %s', notification_id, owner_id)
            raise NotFoundError()

        if notification.read:
            return

        notification.read = True
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError() from exc

        logger.info('Marked notification %s as read for user %s', notification_id, owner_id)

    def mark_all_read(self, owner_id: str) -> int:
        try:
            result = self.db.execute(
                update(Notification)
                .where(
                    and_(
                        Notification.user_id == owner_id,
                        Notification.read.is_(False),
                    )
                )
                .values(read=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError() from exc

        updated_count = result.rowcount or 0
        logger.info('Marked %d notifications as read for user %s', updated_count, owner_id)
        return updated_count

    def notify(self, owner_id: str, title: str, message: str, type: str = 'general',
               metadata: Any | None = None) -> Notification:
        """Create a notification for ``owner_id`` and push it to live subscribers."""
        return self.store.deliver(
            'notifications',
            owner_id,
            {'title': title, 'message': message, 'type': type, 'metadata': metadata},
        )
