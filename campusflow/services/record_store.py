import logging
import time
from datetime import date
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import Boolean, Date, false, or_
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from campusflow.core import config
from campusflow.core.errors import AuthorizationError, NotFoundError, TransientStoreError, ValidationError
from campusflow.models.profile import Profile
from campusflow.services.change_feed import ChangeFeed, change_feed
from campusflow.services.collections import CollectionInfo, get_collection
from campusflow.services.policy import (
    ADMIN_READABLE_COLLECTIONS,
    BROADCAST_COLLECTIONS,
    CLASS_SCOPE_ATTRIBUTES,
    Caller,
    Operation,
    authorize,
)
from campusflow.schemas.choices import BROADCAST_TARGET
from campusflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


def run_read(db: Session, operation: Callable[[], Any], sleep: Callable[[float], None] = time.sleep):
    """Run an idempotent read, retrying transient store failures with backoff."""
    attempts = max(1, config.READ_RETRY_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except TRANSIENT_ERRORS as exc:
            db.rollback()
            if attempt == attempts:
                logger.error('Read failed after %d attempts.', attempts)
                raise TransientStoreError() from exc
            delay = config.READ_RETRY_BACKOFF_SECONDS * (2 ** (attempt - 1))
            logger.warning('Transient store error on attempt %d; retrying in %.2fs.', attempt, delay)
            sleep(delay)
        except SQLAlchemyError as exc:
            db.rollback()
            raise TransientStoreError() from exc


def validate_fields(schema: type[BaseModel], fields: Mapping[str, Any] | None) -> BaseModel:
    if not isinstance(fields, Mapping):
        raise ValidationError('Request body must be an object.')

    try:
        return schema.model_validate(dict(fields))
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field_name = '.'.join(str(part) for part in error['loc'])
        if error['type'] == 'missing':
            raise ValidationError(f'{field_name} is required.') from exc
        if error['type'] == 'value_error':
            # Messages raised by our own validators already name the field.
            raise ValidationError(error['msg'].removeprefix('Value error, ')) from exc
        raise ValidationError(f'{field_name}: {error["msg"]}') from exc


def _coerce_filter_value(column, value):
    if not isinstance(value, str):
        return value
    if isinstance(column.type, Boolean):
        return value.strip().lower() in {'1', 'true', 'yes', 'on'}
    if isinstance(column.type, Date):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(f'Invalid date: {value}') from exc
    return value


class RecordStore:
    """Owner-scoped CRUD over the registered collections.

    Every call takes the caller explicitly; ownership is checked against each
    row the call touches.
    """

    def __init__(self, db: Session, feed: ChangeFeed | None = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.db = db
        self.feed = feed if feed is not None else change_feed
        self._sleep = sleep

    def create(self, collection: str, caller: Caller, fields: Mapping[str, Any]):
        info = get_collection(collection)
        values = validate_fields(info.create_schema, fields).model_dump()
        values[info.owner_attribute] = caller.id
        record = info.model(**values)

        if not authorize(Operation.CREATE, collection, caller, record):
            logger.warning('Caller %s may not create %s rows.', caller.id, collection)
            raise AuthorizationError()

        return self._insert(info, record)

    def deliver(self, collection: str, owner_id: str, fields: Mapping[str, Any]):
        """Insert a row on an owner's behalf from server-side code."""
        info = get_collection(collection)
        values = validate_fields(info.create_schema, fields).model_dump()

        if self.read(lambda: self.db.get(Profile, owner_id)) is None:
            raise NotFoundError(f'Unknown owner: {owner_id}')

        values[info.owner_attribute] = owner_id
        return self._insert(info, info.model(**values))

    def list(self, collection: str, caller: Caller, filters: Mapping[str, Any] | None = None,
             limit: int | None = None) -> list:
        info = get_collection(collection)
        query = self.db.query(info.model).filter(self._read_clause(info, caller))

        for name, value in (filters or {}).items():
            attribute = info.filters.get(name)
            if attribute is None:
                raise ValidationError(f'Unsupported filter for {collection}: {name}')
            column = getattr(info.model, attribute)
            normalizer = info.normalizers.get(attribute)
            if normalizer is not None and isinstance(value, str):
                try:
                    value = normalizer(value)
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc
            query = query.filter(column == _coerce_filter_value(column, value))

        for attribute, descending in info.order_by:
            column = getattr(info.model, attribute)
            query = query.order_by(column.desc() if descending else column.asc())
        newest_first = bool(info.order_by) and info.order_by[0][1]
        query = query.order_by(info.model.id.desc() if newest_first else info.model.id.asc())

        if limit is not None:
            query = query.limit(limit)

        rows = self.read(query.all)
        return [row for row in rows if authorize(Operation.READ, collection, caller, row)]

    def get(self, collection: str, record_id: int, caller: Caller):
        info = get_collection(collection)
        record = self.read(lambda: self.db.get(info.model, record_id))
        if record is None or not authorize(Operation.READ, collection, caller, record):
            raise NotFoundError()
        return record

    def update(self, collection: str, record_id: int, caller: Caller, fields: Mapping[str, Any]):
        info = get_collection(collection)
        record = self._load_for(Operation.UPDATE, info, record_id, caller)

        values = validate_fields(info.update_schema, fields).model_dump(exclude_unset=True)
        if not values:
            raise ValidationError('No fields to update.')

        for attribute, value in values.items():
            setattr(record, attribute, value)
        return self.save(info, record)

    def delete(self, collection: str, record_id: int, caller: Caller) -> None:
        info = get_collection(collection)
        record = self._load_for(Operation.DELETE, info, record_id, caller)
        if not info.deletable:
            raise ValidationError(f'{info.name.replace("_", " ").capitalize()} cannot be deleted.')

        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError() from exc

    def save(self, info: CollectionInfo, record):
        """Commit changes made to a loaded row, refreshing ``updated_at``."""
        if info.tracks_updates:
            record.updated_at = utc_now()

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError('Record conflicts with an existing row.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError() from exc

        self.db.refresh(record)
        return record

    def read(self, operation: Callable[[], Any]):
        return run_read(self.db, operation, sleep=self._sleep)

    def load_for(self, operation: Operation, collection: str, record_id: int, caller: Caller):
        return self._load_for(operation, get_collection(collection), record_id, caller)

    def _load_for(self, operation: Operation, info: CollectionInfo, record_id: int, caller: Caller):
        record = self.read(lambda: self.db.get(info.model, record_id))
        if record is None:
            raise NotFoundError()
        if not authorize(operation, info.name, caller, record):
            logger.warning('Caller %s denied %s on %s/%s.', caller.id, operation.value, info.name, record_id)
            raise AuthorizationError()
        return record

    def _insert(self, info: CollectionInfo, record):
        try:
            self.db.add(record)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError('Record conflicts with an existing row.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError() from exc

        self.db.refresh(record)
        self.feed.publish(info.name, record, info.serialize(record))
        return record

    def _read_clause(self, info: CollectionInfo, caller: Caller):
        owner_column = getattr(info.model, info.owner_attribute)
        if info.name in ADMIN_READABLE_COLLECTIONS and caller.is_admin:
            return owner_column.is_not(None)

        clauses = [owner_column == caller.id]

        scope_attribute = CLASS_SCOPE_ATTRIBUTES.get(info.name)
        if scope_attribute is not None:
            scope_column = getattr(info.model, scope_attribute)
            if caller.department:
                clauses.append(scope_column == caller.department)
            if info.name in BROADCAST_COLLECTIONS:
                clauses.append(scope_column.is_(None))
                clauses.append(scope_column.in_(['', BROADCAST_TARGET]))

        return or_(false(), *clauses)
