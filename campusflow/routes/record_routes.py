from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from campusflow.auth.dependencies import get_current_caller
from campusflow.database import get_db
from campusflow.services import feedback_service
from campusflow.services.collections import COLLECTIONS, get_collection
from campusflow.services.policy import Caller
from campusflow.services.record_store import RecordStore

router = APIRouter(tags=['records'])

RESERVED_QUERY_PARAMS = {'limit'}
MAX_LIST_LIMIT = 200


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


@router.get('')
def list_collections():
    return sorted(COLLECTIONS)


@router.post('/feedback/{feedback_id}/response')
def respond_to_feedback(
    feedback_id: int,
    fields: dict = Body(...),
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    feedback = feedback_service.respond_to_feedback(store.db, feedback_id, caller, fields, store=store)
    return get_collection('feedback').serialize(feedback)


@router.get('/{collection}')
def list_records(
    collection: str,
    request: Request,
    limit: int | None = Query(default=None, ge=1, le=MAX_LIST_LIMIT),
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    info = get_collection(collection)
    filters = {
        name: value
        for name, value in request.query_params.items()
        if name not in RESERVED_QUERY_PARAMS
    }
    records = store.list(info.name, caller, filters, limit=limit)
    return [info.serialize(record) for record in records]


@router.post('/{collection}', status_code=status.HTTP_201_CREATED)
def create_record(
    collection: str,
    fields: dict = Body(...),
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    info = get_collection(collection)
    return info.serialize(store.create(info.name, caller, fields))


@router.get('/{collection}/{record_id}')
def get_record(
    collection: str,
    record_id: int,
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    info = get_collection(collection)
    return info.serialize(store.get(info.name, record_id, caller))


@router.patch('/{collection}/{record_id}')
def update_record(
    collection: str,
    record_id: int,
    fields: dict = Body(...),
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    info = get_collection(collection)
    return info.serialize(store.update(info.name, record_id, caller, fields))


@router.delete('/{collection}/{record_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    collection: str,
    record_id: int,
    caller: Caller = Depends(get_current_caller),
    store: RecordStore = Depends(get_store),
):
    info = get_collection(collection)
    store.delete(info.name, record_id, caller)
