from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from campusflow.auth.dependencies import get_current_caller
from campusflow.database import get_db
from campusflow.services.policy import Caller
from campusflow.services.record_store import RecordStore
from campusflow.services.schedule_view import build_day_view, today_name

router = APIRouter(tags=['schedule'])


@router.get('')
def day_schedule(
    day: str | None = Query(default=None),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    items = build_day_view(RecordStore(db), caller, day or today_name())
    return [item.to_dict() for item in items]
