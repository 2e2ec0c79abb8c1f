from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from campusflow.auth.dependencies import get_current_caller
from campusflow.database import get_db
from campusflow.schemas.profile_schemas import LecturerDirectoryEntry
from campusflow.services import profile_service
from campusflow.services.policy import Caller

router = APIRouter(tags=['profiles'])


@router.get('/lecturers', response_model=list[LecturerDirectoryEntry])
def list_lecturers(
    department: str | None = Query(default=None),
    q: str | None = Query(default=None),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    lecturers = profile_service.list_lecturers(db, department=department, query=q)
    return [LecturerDirectoryEntry.model_validate(lecturer) for lecturer in lecturers]
