import logging

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campusflow.auth import jwt_handler
from campusflow.database import SessionLocal, get_db
from campusflow.models.profile import Profile
from campusflow.services.policy import Caller
from campusflow.services.record_store import run_read

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    profile_id = payload.get("sub")
    if not profile_id:
        raise HTTPException(status_code=401, detail="Invalid token subject")

    profile = run_read(db, lambda: db.get(Profile, profile_id))
    if profile is None:
        raise HTTPException(status_code=401, detail="Profile not found")
    return profile


def get_current_caller(profile: Profile = Depends(get_current_profile)) -> Caller:
    return Caller.from_profile(profile)


def get_stream_caller(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Caller:
    """Resolve the caller for long-lived responses.

    The session is closed before returning so an open stream holds no
    pooled connection.
    """
    db = SessionLocal()
    try:
        return get_current_caller(get_current_profile(credentials, db))
    finally:
        db.close()
