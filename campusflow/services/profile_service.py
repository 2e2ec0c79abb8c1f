import logging
from typing import Any, Mapping

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusflow.core.errors import NotFoundError, TransientStoreError, ValidationError
from campusflow.models.profile import Profile
from campusflow.schemas.choices import optional_text
from campusflow.schemas.profile_schemas import SignInIdentity, UpdateProfileRequest
from campusflow.services.policy import LECTURER_ROLE, Caller
from campusflow.services.record_store import run_read, validate_fields
from campusflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


def register_profile(db: Session, identity: SignInIdentity, provider: str = 'onelogin') -> Profile:
    """Return the profile for a signed-in identity, creating it on first sign-in."""
    profile = run_read(
        db,
        lambda: db.query(Profile)
        .filter((Profile.sso_subject == identity.subject) | (Profile.email == identity.email))
        .first(),
    )

    try:
        if profile is None:
            profile = Profile(
                email=identity.email,
                full_name=identity.full_name,
                role=identity.role,
                department=identity.department,
                sso_provider=provider,
                sso_subject=identity.subject,
            )
            db.add(profile)
            logger.info('Created profile for %s', identity.email)
        else:
            profile.sso_provider = profile.sso_provider or provider
            profile.sso_subject = profile.sso_subject or identity.subject
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise TransientStoreError() from exc

    db.refresh(profile)
    return profile


def get_profile(db: Session, profile_id: str) -> Profile:
    profile = run_read(db, lambda: db.get(Profile, profile_id))
    if profile is None:
        raise NotFoundError()
    return profile


def update_profile(db: Session, caller: Caller, fields: Mapping[str, Any]) -> Profile:
    """Users edit their own profile only; role and email are not editable."""
    profile = get_profile(db, caller.id)

    values = validate_fields(UpdateProfileRequest, fields).model_dump(exclude_unset=True)
    if not values:
        raise ValidationError('No fields to update.')

    for attribute, value in values.items():
        setattr(profile, attribute, value)
    profile.updated_at = utc_now()

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise TransientStoreError() from exc

    db.refresh(profile)
    return profile


def list_lecturers(db: Session, department: str | None = None, query: str | None = None) -> list[Profile]:
    """Faculty directory: lecturers by name, optionally narrowed by department and a search term.

    The search matches name, department or email, ignoring case.
    """
    statement = db.query(Profile).filter(Profile.role == LECTURER_ROLE)

    department = optional_text(department)
    if department is not None and department.lower() != 'all':
        statement = statement.filter(Profile.department == department)

    query = optional_text(query)
    if query is not None:
        statement = statement.filter(or_(
            Profile.full_name.icontains(query, autoescape=True),
            Profile.department.icontains(query, autoescape=True),
            Profile.email.icontains(query, autoescape=True),
        ))

    return run_read(db, statement.order_by(Profile.full_name.asc(), Profile.id.asc()).all)
