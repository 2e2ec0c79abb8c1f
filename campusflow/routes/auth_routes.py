import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from campusflow.auth import jwt_handler, saml
from campusflow.auth.dependencies import get_current_caller, get_current_profile
from campusflow.core import config
from campusflow.database import get_db
from campusflow.models.profile import Profile
from campusflow.schemas.profile_schemas import ProfileResponse
from campusflow.services import profile_service
from campusflow.services.policy import Caller

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


async def _saml_request_data(request: Request) -> dict:
    form_data = await request.form()
    return saml.build_request_data(
        url=str(request.url),
        host=request.headers.get("host", ""),
        query_params=dict(request.query_params),
        form_data=dict(form_data),
    )


def _token_response(profile: Profile):
    token = jwt_handler.create_access_token(profile.id, email=profile.email)
    if config.FRONTEND_SSO_REDIRECT_URL:
        parsed = urlparse(config.FRONTEND_SSO_REDIRECT_URL)
        query = dict(parse_qsl(parsed.query))
        query.update({"access_token": token, "token_type": "bearer"})
        return RedirectResponse(url=urlunparse(parsed._replace(query=urlencode(query))), status_code=302)
    return {"access_token": token, "token_type": "bearer"}


@router.get("/sso/login")
async def sso_login(request: Request):
    auth = saml.init_saml_auth(await _saml_request_data(request))
    return RedirectResponse(url=auth.login())


@router.post("/sso/acs")
async def sso_acs(request: Request, db: Session = Depends(get_db)):
    auth = saml.init_saml_auth(await _saml_request_data(request))
    auth.process_response()
    errors = auth.get_errors()
    if errors:
        logger.warning("SAML response rejected: %s", errors)
        raise HTTPException(status_code=400, detail={"saml_errors": errors})
    if not auth.is_authenticated():
        raise HTTPException(status_code=401, detail="SAML authentication failed")

    try:
        identity = saml.extract_identity(auth.get_attributes(), auth.get_nameid())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Email not found in SAML response") from exc

    profile = profile_service.register_profile(db, identity)
    return _token_response(profile)


@router.get("/sso/metadata")
def sso_metadata():
    metadata, errors = saml.generate_sp_metadata()
    if errors:
        raise HTTPException(status_code=500, detail={"metadata_errors": errors})
    return Response(content=metadata, media_type="application/xml")


@router.get("/sso/logout")
async def sso_logout(request: Request):
    auth = saml.init_saml_auth(await _saml_request_data(request))
    return RedirectResponse(url=auth.logout())


@router.get("/me", response_model=ProfileResponse)
def me(current_profile: Profile = Depends(get_current_profile)):
    return current_profile


@router.patch("/me", response_model=ProfileResponse)
def update_me(
    fields: dict = Body(...),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return profile_service.update_profile(db, caller, fields)
