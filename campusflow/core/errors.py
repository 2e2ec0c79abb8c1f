"""Error taxonomy shared by the services and mapped to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = 'Record not found.'
STORE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'


class CampusFlowError(Exception):
    """Base class for errors raised by the data-access layer."""

    default_message = 'Request failed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CampusFlowError):
    """A required field is missing or malformed. Never retried."""

    default_message = 'Invalid request.'


class AuthorizationError(CampusFlowError):
    """The caller does not own the row, or is outside its class scope.

    Rendered exactly like ``NotFoundError`` so a foreign row's existence
    is never revealed.
    """

    default_message = NOT_FOUND_DETAIL


class NotFoundError(CampusFlowError):
    default_message = NOT_FOUND_DETAIL


class TransientStoreError(CampusFlowError):
    """The store could not be reached; raised after read retries run out."""

    default_message = STORE_UNAVAILABLE_DETAIL


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info('Rejected %s %s: %s', request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'detail': exc.message})

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        logger.warning('Denied %s %s: %s', request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={'detail': NOT_FOUND_DETAIL})

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={'detail': NOT_FOUND_DETAIL})

    @app.exception_handler(TransientStoreError)
    async def transient_store_error_handler(request: Request, exc: TransientStoreError):
        logger.error('Store unavailable during %s %s', request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={'detail': STORE_UNAVAILABLE_DETAIL},
        )
