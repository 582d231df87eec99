# activity_sessions/api/errors.py
"""
Translation of service exceptions into HTTP responses.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from activity_sessions.core.exceptions import (
    ActivityNotFoundError,
    ActivityServiceError,
    AlreadyParticipatingError,
    CapacityConflictError,
    InvalidActivityError,
    NotActivityOwnerError,
    NotParticipatingError,
    SessionCancelledError,
    SessionNotFoundError,
)

_STATUS_BY_ERROR = (
    (ActivityNotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionCancelledError, status.HTTP_409_CONFLICT),
    (AlreadyParticipatingError, status.HTTP_409_CONFLICT),
    (NotParticipatingError, status.HTTP_409_CONFLICT),
    (CapacityConflictError, status.HTTP_409_CONFLICT),
    (NotActivityOwnerError, status.HTTP_403_FORBIDDEN),
    (InvalidActivityError, status.HTTP_400_BAD_REQUEST),
)


def status_code_for(exc: ActivityServiceError) -> int:
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: ActivityServiceError) -> HTTPException:
    return HTTPException(status_code=status_code_for(exc), detail=exc.message)


async def activity_service_error_handler(request: Request, exc: ActivityServiceError) -> JSONResponse:
    """FastAPI exception handler for service errors not translated by an endpoint."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": exc.message, "error_code": exc.error_code},
    )
