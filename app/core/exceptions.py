"""
Domain Exceptions

Error taxonomy shared by services and endpoints. Services raise these;
the handler registered in app.main turns them into JSON responses so
callers can tell validation problems, failed preconditions and missing
resources apart.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorCode(str, Enum):
    # Validation
    INVALID_INPUT = "invalid_input"
    INVALID_ASSIGNEE = "invalid_assignee"
    INVALID_TEAM_SIZE = "invalid_team_size"

    # Preconditions
    PROJECT_NOT_ACCEPTING = "project_not_accepting"
    REQUESTS_DISABLED = "requests_disabled"
    ALREADY_MEMBER = "already_member"
    REQUEST_PENDING = "request_pending"
    TEAM_FULL = "team_full"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    REQUEST_ALREADY_DECIDED = "request_already_decided"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    CONNECTION_EXISTS = "connection_exists"
    CONNECTION_REQUEST_MISSING = "connection_request_missing"

    # Permissions
    NOT_TEAM_MEMBER = "not_team_member"
    INSUFFICIENT_ROLE = "insufficient_role"
    OWNER_REMOVAL = "owner_removal"

    # Lookups
    NOT_FOUND = "not_found"


class SkillSyncError(Exception):
    """Base exception for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details


class ValidationError(SkillSyncError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorCode.INVALID_INPUT


class PreconditionFailed(SkillSyncError):
    """The request is well-formed but the current state does not allow it."""

    status_code = status.HTTP_409_CONFLICT
    default_code = ErrorCode.CONCURRENT_MODIFICATION


class PermissionDenied(PreconditionFailed):
    """The actor lacks the project role the operation requires."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.INSUFFICIENT_ROLE


class NotFound(SkillSyncError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.NOT_FOUND


async def skillsync_exception_handler(request: Request, exc: SkillSyncError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "code": exc.code.value,
            "details": exc.details,
        },
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies and parameters as 400 invalid_input."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation failed",
            "code": ErrorCode.INVALID_INPUT.value,
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )
