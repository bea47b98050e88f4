"""
OpenAPI response definitions for route decorators.

Domain errors share one body shape (ErrorResponse), so the documented
error statuses point at it.

Usage:
    @router.post("/{project_id}/team-request", responses=RESP_AUTH_400_409_404)
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    code: str
    details: Optional[Dict[str, Any]] = None


def _error(description: str) -> Dict[str, Any]:
    return {"description": description, "model": ErrorResponse}


# Atomic response definitions
RESP_400 = {400: _error("Invalid input")}
RESP_401 = {401: {"description": "Not authenticated"}}
RESP_403 = {403: _error("Not enough permissions or insufficient team role")}
RESP_404 = {404: _error("Resource not found")}
RESP_409 = {409: _error("The current state does not allow this operation")}

# Common composites
RESP_AUTH = {**RESP_401, **RESP_403}
RESP_AUTH_400 = {**RESP_AUTH, **RESP_400}
RESP_AUTH_404 = {**RESP_AUTH, **RESP_404}
RESP_AUTH_400_404 = {**RESP_AUTH, **RESP_400, **RESP_404}
RESP_AUTH_409_404 = {**RESP_AUTH, **RESP_409, **RESP_404}
RESP_AUTH_400_409_404 = {**RESP_AUTH, **RESP_400, **RESP_409, **RESP_404}
