"""
Auth Schema Definitions

Pydantic models for authentication API endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel


class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    permissions: List[str] = []


class RefreshRequest(BaseModel):
    refresh_token: str


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
