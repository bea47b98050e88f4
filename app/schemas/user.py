import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.constants import (
    AVAILABILITY_OPTIONS,
    EXPERIENCE_LEVELS,
    LOOKING_FOR_OPTIONS,
    PROFILE_VISIBILITIES,
)


def validate_password_strength(password: str) -> str:
    """Validate password meets security requirements."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Za-z]", password):
        raise ValueError("Password must contain at least one letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one digit")
    return password


def _clean_list(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    cleaned = []
    for item in v:
        item = item.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


class UserSignup(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.-]+$")
    name: str = Field(..., min_length=1, max_length=100)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return validate_password_strength(v)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    looking_for: Optional[List[str]] = None
    availability: Optional[str] = None
    experience: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None

    @field_validator("skills", "interests")
    @classmethod
    def clean_lists(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_list(v)

    @field_validator("looking_for")
    @classmethod
    def validate_looking_for(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        v = _clean_list(v)
        if v:
            invalid = [item for item in v if item not in LOOKING_FOR_OPTIONS]
            if invalid:
                raise ValueError(f"Invalid lookingFor values: {', '.join(invalid)}")
        return v

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in AVAILABILITY_OPTIONS:
            raise ValueError(f"Availability must be one of: {', '.join(AVAILABILITY_OPTIONS)}")
        return v

    @field_validator("experience")
    @classmethod
    def validate_experience(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in EXPERIENCE_LEVELS:
            raise ValueError(f"Experience must be one of: {', '.join(EXPERIENCE_LEVELS)}")
        return v


class PrivacySettingsUpdate(BaseModel):
    profile_visibility: str

    @field_validator("profile_visibility")
    @classmethod
    def validate_visibility(cls, v: str) -> str:
        if v not in PROFILE_VISIBILITIES:
            raise ValueError(f"Visibility must be one of: {', '.join(PROFILE_VISIBILITIES)}")
        return v


class PublicProfile(BaseModel):
    """Profile fields safe to show to other users."""

    id: str = Field(..., alias="_id")
    username: str
    name: str = ""
    bio: str = ""
    skills: List[str] = []
    interests: List[str] = []
    looking_for: List[str] = []
    availability: str = "flexible"
    experience: str = "intermediate"
    country: str = ""
    city: str = ""
    github: str = ""
    linkedin: str = ""
    website: str = ""
    last_seen: Optional[datetime] = None

    class Config:
        populate_by_name = True


class UserResponse(PublicProfile):
    """The caller's own account, including private fields."""

    email: EmailStr
    is_active: bool = True
    permissions: List[str] = []
    profile_views: int = 0
    privacy_settings: PrivacySettingsUpdate
    created_at: Optional[datetime] = None


class UserSearchResults(BaseModel):
    items: List[PublicProfile]
    total: int
    page: int
    size: int
    pages: int


class MatchSuggestion(PublicProfile):
    match_score: int


class MatchSuggestionsResponse(BaseModel):
    matches: List[MatchSuggestion]
    message: Optional[str] = None


class UserStats(BaseModel):
    connections: int
    profile_views: int
    sent_requests: int
    received_requests: int
    projects_owned: int


class ConnectionEntry(BaseModel):
    user: PublicProfile
    connected_at: datetime


class ConnectionsResponse(BaseModel):
    connections: List[ConnectionEntry]
    sent_requests: List[PublicProfile]
    received_requests: List[PublicProfile]
