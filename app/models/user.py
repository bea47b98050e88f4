from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime, timezone
import uuid


class Connection(BaseModel):
    user_id: str
    connected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PrivacySettings(BaseModel):
    profile_visibility: str = "public"  # "public", "connections", "private"


class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    username: str
    email: EmailStr
    hashed_password: Optional[str] = None
    name: str = ""
    is_active: bool = True
    permissions: list[str] = []  # e.g. "project:create", "team:request"
    last_logout_at: Optional[datetime] = None

    # Profile
    bio: str = ""
    skills: list[str] = []
    interests: list[str] = []
    looking_for: list[str] = []
    availability: str = "flexible"
    experience: str = "intermediate"
    country: str = ""
    city: str = ""
    github: str = ""
    linkedin: str = ""
    website: str = ""
    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings)

    # Network
    connections: list[Connection] = []
    sent_requests: list[str] = []
    received_requests: list[str] = []

    profile_views: int = 0
    last_seen: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True

    @property
    def connection_ids(self) -> list[str]:
        return [c.user_id for c in self.connections]

    @property
    def has_incomplete_profile(self) -> bool:
        return not self.skills or not self.interests or not self.looking_for
