import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.constants import (
    PROJECT_STATUS_IN_PROGRESS,
    TEAM_REQUEST_PENDING,
    TEAM_ROLE_MEMBER,
    TEAM_ROLE_OWNER,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TeamSettings(BaseModel):
    allow_team_requests: bool = True
    max_team_size: int = 5
    required_skills: List[str] = []


class ProjectTeamMember(BaseModel):
    user_id: str
    role: str = TEAM_ROLE_MEMBER  # "owner", "admin", "member"
    joined_at: datetime = Field(default_factory=_now)
    skills: List[str] = []


class TeamRequest(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    message: str = ""
    skills: List[str] = []
    status: str = TEAM_REQUEST_PENDING  # "pending", "accepted", "rejected"
    created_at: datetime = Field(default_factory=_now)
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None


class ProjectComment(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    content: str
    created_at: datetime = Field(default_factory=_now)


class Project(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    owner_id: str
    title: str
    description: str
    github_url: str
    project_url: Optional[str] = None
    technologies: List[str] = []
    status: str = PROJECT_STATUS_IN_PROGRESS  # "in-progress", "completed", "on-hold"
    is_public: bool = True
    featured: bool = False
    likes: List[str] = []
    comments: List[ProjectComment] = []
    team_settings: TeamSettings = Field(default_factory=TeamSettings)
    team_members: List[ProjectTeamMember] = []
    team_requests: List[TeamRequest] = []
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True

    def get_member(self, user_id: str) -> Optional[ProjectTeamMember]:
        for member in self.team_members:
            if member.user_id == user_id:
                return member
        return None

    def member_role(self, user_id: str) -> Optional[str]:
        member = self.get_member(user_id)
        if member:
            return member.role
        # Projects created before team support only carry owner_id
        if user_id == self.owner_id:
            return TEAM_ROLE_OWNER
        return None

    def is_team_member(self, user_id: str) -> bool:
        return self.member_role(user_id) is not None

    def get_request(self, request_id: str) -> Optional[TeamRequest]:
        for request in self.team_requests:
            if request.id == request_id:
                return request
        return None

    def pending_request_for(self, user_id: str) -> Optional[TeamRequest]:
        for request in self.team_requests:
            if request.user_id == user_id and request.status == TEAM_REQUEST_PENDING:
                return request
        return None

    @property
    def pending_team_requests_count(self) -> int:
        return sum(1 for r in self.team_requests if r.status == TEAM_REQUEST_PENDING)

    @property
    def is_full(self) -> bool:
        return len(self.team_members) >= self.team_settings.max_team_size
