from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from app.core.config import settings
from app.core.constants import (
    PROJECT_STATUSES,
    PROJECT_STATUS_IN_PROGRESS,
    TEAM_ROLE_ADMIN,
    TEAM_ROLE_MEMBER,
)


def _clean_list(values: List[str]) -> List[str]:
    """Strip entries, drop blanks and keep first occurrences only."""
    seen = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


def _validate_url(v: Optional[str], required: bool = False) -> Optional[str]:
    """Blank optional URLs become None. Required URLs must be http(s)."""
    v = v.strip() if isinstance(v, str) else v
    if not v:
        if required:
            raise ValueError("A URL is required")
        return None
    if not v.startswith(("http://", "https://")):
        raise ValueError("Please provide a valid URL")
    return v


def _validate_project_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in PROJECT_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(PROJECT_STATUSES)}")
    return v


class ProjectBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=100, description="Project title", example="DevMatch")
    description: str = Field(..., min_length=10, max_length=1000, description="What the project is about")
    github_url: str = Field(..., description="Repository URL", example="https://github.com/acme/devmatch")
    project_url: Optional[str] = Field(None, description="Live demo URL")
    technologies: List[str] = Field(..., min_length=1, description="At least one technology")
    status: str = Field(PROJECT_STATUS_IN_PROGRESS, description="in-progress, completed or on-hold")
    is_public: bool = True

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("technologies")
    @classmethod
    def clean_technologies(cls, v: List[str]) -> List[str]:
        v = _clean_list(v)
        if not v:
            raise ValueError("At least one technology is required")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _validate_project_status(v)

    @field_validator("github_url")
    @classmethod
    def validate_github_url(cls, v: str) -> str:
        return _validate_url(v, required=True)

    @field_validator("project_url")
    @classmethod
    def validate_project_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url(v)


class ProjectCreate(ProjectBase):
    allow_team_requests: bool = True
    max_team_size: int = Field(
        settings.DEFAULT_MAX_TEAM_SIZE,
        ge=1,
        le=settings.MAX_TEAM_SIZE_LIMIT,
        description="Maximum team size, owner included",
    )
    required_skills: List[str] = []

    @field_validator("required_skills")
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        return _clean_list(v)


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    github_url: Optional[str] = None
    project_url: Optional[str] = None
    technologies: Optional[List[str]] = None
    status: Optional[str] = None
    is_public: Optional[bool] = None
    allow_team_requests: Optional[bool] = None
    max_team_size: Optional[int] = Field(None, ge=1, le=settings.MAX_TEAM_SIZE_LIMIT)
    required_skills: Optional[List[str]] = None

    @field_validator("technologies")
    @classmethod
    def clean_technologies(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        v = _clean_list(v)
        if not v:
            raise ValueError("At least one technology is required")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _validate_project_status(v)

    @field_validator("github_url")
    @classmethod
    def validate_github_url(cls, v: Optional[str]) -> Optional[str]:
        # None leaves the stored URL untouched; it cannot be cleared
        return None if v is None else _validate_url(v, required=True)

    @field_validator("project_url")
    @classmethod
    def validate_project_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url(v)


class ProjectCommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=500)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class TeamRequestCreate(BaseModel):
    message: Optional[str] = Field(None, max_length=500, description="Why you want to join")
    skills: List[str] = Field(..., description="Skills you bring to the team")

    @field_validator("skills")
    @classmethod
    def require_skill(cls, v: List[str]) -> List[str]:
        v = _clean_list(v)
        if not v:
            raise ValueError("At least one skill is required")
        return v


class TeamMemberRoleUpdate(BaseModel):
    role: str = Field(..., description="admin or member", example="admin")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        if v not in [TEAM_ROLE_ADMIN, TEAM_ROLE_MEMBER]:
            raise ValueError("Role must be one of: admin, member")
        return v


class UserSummary(BaseModel):
    """Minimal user info embedded next to user references."""

    username: Optional[str] = None
    name: Optional[str] = None


class TeamMemberResponse(UserSummary):
    user_id: str
    role: str
    joined_at: datetime
    skills: List[str] = []


class TeamRequestResponse(UserSummary):
    id: str
    user_id: str
    message: str = ""
    skills: List[str] = []
    status: str
    created_at: datetime
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None


class ProjectCommentResponse(UserSummary):
    id: str
    user_id: str
    content: str
    created_at: datetime


class TeamSettingsResponse(BaseModel):
    allow_team_requests: bool
    max_team_size: int
    required_skills: List[str] = []


class ProjectResponse(BaseModel):
    id: str = Field(..., alias="_id")
    owner_id: str
    owner: Optional[UserSummary] = None
    title: str
    description: str
    github_url: str
    project_url: Optional[str] = None
    technologies: List[str] = []
    status: str
    is_public: bool
    featured: bool = False
    likes: List[str] = []
    comments: List[ProjectCommentResponse] = []
    team_settings: TeamSettingsResponse
    team_members: List[TeamMemberResponse] = []
    team_requests: List[TeamRequestResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True

    @computed_field
    @property
    def like_count(self) -> int:
        return len(self.likes)

    @computed_field
    @property
    def comment_count(self) -> int:
        return len(self.comments)

    @computed_field
    @property
    def team_member_count(self) -> int:
        return len(self.team_members)

    @computed_field
    @property
    def pending_team_requests_count(self) -> int:
        return sum(1 for r in self.team_requests if r.status == "pending")


class ProjectList(BaseModel):
    items: List[ProjectResponse]
    total: int
    page: int
    size: int
    pages: int


class ProjectSummary(BaseModel):
    id: str
    title: str
    owner_id: str
    status: str


class MyTeamRequest(BaseModel):
    project: ProjectSummary
    request: TeamRequestResponse


class LikeToggleResponse(BaseModel):
    liked: bool
    like_count: int
