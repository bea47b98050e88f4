from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.constants import TASK_PRIORITIES, TASK_STATUSES
from app.schemas.project import UserSummary


def _validate_choice(v: Optional[str], choices: List[str], label: str) -> Optional[str]:
    if v is not None and v not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return v


def _clean_tags(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    return [tag.strip() for tag in v if tag and tag.strip()]


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    status: str = "todo"
    priority: str = "medium"
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    tags: List[str] = []

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _validate_choice(v, TASK_STATUSES, "Status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        return _validate_choice(v, TASK_PRIORITIES, "Priority")

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class TaskUpdate(BaseModel):
    """Partial update. Any status may follow any other status."""

    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    tags: Optional[List[str]] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _validate_choice(v, TASK_STATUSES, "Status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        return _validate_choice(v, TASK_PRIORITIES, "Priority")

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(v)


class TaskCommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class TaskCommentResponse(BaseModel):
    id: str
    author_id: str
    author: Optional[UserSummary] = None
    content: str
    created_at: datetime


class TaskResponse(BaseModel):
    id: str = Field(..., alias="_id")
    project_id: str
    title: str
    description: str
    status: str
    priority: str
    assignee_id: Optional[str] = None
    assignee: Optional[UserSummary] = None
    created_by: str
    creator: Optional[UserSummary] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    tags: List[str] = []
    comments: List[TaskCommentResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


class TaskStats(BaseModel):
    todo: int = 0
    in_progress: int = 0
    review: int = 0
    done: int = 0

    @classmethod
    def from_counts(cls, counts: Dict[str, int]) -> "TaskStats":
        return cls(
            todo=counts.get("todo", 0),
            in_progress=counts.get("in-progress", 0),
            review=counts.get("review", 0),
            done=counts.get("done", 0),
        )
