from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.constants import DISCUSSION_CATEGORIES
from app.schemas.project import UserSummary


def normalize_tags(values: List[str]) -> List[str]:
    """Lowercase, drop a leading #, skip blanks and duplicates."""
    tags = []
    for tag in values:
        tag = tag.strip().lstrip("#").lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class DiscussionCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    category: str = "general"
    hashtags: List[str] = []

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if v not in DISCUSSION_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(DISCUSSION_CATEGORIES)}")
        return v

    @field_validator("hashtags")
    @classmethod
    def normalize_hashtags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class PinUpdate(BaseModel):
    is_pinned: bool


class ReplyResponse(BaseModel):
    id: str
    author_id: str
    author: Optional[UserSummary] = None
    content: str
    likes: List[str] = []
    created_at: datetime


class DiscussionResponse(BaseModel):
    id: str = Field(..., alias="_id")
    project_id: str
    author_id: str
    author: Optional[UserSummary] = None
    title: str
    content: str
    category: str
    hashtags: List[str] = []
    likes: List[str] = []
    replies: List[ReplyResponse] = []
    is_pinned: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


class DiscussionList(BaseModel):
    items: List[DiscussionResponse]
    total: int
    page: int
    size: int
    pages: int


class HashtagCount(BaseModel):
    tag: str
    count: int
