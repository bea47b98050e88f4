from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.discussion import normalize_tags
from app.schemas.project import UserSummary


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    tags: List[str] = []

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class PostCommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class PostCommentResponse(BaseModel):
    id: str
    author_id: str
    author: Optional[UserSummary] = None
    content: str
    created_at: datetime


class PostResponse(BaseModel):
    id: str = Field(..., alias="_id")
    author_id: str
    author: Optional[UserSummary] = None
    content: str
    tags: List[str] = []
    likes: List[str] = []
    comments: List[PostCommentResponse] = []
    shares: int = 0
    created_at: datetime

    class Config:
        populate_by_name = True


class TrendingTag(BaseModel):
    tag: str
    posts: int


class ActiveUser(BaseModel):
    id: str = Field(..., alias="_id")
    username: str
    name: str = ""
    skills: List[str] = []
    last_seen: Optional[datetime] = None
    post_count: int = 0

    class Config:
        populate_by_name = True
