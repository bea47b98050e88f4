import uuid
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field


class DiscussionReply(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    author_id: str
    content: str
    likes: List[str] = []
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TeamDiscussion(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    project_id: str
    author_id: str
    title: str
    content: str
    category: str = "general"
    hashtags: List[str] = []
    likes: List[str] = []
    replies: List[DiscussionReply] = []
    is_pinned: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
