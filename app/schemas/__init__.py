"""
Schema Exports

Request and response models shared by the API endpoints.
"""

from app.schemas.auth import MessageResponse, RefreshRequest, Token, TokenPayload
from app.schemas.dashboard import DashboardOverview
from app.schemas.discussion import (
    DiscussionCreate,
    DiscussionList,
    DiscussionResponse,
    HashtagCount,
    PinUpdate,
    ReplyCreate,
)
from app.schemas.post import PostCommentCreate, PostCreate, PostResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectList,
    ProjectResponse,
    ProjectUpdate,
    TeamMemberRoleUpdate,
    TeamRequestCreate,
    TeamRequestResponse,
)
from app.schemas.task import TaskCreate, TaskResponse, TaskStats, TaskUpdate
from app.schemas.user import ProfileUpdate, PublicProfile, UserResponse, UserSignup

__all__ = [
    # Auth
    "MessageResponse",
    "RefreshRequest",
    "Token",
    "TokenPayload",
    # Dashboard
    "DashboardOverview",
    # Discussions
    "DiscussionCreate",
    "DiscussionList",
    "DiscussionResponse",
    "HashtagCount",
    "PinUpdate",
    "ReplyCreate",
    # Community
    "PostCommentCreate",
    "PostCreate",
    "PostResponse",
    # Projects
    "ProjectCreate",
    "ProjectList",
    "ProjectResponse",
    "ProjectUpdate",
    "TeamMemberRoleUpdate",
    "TeamRequestCreate",
    "TeamRequestResponse",
    # Tasks
    "TaskCreate",
    "TaskResponse",
    "TaskStats",
    "TaskUpdate",
    # Users
    "ProfileUpdate",
    "PublicProfile",
    "UserResponse",
    "UserSignup",
]
