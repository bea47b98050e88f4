"""
MongoDB repositories, one per collection.
"""

from app.repositories.base import BaseRepository
from app.repositories.discussions import DiscussionRepository
from app.repositories.posts import PostRepository
from app.repositories.projects import ProjectRepository
from app.repositories.tasks import TaskRepository
from app.repositories.users import UserRepository

__all__ = [
    "BaseRepository",
    "DiscussionRepository",
    "PostRepository",
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
]
