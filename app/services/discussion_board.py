"""
DiscussionBoard - Threaded team discussions with likes, replies and hashtags.

Replies are one level deep. Likes are toggles: liking twice restores the
original state.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.cache import CacheKeys, CacheTTL, cache_service
from app.core.exceptions import NotFound, ValidationError
from app.core.metrics import discussions_created_total
from app.models.discussion import DiscussionReply, TeamDiscussion
from app.models.project import Project
from app.repositories import DiscussionRepository
from app.schemas.discussion import DiscussionCreate
from app.services.access import require_member, require_role

logger = logging.getLogger(__name__)


class DiscussionBoard:
    """Discussion operations scoped to a single project's team."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.discussion_repo = DiscussionRepository(db)

    async def get_discussion(self, project: Project, discussion_id: str) -> TeamDiscussion:
        discussion = await self.discussion_repo.get_by_id(discussion_id)
        if discussion is None or discussion.project_id != project.id:
            raise NotFound("Discussion not found")
        return discussion

    async def create_discussion(
        self, project: Project, author_id: str, data: DiscussionCreate
    ) -> TeamDiscussion:
        require_member(project, author_id)
        discussion = TeamDiscussion(
            project_id=project.id, author_id=author_id, **data.model_dump()
        )
        await self.discussion_repo.create(discussion)
        if discussion.hashtags:
            await cache_service.delete(CacheKeys.project_hashtags(project.id))

        discussions_created_total.labels(category=discussion.category).inc()
        logger.info(f"Discussion {discussion.id} created on project {project.id} by {author_id}")
        return discussion

    async def list_discussions(
        self,
        project: Project,
        actor_id: str,
        category: Optional[str] = None,
        hashtag: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[TeamDiscussion], int]:
        """
        List discussions, pinned first and then newest.

        Returns:
            The page of discussions and the total count
        """
        require_member(project, actor_id)
        filters: Dict[str, Any] = {}
        if category:
            filters["category"] = category
        if hashtag:
            filters["hashtags"] = hashtag.strip().lstrip("#").lower()

        discussions = await self.discussion_repo.find_by_project(
            project.id, filters, skip=skip, limit=limit
        )
        total = await self.discussion_repo.count_by_project(project.id, filters)
        return discussions, total

    async def like(self, project: Project, discussion_id: str, user_id: str) -> Dict[str, Any]:
        """Toggle the user's like. Returns {"liked", "like_count"}."""
        require_member(project, user_id)
        await self.get_discussion(project, discussion_id)
        liked, like_count = await self.discussion_repo.toggle_like(discussion_id, user_id)
        return {"liked": liked, "like_count": like_count}

    async def reply(
        self, project: Project, discussion_id: str, author_id: str, content: str
    ) -> TeamDiscussion:
        """Append a reply to a discussion."""
        require_member(project, author_id)
        content = (content or "").strip()
        if not content:
            raise ValidationError("Reply content is required")

        await self.get_discussion(project, discussion_id)
        updated = await self.discussion_repo.add_reply(
            discussion_id, DiscussionReply(author_id=author_id, content=content)
        )
        if updated is None:
            raise NotFound("Discussion not found")
        return updated

    async def like_reply(
        self, project: Project, discussion_id: str, reply_id: str, user_id: str
    ) -> Dict[str, Any]:
        require_member(project, user_id)
        await self.get_discussion(project, discussion_id)
        result = await self.discussion_repo.toggle_reply_like(discussion_id, reply_id, user_id)
        if result is None:
            raise NotFound("Reply not found")
        liked, like_count = result
        return {"liked": liked, "like_count": like_count}

    async def set_pinned(
        self, project: Project, discussion_id: str, is_pinned: bool, actor_id: str
    ) -> TeamDiscussion:
        """Pin or unpin a discussion. Owner or admin only."""
        require_role(project, actor_id)
        await self.get_discussion(project, discussion_id)
        updated = await self.discussion_repo.update(discussion_id, {"is_pinned": is_pinned})
        if updated is None:
            raise NotFound("Discussion not found")
        return updated

    async def project_hashtags(self, project: Project, actor_id: str) -> List[Dict[str, Any]]:
        """Hashtag usage counts for the project, most used first."""
        require_member(project, actor_id)
        return await cache_service.get_or_fetch(
            CacheKeys.project_hashtags(project.id),
            lambda: self.discussion_repo.hashtag_counts(project.id),
            ttl_seconds=CacheTTL.PROJECT_HASHTAGS,
        )
