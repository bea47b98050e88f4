"""
Discussion Repository

Centralizes all database operations for team discussions.
"""

from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from app.models.discussion import DiscussionReply, TeamDiscussion
from app.repositories.base import BaseRepository


class DiscussionRepository(BaseRepository[TeamDiscussion]):
    """Repository for team discussion database operations."""

    collection_name = "discussions"
    model_class = TeamDiscussion

    async def find_by_project(
        self,
        project_id: str,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> List[TeamDiscussion]:
        """Get discussions for a project, pinned first and then newest."""
        query = {"project_id": project_id, **(filters or {})}
        return await self.find_many(
            query,
            skip=skip,
            limit=limit,
            sort=[("is_pinned", -1), ("created_at", -1)],
        )

    async def count_by_project(
        self, project_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> int:
        """Count discussions for a project."""
        return await self.count({"project_id": project_id, **(filters or {})})

    async def toggle_like(self, discussion_id: str, user_id: str) -> Tuple[bool, int]:
        """Like or unlike a discussion. Returns (liked, like_count)."""
        return await self.toggle_in_array(discussion_id, "likes", user_id)

    async def toggle_reply_like(
        self, discussion_id: str, reply_id: str, user_id: str
    ) -> Optional[Tuple[bool, int]]:
        """
        Like or unlike a reply. Returns (liked, like_count), or None when the
        reply does not exist.
        """
        unliked = await self.collection.find_one_and_update(
            {
                "_id": discussion_id,
                "replies": {"$elemMatch": {"id": reply_id, "likes": user_id}},
            },
            {"$pull": {"replies.$.likes": user_id}},
            return_document=ReturnDocument.AFTER,
        )
        if unliked is not None:
            return False, self._reply_like_count(unliked, reply_id)

        liked = await self.collection.find_one_and_update(
            {"_id": discussion_id, "replies.id": reply_id},
            {"$addToSet": {"replies.$.likes": user_id}},
            return_document=ReturnDocument.AFTER,
        )
        if liked is None:
            return None
        return True, self._reply_like_count(liked, reply_id)

    @staticmethod
    def _reply_like_count(doc: Dict[str, Any], reply_id: str) -> int:
        for reply in doc.get("replies", []):
            if reply.get("id") == reply_id:
                return len(reply.get("likes", []))
        return 0

    async def add_reply(
        self, discussion_id: str, reply: DiscussionReply
    ) -> Optional[TeamDiscussion]:
        """Append a reply to a discussion."""
        return await self.find_one_and_update(
            {"_id": discussion_id},
            {
                "$push": {"replies": reply.model_dump()},
                "$set": {"updated_at": reply.created_at},
            },
        )

    async def hashtag_counts(self, project_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Count hashtag usage across a project's discussions, most used first."""
        pipeline = [
            {"$match": {"project_id": project_id}},
            {"$unwind": "$hashtags"},
            {"$group": {"_id": "$hashtags", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        results = await self.aggregate(pipeline, limit)
        return [{"tag": row["_id"], "count": row["count"]} for row in results]

    async def delete_by_project(self, project_id: str) -> int:
        """Delete all discussions of a project."""
        return await self.delete_many({"project_id": project_id})
