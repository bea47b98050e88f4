"""
Post Repository

Centralizes all database operations for community posts.
"""

from typing import Any, Dict, List, Optional, Tuple

from app.models.post import Post, PostComment
from app.repositories.base import BaseRepository


class PostRepository(BaseRepository[Post]):
    """Repository for community post database operations."""

    collection_name = "posts"
    model_class = Post

    async def recent(self, limit: int = 20) -> List[Post]:
        """Newest posts first."""
        return await self.find_many({}, limit=limit, sort=[("created_at", -1)])

    async def toggle_like(self, post_id: str, user_id: str) -> Tuple[bool, int]:
        """Like or unlike a post. Returns (liked, like_count)."""
        return await self.toggle_in_array(post_id, "likes", user_id)

    async def add_comment(self, post_id: str, comment: PostComment) -> Optional[Post]:
        """Append a comment. None when the post does not exist."""
        return await self.find_one_and_update(
            {"_id": post_id}, {"$push": {"comments": comment.model_dump()}}
        )

    async def increment_shares(self, post_id: str) -> Optional[Post]:
        """Count a share. None when the post does not exist."""
        return await self.find_one_and_update({"_id": post_id}, {"$inc": {"shares": 1}})

    async def tag_counts(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Number of posts per tag, most used first."""
        pipeline = [
            {"$unwind": "$tags"},
            {"$group": {"_id": "$tags", "posts": {"$sum": 1}}},
            {"$sort": {"posts": -1, "_id": 1}},
            {"$limit": limit},
        ]
        results = await self.aggregate(pipeline, limit)
        return [{"tag": row["_id"], "posts": row["posts"]} for row in results]

    async def count_by_authors(self, author_ids: List[str]) -> Dict[str, int]:
        """Post count per author. Authors without posts are omitted."""
        if not author_ids:
            return {}
        pipeline = [
            {"$match": {"author_id": {"$in": author_ids}}},
            {"$group": {"_id": "$author_id", "count": {"$sum": 1}}},
        ]
        results = await self.aggregate(pipeline)
        return {row["_id"]: row["count"] for row in results}
