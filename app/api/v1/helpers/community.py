"""
Community Helper Functions

Serialization of community posts with author names.
"""

from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api.v1.helpers.projects import fetch_user_summaries
from app.models.post import Post


def build_post_response(post: Post, users: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    data = post.model_dump()
    data["author"] = users.get(post.author_id)
    data["comments"] = [
        {**c, "author": users.get(c["author_id"])} for c in data["comments"]
    ]
    return data


async def enrich_posts(posts: List[Post], db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    """Attach author names to posts and their comments."""
    ids: List[str] = []
    for post in posts:
        ids.append(post.author_id)
        ids.extend(c.author_id for c in post.comments)
    users = await fetch_user_summaries(ids, db)
    return [build_post_response(p, users) for p in posts]


async def enrich_post(post: Post, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return (await enrich_posts([post], db))[0]
