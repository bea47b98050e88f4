"""
Match Suggestions

Ranks other developers by how much their profile overlaps with the
caller's skills, interests and collaboration goals. Scoring runs inside
MongoDB as an aggregation pipeline; results are cached per user.
"""

import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.cache import CacheKeys, CacheTTL, cache_service
from app.core.config import settings
from app.core.constants import (
    INCOMPLETE_PROFILE_HINT,
    PROFILE_VISIBILITY_CONNECTIONS,
    PROFILE_VISIBILITY_PRIVATE,
)
from app.core.metrics import match_suggestions_served_total
from app.models.user import User
from app.repositories import UserRepository

logger = logging.getLogger(__name__)

# Fields never returned in suggestions
PRIVATE_FIELDS = [
    "hashed_password",
    "email",
    "permissions",
    "connections",
    "sent_requests",
    "received_requests",
    "privacy_settings",
    "last_logout_at",
]


def _overlap(field: str, values: List[str]) -> Dict[str, Any]:
    return {"$size": {"$setIntersection": [{"$ifNull": [f"${field}", []]}, values]}}


def excluded_user_ids(user: User) -> List[str]:
    """The caller, their connections and everyone with a pending request either way."""
    return list(
        dict.fromkeys(
            [user.id, *user.connection_ids, *user.sent_requests, *user.received_requests]
        )
    )


def candidate_filter() -> Dict[str, Any]:
    """Active users whose profile is visible to anyone."""
    return {
        "is_active": True,
        "privacy_settings.profile_visibility": {
            "$nin": [PROFILE_VISIBILITY_PRIVATE, PROFILE_VISIBILITY_CONNECTIONS]
        },
    }


def build_match_pipeline(user: User, limit: int) -> List[Dict[str, Any]]:
    """
    Build the aggregation pipeline scoring candidates for a user.

    Score is the size of the skill overlap plus the interest overlap plus
    the looking-for overlap. Candidates scoring zero are dropped; the rest
    are ordered by score, then by most recent activity.
    """
    return [
        {"$match": {"_id": {"$nin": excluded_user_ids(user)}, **candidate_filter()}},
        {
            "$addFields": {
                "match_score": {
                    "$add": [
                        _overlap("skills", user.skills),
                        _overlap("interests", user.interests),
                        _overlap("looking_for", user.looking_for),
                    ]
                }
            }
        },
        {"$match": {"match_score": {"$gte": 1}}},
        {"$sort": {"match_score": -1, "last_seen": -1}},
        {"$limit": limit},
        {"$project": {field: 0 for field in PRIVATE_FIELDS}},
    ]


async def _still_visible(
    user_repo: UserRepository, matches: List[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """Drop cached matches that were deactivated or hidden since they were cached."""
    if not matches:
        return matches
    visible = await user_repo.find_ids(
        {"_id": {"$in": [m["_id"] for m in matches]}, **candidate_filter()}
    )
    return [m for m in matches if m["_id"] in visible]


async def get_match_suggestions(db: AsyncIOMotorDatabase, user: User) -> Dict[str, Any]:
    """
    Return {"matches": [...], "message": hint or None} for the user.
    """
    message = INCOMPLETE_PROFILE_HINT if user.has_incomplete_profile else None
    cache_key = CacheKeys.match_suggestions(user.id)

    user_repo = UserRepository(db)
    cached = await cache_service.get(cache_key)
    if cached is not None:
        matches = await _still_visible(user_repo, cached)
        match_suggestions_served_total.labels(source="cache").inc()
        return {"matches": matches, "message": message}

    limit = settings.MATCH_SUGGESTIONS_LIMIT
    matches = await user_repo.aggregate(build_match_pipeline(user, limit), limit)

    await cache_service.set(cache_key, matches, CacheTTL.MATCH_SUGGESTIONS)
    match_suggestions_served_total.labels(source="database").inc()
    logger.debug(f"Computed {len(matches)} match suggestions for user {user.id}")
    return {"matches": matches, "message": message}


async def invalidate_match_suggestions(*user_ids: str) -> None:
    """Drop cached suggestions after a profile or network change."""
    await cache_service.delete(*(CacheKeys.match_suggestions(u) for u in user_ids))
