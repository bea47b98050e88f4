"""
User Helper Functions

Profile visibility rules and the developer search query.
"""

import re
from typing import Any, Dict, List, Optional

from app.core.constants import (
    AVAILABILITY_OPTIONS,
    EXPERIENCE_LEVELS,
    PROFILE_VISIBILITY_CONNECTIONS,
    PROFILE_VISIBILITY_PRIVATE,
    PROFILE_VISIBILITY_PUBLIC,
)
from app.core.exceptions import ValidationError
from app.core.permissions import Permissions, has_permission
from app.models.user import User


def can_view_profile(profile: User, viewer: User) -> bool:
    """Apply the profile owner's visibility setting to a viewer."""
    if profile.id == viewer.id:
        return True
    if has_permission(viewer.permissions, Permissions.USER_READ_ALL):
        return True
    visibility = profile.privacy_settings.profile_visibility
    if visibility == PROFILE_VISIBILITY_PRIVATE:
        return False
    if visibility == PROFILE_VISIBILITY_CONNECTIONS:
        return viewer.id in profile.connection_ids
    return True


def profile_visibility_filter(viewer: User) -> Dict[str, Any]:
    """
    MongoDB filter matching the profiles can_view_profile allows for viewer.

    Connection-only profiles match when they list the viewer as a
    connection. Documents without a privacy setting count as public.
    """
    if has_permission(viewer.permissions, Permissions.USER_READ_ALL):
        return {}
    return {
        "$or": [
            {"privacy_settings.profile_visibility": PROFILE_VISIBILITY_PUBLIC},
            {"privacy_settings.profile_visibility": {"$exists": False}},
            {
                "privacy_settings.profile_visibility": PROFILE_VISIBILITY_CONNECTIONS,
                "connections.user_id": viewer.id,
            },
        ]
    }


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_user_search_query(
    viewer: User,
    search: Optional[str] = None,
    skills: Optional[str] = None,
    country: Optional[str] = None,
    availability: Optional[str] = None,
    experience: Optional[str] = None,
    looking_for: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the developer search filter.

    Args:
        viewer: The searching user, excluded from results
        search: Full-text search over name, username, bio and skills
        skills: Comma-separated skills, any of which must match
        country: Case-insensitive substring of the country
        availability: Exact availability value
        experience: Exact experience level
        looking_for: Comma-separated collaboration goals, any of which must match

    Raises:
        ValidationError: Unknown availability or experience value
    """
    query: Dict[str, Any] = {"_id": {"$ne": viewer.id}, "is_active": True}

    if search and search.strip():
        query["$text"] = {"$search": search.strip()}

    skill_list = _split_csv(skills)
    if skill_list:
        query["skills"] = {"$in": skill_list}

    goals = _split_csv(looking_for)
    if goals:
        query["looking_for"] = {"$in": goals}

    if country and country.strip():
        query["country"] = {"$regex": re.escape(country.strip()), "$options": "i"}

    if availability:
        if availability not in AVAILABILITY_OPTIONS:
            raise ValidationError(
                f"Availability must be one of: {', '.join(AVAILABILITY_OPTIONS)}"
            )
        query["availability"] = availability

    if experience:
        if experience not in EXPERIENCE_LEVELS:
            raise ValidationError(f"Experience must be one of: {', '.join(EXPERIENCE_LEVELS)}")
        query["experience"] = experience

    query.update(profile_visibility_filter(viewer))
    return query
