import logging
from typing import Any, Optional

from fastapi import Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.api.router import CustomAPIRouter
from app.api.v1.helpers import (
    build_pagination_response,
    build_user_search_query,
    can_view_profile,
    skip_for_page,
)
from app.api.v1.helpers.responses import RESP_AUTH, RESP_AUTH_400, RESP_AUTH_404
from app.core import security
from app.core.exceptions import NotFound, PermissionDenied, ValidationError
from app.core.permissions import Permissions
from app.db.mongodb import get_database
from app.models.user import User
from app.repositories import ProjectRepository, UserRepository
from app.schemas.auth import MessageResponse
from app.schemas.user import (
    MatchSuggestionsResponse,
    PasswordChange,
    PrivacySettingsUpdate,
    ProfileUpdate,
    PublicProfile,
    UserResponse,
    UserSearchResults,
    UserStats,
)
from app.services.matching import (
    PRIVATE_FIELDS,
    get_match_suggestions,
    invalidate_match_suggestions,
)

logger = logging.getLogger(__name__)

router = CustomAPIRouter()


@router.get("/", response_model=UserSearchResults, responses=RESP_AUTH_400)
async def search_users(
    search: Optional[str] = Query(None, description="Full-text search over name, username, bio and skills"),
    skills: Optional[str] = Query(None, description="Comma-separated skills"),
    country: Optional[str] = None,
    availability: Optional[str] = None,
    experience: Optional[str] = None,
    looking_for: Optional[str] = Query(None, alias="lookingFor", description="Comma-separated goals"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Search developers, most recently active first.

    Profiles hidden from the caller by their privacy settings are left out.
    """
    query = build_user_search_query(
        current_user,
        search=search,
        skills=skills,
        country=country,
        availability=availability,
        experience=experience,
        looking_for=looking_for,
    )
    skip = skip_for_page(page, limit)
    user_repo = UserRepository(db)
    users = await user_repo.search(query, skip=skip, limit=limit, exclude_fields=PRIVATE_FIELDS)
    total = await user_repo.count(query)
    return build_pagination_response(users, total, skip, limit)


@router.get("/me", response_model=UserResponse, responses=RESP_AUTH)
async def read_user_me(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Get current user.
    """
    await UserRepository(db).touch_last_seen(current_user.id)
    return current_user


@router.put("/me/profile", response_model=UserResponse, responses=RESP_AUTH)
async def update_profile(
    profile_in: ProfileUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Update the current user's profile. Omitted fields are left unchanged.
    """
    update_data = {
        key: value
        for key, value in profile_in.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if not update_data:
        return current_user

    user = await UserRepository(db).update(current_user.id, update_data)
    await invalidate_match_suggestions(current_user.id)
    return user


@router.put("/me/privacy", response_model=UserResponse, responses=RESP_AUTH)
async def update_privacy(
    privacy_in: PrivacySettingsUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    user = await UserRepository(db).update(
        current_user.id,
        {"privacy_settings.profile_visibility": privacy_in.profile_visibility},
    )
    return user


@router.put("/me/password", response_model=MessageResponse, responses=RESP_AUTH_400)
async def change_password(
    password_in: PasswordChange,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Change the current user's password.
    """
    if not security.verify_password(password_in.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect")
    if password_in.new_password == password_in.current_password:
        raise ValidationError("New password must differ from the current password")

    await UserRepository(db).update(
        current_user.id,
        {"hashed_password": security.get_password_hash(password_in.new_password)},
    )
    logger.info(f"Password changed for user {current_user.username}")
    return {"message": "Password updated successfully"}


@router.get("/me/stats", response_model=UserStats, responses=RESP_AUTH)
async def read_my_stats(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    return {
        "connections": len(current_user.connections),
        "profile_views": current_user.profile_views,
        "sent_requests": len(current_user.sent_requests),
        "received_requests": len(current_user.received_requests),
        "projects_owned": await ProjectRepository(db).count_owned(current_user.id),
    }


@router.get(
    "/matches/suggestions",
    response_model=MatchSuggestionsResponse,
    responses=RESP_AUTH,
)
async def read_match_suggestions(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Developers whose skills, interests and goals overlap with yours.

    Ordered by overlap, then by most recent activity.
    """
    return await get_match_suggestions(db, current_user)


@router.get("/{user_id}", response_model=PublicProfile, responses=RESP_AUTH_404)
async def read_user_profile(
    user_id: str,
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Get another developer's public profile. Counts as a profile view.
    """
    user_repo = UserRepository(db)
    user = await user_repo.get_by_id(user_id)
    if user is None or not user.is_active:
        raise NotFound("User not found")
    if not can_view_profile(user, current_user):
        raise PermissionDenied("This profile is not visible to you")

    if user.id != current_user.id:
        await user_repo.increment_profile_views(user.id)
    return user
