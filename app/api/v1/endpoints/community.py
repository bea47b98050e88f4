import logging
from typing import List

from fastapi import Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.api.router import CustomAPIRouter
from app.api.v1.helpers import enrich_post, enrich_posts, profile_visibility_filter
from app.api.v1.helpers.responses import RESP_AUTH, RESP_AUTH_400, RESP_AUTH_400_404, RESP_AUTH_404
from app.core.cache import CacheKeys, CacheTTL, cache_service
from app.core.exceptions import NotFound
from app.core.metrics import posts_created_total
from app.core.permissions import Permissions
from app.db.mongodb import get_database
from app.models.post import Post, PostComment
from app.models.user import User
from app.repositories import PostRepository, UserRepository
from app.schemas.post import (
    ActiveUser,
    PostCommentCreate,
    PostCreate,
    PostResponse,
    TrendingTag,
)
from app.schemas.project import LikeToggleResponse
from app.services.matching import PRIVATE_FIELDS

logger = logging.getLogger(__name__)

router = CustomAPIRouter()

TRENDING_TAGS_LIMIT = 10
ACTIVE_USERS_LIMIT = 10


@router.get("/posts", response_model=List[PostResponse], responses=RESP_AUTH)
async def list_posts(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    The community feed, newest first.
    """
    posts = await PostRepository(db).recent(limit)
    return await enrich_posts(posts, db)


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400,
)
async def create_post(
    post_in: PostCreate,
    current_user: User = Depends(deps.PermissionChecker(Permissions.POST_CREATE)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    post = Post(author_id=current_user.id, content=post_in.content, tags=post_in.tags)
    await PostRepository(db).create(post)
    if post.tags:
        await cache_service.delete(CacheKeys.trending_tags())
    posts_created_total.inc()
    logger.info(f"Post {post.id} created by {current_user.username}")
    return await enrich_post(post, db)


@router.post("/posts/{post_id}/like", response_model=LikeToggleResponse, responses=RESP_AUTH_404)
async def toggle_post_like(
    post_id: str,
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Like a post, or remove the like if already given.
    """
    post_repo = PostRepository(db)
    if await post_repo.get_by_id(post_id) is None:
        raise NotFound("Post not found")
    liked, like_count = await post_repo.toggle_like(post_id, current_user.id)
    return {"liked": liked, "like_count": like_count}


@router.post(
    "/posts/{post_id}/comments",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def comment_on_post(
    post_id: str,
    comment_in: PostCommentCreate,
    current_user: User = Depends(deps.PermissionChecker(Permissions.POST_CREATE)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    comment = PostComment(author_id=current_user.id, content=comment_in.content)
    post = await PostRepository(db).add_comment(post_id, comment)
    if post is None:
        raise NotFound("Post not found")
    return await enrich_post(post, db)


@router.post("/posts/{post_id}/share", response_model=PostResponse, responses=RESP_AUTH_404)
async def share_post(
    post_id: str,
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    post = await PostRepository(db).increment_shares(post_id)
    if post is None:
        raise NotFound("Post not found")
    return await enrich_post(post, db)


@router.get("/trending", response_model=List[TrendingTag], responses=RESP_AUTH)
async def trending_tags(
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    The most used post tags.
    """
    return await cache_service.get_or_fetch(
        CacheKeys.trending_tags(),
        lambda: PostRepository(db).tag_counts(TRENDING_TAGS_LIMIT),
        ttl_seconds=CacheTTL.TRENDING_TAGS,
    )


@router.get("/active-users", response_model=List[ActiveUser], responses=RESP_AUTH)
async def active_users(
    current_user: User = Depends(deps.PermissionChecker(Permissions.USER_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    The most recently seen developers with their post counts.

    Profiles hidden from the caller are left out.
    """
    query = {"is_active": True, **profile_visibility_filter(current_user)}
    users = await UserRepository(db).search(
        query, limit=ACTIVE_USERS_LIMIT, exclude_fields=PRIVATE_FIELDS
    )
    counts = await PostRepository(db).count_by_authors([u["_id"] for u in users])
    return [{**u, "post_count": counts.get(u["_id"], 0)} for u in users]
