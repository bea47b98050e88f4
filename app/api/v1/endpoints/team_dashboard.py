from typing import List, Optional

from fastapi import Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.api.router import CustomAPIRouter
from app.api.v1.helpers import (
    build_pagination_response,
    enrich_discussions,
    enrich_project,
    enrich_tasks,
    get_project_or_404,
    skip_for_page,
)
from app.api.v1.helpers.responses import RESP_AUTH_400_404, RESP_AUTH_404
from app.core.constants import OVERVIEW_RECENT_DISCUSSIONS, OVERVIEW_RECENT_TASKS
from app.db.mongodb import get_database
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.dashboard import DashboardOverview
from app.schemas.discussion import (
    DiscussionCreate,
    DiscussionList,
    DiscussionResponse,
    HashtagCount,
    PinUpdate,
    ReplyCreate,
)
from app.schemas.project import LikeToggleResponse
from app.schemas.task import (
    TaskCommentCreate,
    TaskCreate,
    TaskResponse,
    TaskStats,
    TaskUpdate,
)
from app.services.access import require_member
from app.services.discussion_board import DiscussionBoard
from app.services.task_board import TaskBoard

router = CustomAPIRouter()


@router.get(
    "/projects/{project_id}/overview",
    response_model=DashboardOverview,
    responses=RESP_AUTH_404,
)
async def get_overview(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Team dashboard: project details, latest discussions and tasks, task counts.
    """
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)

    discussion_board = DiscussionBoard(db)
    task_board = TaskBoard(db)
    discussions = await discussion_board.discussion_repo.find_by_project(
        project.id, limit=OVERVIEW_RECENT_DISCUSSIONS
    )
    tasks = await task_board.task_repo.find_by_project(project.id, limit=OVERVIEW_RECENT_TASKS)

    return {
        "project": await enrich_project(project, db, current_user.id),
        "recent_discussions": await enrich_discussions(discussions, db),
        "recent_tasks": await enrich_tasks(tasks, db),
        "task_stats": await task_board.task_stats(project.id),
    }


# Discussions


@router.get(
    "/projects/{project_id}/discussions",
    response_model=DiscussionList,
    responses=RESP_AUTH_404,
)
async def list_discussions(
    project_id: str,
    category: Optional[str] = None,
    hashtag: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    List discussions, pinned first and then newest.
    """
    project = await get_project_or_404(project_id, current_user, db)
    skip = skip_for_page(page, limit)
    discussions, total = await DiscussionBoard(db).list_discussions(
        project, current_user.id, category, hashtag, skip, limit
    )
    items = await enrich_discussions(discussions, db)
    return build_pagination_response(items, total, skip, limit)


@router.post(
    "/projects/{project_id}/discussions",
    response_model=DiscussionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def create_discussion(
    project_id: str,
    discussion_in: DiscussionCreate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    discussion = await DiscussionBoard(db).create_discussion(
        project, current_user.id, discussion_in
    )
    return (await enrich_discussions([discussion], db))[0]


@router.get(
    "/projects/{project_id}/discussions/{discussion_id}",
    response_model=DiscussionResponse,
    responses=RESP_AUTH_404,
)
async def read_discussion(
    project_id: str,
    discussion_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)
    discussion = await DiscussionBoard(db).get_discussion(project, discussion_id)
    return (await enrich_discussions([discussion], db))[0]


@router.post(
    "/projects/{project_id}/discussions/{discussion_id}/like",
    response_model=LikeToggleResponse,
    responses=RESP_AUTH_404,
)
async def toggle_discussion_like(
    project_id: str,
    discussion_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Like a discussion, or remove the like if already given.
    """
    project = await get_project_or_404(project_id, current_user, db)
    return await DiscussionBoard(db).like(project, discussion_id, current_user.id)


@router.post(
    "/projects/{project_id}/discussions/{discussion_id}/replies",
    response_model=DiscussionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def reply_to_discussion(
    project_id: str,
    discussion_id: str,
    reply_in: ReplyCreate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    discussion = await DiscussionBoard(db).reply(
        project, discussion_id, current_user.id, reply_in.content
    )
    return (await enrich_discussions([discussion], db))[0]


@router.post(
    "/projects/{project_id}/discussions/{discussion_id}/replies/{reply_id}/like",
    response_model=LikeToggleResponse,
    responses=RESP_AUTH_404,
)
async def toggle_reply_like(
    project_id: str,
    discussion_id: str,
    reply_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    return await DiscussionBoard(db).like_reply(
        project, discussion_id, reply_id, current_user.id
    )


@router.put(
    "/projects/{project_id}/discussions/{discussion_id}/pin",
    response_model=DiscussionResponse,
    responses=RESP_AUTH_404,
)
async def pin_discussion(
    project_id: str,
    discussion_id: str,
    pin_in: PinUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Pin or unpin a discussion. Owner or admin only.
    """
    project = await get_project_or_404(project_id, current_user, db)
    discussion = await DiscussionBoard(db).set_pinned(
        project, discussion_id, pin_in.is_pinned, current_user.id
    )
    return (await enrich_discussions([discussion], db))[0]


@router.get(
    "/projects/{project_id}/hashtags",
    response_model=List[HashtagCount],
    responses=RESP_AUTH_404,
)
async def list_hashtags(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    return await DiscussionBoard(db).project_hashtags(project, current_user.id)


# Tasks


@router.get(
    "/projects/{project_id}/tasks",
    response_model=List[TaskResponse],
    responses=RESP_AUTH_404,
)
async def list_tasks(
    project_id: str,
    task_status: Optional[str] = Query(None, alias="status"),
    assignee_id: Optional[str] = None,
    priority: Optional[str] = None,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    List tasks, most urgent first and newest first within a priority.
    """
    project = await get_project_or_404(project_id, current_user, db)
    tasks = await TaskBoard(db).list_tasks(
        project, current_user.id, task_status, assignee_id, priority
    )
    return await enrich_tasks(tasks, db)


@router.get(
    "/projects/{project_id}/tasks/stats",
    response_model=TaskStats,
    responses=RESP_AUTH_404,
)
async def get_task_stats(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)
    return await TaskBoard(db).task_stats(project.id)


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def create_task(
    project_id: str,
    task_in: TaskCreate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    task = await TaskBoard(db).create_task(project, current_user.id, task_in)
    return (await enrich_tasks([task], db))[0]


@router.put(
    "/projects/{project_id}/tasks/{task_id}",
    response_model=TaskResponse,
    responses=RESP_AUTH_400_404,
)
async def update_task(
    project_id: str,
    task_id: str,
    task_in: TaskUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)
    board = TaskBoard(db)
    task = await board.get_task(project, task_id)
    updated = await board.update_task(project, task, task_in, current_user.id)
    return (await enrich_tasks([updated], db))[0]


@router.delete(
    "/projects/{project_id}/tasks/{task_id}",
    response_model=MessageResponse,
    responses=RESP_AUTH_404,
)
async def delete_task(
    project_id: str,
    task_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)
    board = TaskBoard(db)
    task = await board.get_task(project, task_id)
    await board.delete_task(project, task, current_user.id)
    return {"message": "Task deleted successfully"}


@router.post(
    "/projects/{project_id}/tasks/{task_id}/comments",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def add_task_comment(
    project_id: str,
    task_id: str,
    comment_in: TaskCommentCreate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    require_member(project, current_user.id)
    board = TaskBoard(db)
    task = await board.get_task(project, task_id)
    updated = await board.add_task_comment(project, task, current_user.id, comment_in.content)
    return (await enrich_tasks([updated], db))[0]
