import logging
from typing import List, Optional

from fastapi import Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.api.router import CustomAPIRouter
from app.api.v1.helpers import (
    build_pagination_response,
    enrich_project,
    enrich_projects,
    fetch_user_summaries,
    get_project_or_404,
)
from app.api.v1.helpers.responses import (
    RESP_AUTH,
    RESP_AUTH_400_404,
    RESP_AUTH_400_409_404,
    RESP_AUTH_404,
    RESP_AUTH_409_404,
)
from app.core.cache import CacheKeys, cache_service
from app.core.constants import (
    DECISION_ACCEPT,
    DECISION_REJECT,
    PROJECT_STATUSES,
    TEAM_REQUEST_STATUSES,
    TEAM_ROLE_OWNER,
)
from app.core.exceptions import ErrorCode, NotFound, PreconditionFailed, ValidationError
from app.core.permissions import Permissions, has_permission
from app.db.mongodb import get_database
from app.models.project import Project, ProjectComment, ProjectTeamMember, TeamSettings
from app.models.user import User
from app.repositories import DiscussionRepository, ProjectRepository, TaskRepository
from app.repositories.projects import public_feed_query
from app.schemas.auth import MessageResponse
from app.schemas.project import (
    LikeToggleResponse,
    MyTeamRequest,
    ProjectCommentCreate,
    ProjectCreate,
    ProjectList,
    ProjectResponse,
    ProjectUpdate,
    TeamMemberRoleUpdate,
    TeamRequestCreate,
    TeamRequestResponse,
)
from app.services.access import require_role
from app.services.team_workflow import TeamWorkflow

logger = logging.getLogger(__name__)

router = CustomAPIRouter()

TEAM_SETTINGS_FIELDS = ("allow_team_requests", "max_team_size", "required_skills")


@router.get("/", response_model=ProjectList, responses=RESP_AUTH)
async def list_public_projects(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    project_status: Optional[str] = Query(None, alias="status"),
    technology: Optional[str] = Query(None, description="Projects using this technology"),
    featured: bool = Query(False, description="Only featured projects"),
    current_user: User = Depends(deps.PermissionChecker(Permissions.PROJECT_READ)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    List public projects, newest first, optionally filtered.
    """
    if project_status is not None and project_status not in PROJECT_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(PROJECT_STATUSES)}")

    query = public_feed_query(
        project_status, technology.strip() if technology else None, featured
    )
    project_repo = ProjectRepository(db)
    projects = await project_repo.find_many(query, skip=skip, limit=limit)
    total = await project_repo.count(query)
    items = await enrich_projects(projects, db, current_user.id)
    return build_pagination_response(items, total, skip, limit)


@router.get("/my", response_model=List[ProjectResponse], responses=RESP_AUTH)
async def list_my_projects(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Projects the current user owns or is a team member of.
    """
    project_repo = ProjectRepository(db)
    projects = await project_repo.find_by_member(current_user.id)
    return await enrich_projects(projects, db, current_user.id)


@router.get("/team-requests/my", response_model=List[MyTeamRequest], responses=RESP_AUTH)
async def list_my_team_requests(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    The current user's latest team request on every project they applied to.
    """
    workflow = TeamWorkflow(db)
    pairs = await workflow.list_my_team_requests(current_user.id)
    return [
        {
            "project": {
                "id": project.id,
                "title": project.title,
                "owner_id": project.owner_id,
                "status": project.status,
            },
            "request": request.model_dump(),
        }
        for project, request in pairs
    ]


@router.post(
    "/",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH,
)
async def create_project(
    project_in: ProjectCreate,
    current_user: User = Depends(deps.PermissionChecker(Permissions.PROJECT_CREATE)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Create a new project. The creator becomes the owner and first team member.
    """
    data = project_in.model_dump()
    team_settings = TeamSettings(**{k: data.pop(k) for k in TEAM_SETTINGS_FIELDS})
    project = Project(
        **data,
        owner_id=current_user.id,
        team_settings=team_settings,
        team_members=[
            ProjectTeamMember(
                user_id=current_user.id,
                role=TEAM_ROLE_OWNER,
                skills=current_user.skills,
            )
        ],
    )

    project_repo = ProjectRepository(db)
    await project_repo.create(project)
    logger.info(f"Project {project.id} created by {current_user.id}")
    return await enrich_project(project, db, current_user.id)


@router.get("/{project_id}", response_model=ProjectResponse, responses=RESP_AUTH_404)
async def read_project(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    project = await get_project_or_404(project_id, current_user, db)
    return await enrich_project(project, db, current_user.id)


@router.put("/{project_id}", response_model=ProjectResponse, responses=RESP_AUTH_400_404)
async def update_project(
    project_id: str,
    project_in: ProjectUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Update project details and team settings. Owner or admin only.

    The maximum team size cannot go below the current number of members.
    """
    project = await get_project_or_404(project_id, current_user, db)
    if not has_permission(current_user.permissions, Permissions.PROJECT_UPDATE):
        require_role(project, current_user.id)

    update_data = {}
    for key, value in project_in.model_dump(exclude_unset=True).items():
        if value is None and key != "project_url":
            continue
        if key in TEAM_SETTINGS_FIELDS:
            update_data[f"team_settings.{key}"] = value
        else:
            update_data[key] = value

    extra_filter = None
    new_size = update_data.get("team_settings.max_team_size")
    if new_size is not None:
        if new_size < len(project.team_members):
            raise ValidationError(
                f"The team already has {len(project.team_members)} members",
                code=ErrorCode.INVALID_TEAM_SIZE,
            )
        extra_filter = {
            "$expr": {"$lte": [{"$size": {"$ifNull": ["$team_members", []]}}, new_size]}
        }

    if not update_data:
        return await enrich_project(project, db, current_user.id)

    project_repo = ProjectRepository(db)
    updated = await project_repo.update(project_id, update_data, extra_filter)
    if updated is None:
        raise PreconditionFailed("The team grew while updating the project, please retry")
    return await enrich_project(updated, db, current_user.id)


@router.delete("/{project_id}", response_model=MessageResponse, responses=RESP_AUTH_404)
async def delete_project(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Delete a project together with its tasks and discussions. Owner only.
    """
    project = await get_project_or_404(project_id, current_user, db)
    if not has_permission(current_user.permissions, Permissions.PROJECT_DELETE):
        require_role(project, current_user.id, [TEAM_ROLE_OWNER])

    tasks_deleted = await TaskRepository(db).delete_by_project(project_id)
    discussions_deleted = await DiscussionRepository(db).delete_by_project(project_id)
    await ProjectRepository(db).delete(project_id)
    await cache_service.delete(CacheKeys.project_hashtags(project_id))
    logger.info(
        f"Project {project_id} deleted by {current_user.id} "
        f"({tasks_deleted} tasks, {discussions_deleted} discussions)"
    )
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/like", response_model=LikeToggleResponse, responses=RESP_AUTH_404)
async def toggle_project_like(
    project_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await get_project_or_404(project_id, current_user, db)
    liked, like_count = await ProjectRepository(db).toggle_like(project_id, current_user.id)
    return {"liked": liked, "like_count": like_count}


@router.post(
    "/{project_id}/comments",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_404,
)
async def add_project_comment(
    project_id: str,
    comment_in: ProjectCommentCreate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await get_project_or_404(project_id, current_user, db)
    comment = ProjectComment(user_id=current_user.id, content=comment_in.content)
    updated = await ProjectRepository(db).add_comment(project_id, comment)
    if updated is None:
        raise NotFound("Project not found")
    return await enrich_project(updated, db, current_user.id)


# Team workflow


@router.post(
    "/{project_id}/team-request",
    response_model=TeamRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_409_404,
)
async def submit_team_request(
    project_id: str,
    request_in: TeamRequestCreate,
    current_user: User = Depends(deps.PermissionChecker(Permissions.TEAM_REQUEST)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Ask to join the project's team.
    """
    project = await get_project_or_404(project_id, current_user, db)
    workflow = TeamWorkflow(db)
    _, request = await workflow.submit_team_request(
        project, current_user.id, request_in.skills, request_in.message or ""
    )
    return {
        **request.model_dump(),
        "username": current_user.username,
        "name": current_user.name,
    }


@router.get(
    "/{project_id}/team-requests",
    response_model=List[TeamRequestResponse],
    responses=RESP_AUTH_404,
)
async def list_team_requests(
    project_id: str,
    request_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    List the project's team requests. Owner or admin only.
    """
    if request_status is not None and request_status not in TEAM_REQUEST_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(TEAM_REQUEST_STATUSES)}")

    project = await get_project_or_404(project_id, current_user, db)
    requests = TeamWorkflow(db).list_team_requests(project, current_user.id, request_status)
    users = await fetch_user_summaries([r.user_id for r in requests], db)
    return [{**r.model_dump(), **users.get(r.user_id, {})} for r in requests]


async def _decide(
    project_id: str, request_id: str, decision: str, user: User, db: AsyncIOMotorDatabase
):
    project = await get_project_or_404(project_id, user, db)
    updated = await TeamWorkflow(db).decide_team_request(project, request_id, decision, user.id)
    return await enrich_project(updated, db, user.id)


@router.post(
    "/{project_id}/team-requests/{request_id}/accept",
    response_model=ProjectResponse,
    responses=RESP_AUTH_409_404,
)
async def accept_team_request(
    project_id: str,
    request_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Accept a pending request. The requester joins the team as a member.
    """
    return await _decide(project_id, request_id, DECISION_ACCEPT, current_user, db)


@router.post(
    "/{project_id}/team-requests/{request_id}/reject",
    response_model=ProjectResponse,
    responses=RESP_AUTH_409_404,
)
async def reject_team_request(
    project_id: str,
    request_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await _decide(project_id, request_id, DECISION_REJECT, current_user, db)


@router.delete(
    "/{project_id}/team-members/{user_id}",
    response_model=ProjectResponse,
    responses=RESP_AUTH_409_404,
)
async def remove_team_member(
    project_id: str,
    user_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Remove a member from the team. Their open tasks become unassigned.
    """
    project = await get_project_or_404(project_id, current_user, db)
    updated = await TeamWorkflow(db).remove_member(project, user_id, current_user.id)
    return await enrich_project(updated, db, current_user.id)


@router.put(
    "/{project_id}/team-members/{user_id}",
    response_model=ProjectResponse,
    responses=RESP_AUTH_400_409_404,
)
async def update_team_member_role(
    project_id: str,
    user_id: str,
    role_in: TeamMemberRoleUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Promote a member to admin or demote an admin. Owner only.
    """
    project = await get_project_or_404(project_id, current_user, db)
    updated = await TeamWorkflow(db).update_member_role(
        project, user_id, role_in.role, current_user.id
    )
    return await enrich_project(updated, db, current_user.id)
