"""
Project Helper Functions

Shared helper functions for project-related operations.
"""

from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.constants import TEAM_MANAGER_ROLES
from app.core.exceptions import NotFound
from app.core.permissions import Permissions, has_permission
from app.models.project import Project
from app.models.user import User
from app.repositories import ProjectRepository, UserRepository


def can_view_project(project: Project, user: User) -> bool:
    """Public projects are visible to everyone; private ones to the team only."""
    if project.is_public:
        return True
    if project.is_team_member(user.id):
        return True
    return has_permission(user.permissions, Permissions.PROJECT_READ_ALL)


async def get_project_or_404(
    project_id: str,
    user: User,
    db: AsyncIOMotorDatabase,
) -> Project:
    """
    Load a project the user is allowed to see.

    Args:
        project_id: The project ID
        user: The current user
        db: Database instance

    Returns:
        The Project

    Raises:
        NotFound: If the project does not exist or is private to another team
    """
    project_repo = ProjectRepository(db)
    project = await project_repo.get_by_id(project_id)
    if project is None or not can_view_project(project, user):
        raise NotFound("Project not found")
    return project


async def fetch_user_summaries(
    user_ids: Iterable[Optional[str]], db: AsyncIOMotorDatabase
) -> Dict[str, Dict[str, Any]]:
    """
    Look up username and name for a set of user IDs.

    Returns:
        Mapping of user ID to {"username", "name"}. Unknown IDs are omitted.
    """
    ids = list({user_id for user_id in user_ids if user_id})
    if not ids:
        return {}
    user_repo = UserRepository(db)
    users = await user_repo.find_by_ids(ids)
    return {
        str(u["_id"]): {"username": u.get("username"), "name": u.get("name")}
        for u in users
    }


def _with_user(entry: Dict[str, Any], user_id: Optional[str], users: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {**entry, **users.get(user_id or "", {})}


def project_user_ids(project: Project) -> List[str]:
    """All user IDs referenced by a project document."""
    ids = [project.owner_id]
    ids.extend(m.user_id for m in project.team_members)
    ids.extend(r.user_id for r in project.team_requests)
    ids.extend(c.user_id for c in project.comments)
    return ids


def build_project_response(
    project: Project,
    users: Dict[str, Dict[str, Any]],
    viewer_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Serialize a project with usernames next to every user reference.

    Owners and admins see all team requests; other viewers only see
    their own.
    """
    data = project.model_dump()
    data["owner"] = users.get(project.owner_id)
    data["team_members"] = [
        _with_user(m, m["user_id"], users) for m in data["team_members"]
    ]
    data["comments"] = [_with_user(c, c["user_id"], users) for c in data["comments"]]

    requests = data["team_requests"]
    if viewer_id is None or project.member_role(viewer_id) not in TEAM_MANAGER_ROLES:
        requests = [r for r in requests if r["user_id"] == viewer_id]
    data["team_requests"] = [_with_user(r, r["user_id"], users) for r in requests]
    return data


async def enrich_projects(
    projects: List[Project], db: AsyncIOMotorDatabase, viewer_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Build responses for several projects with a single user lookup."""
    ids: List[str] = []
    for project in projects:
        ids.extend(project_user_ids(project))
    users = await fetch_user_summaries(ids, db)
    return [build_project_response(p, users, viewer_id) for p in projects]


async def enrich_project(
    project: Project, db: AsyncIOMotorDatabase, viewer_id: Optional[str] = None
) -> Dict[str, Any]:
    return (await enrich_projects([project], db, viewer_id))[0]
