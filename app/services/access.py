"""
Project role checks shared by the team services.
"""

from typing import List

from app.core.constants import TEAM_MANAGER_ROLES
from app.core.exceptions import ErrorCode, PermissionDenied
from app.models.project import Project


def require_member(project: Project, user_id: str) -> str:
    """
    Ensure the user belongs to the project's team.

    Returns:
        The user's team role

    Raises:
        PermissionDenied: If the user is not on the team
    """
    role = project.member_role(user_id)
    if role is None:
        raise PermissionDenied(
            "You must be a team member to access this project",
            code=ErrorCode.NOT_TEAM_MEMBER,
        )
    return role


def require_role(project: Project, user_id: str, roles: List[str] = TEAM_MANAGER_ROLES) -> str:
    """Ensure the user is on the team with one of the given roles."""
    role = require_member(project, user_id)
    if role not in roles:
        raise PermissionDenied(
            f"This action requires one of the roles: {', '.join(roles)}",
            code=ErrorCode.INSUFFICIENT_ROLE,
        )
    return role
