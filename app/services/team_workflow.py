"""
TeamWorkflow - Join requests and team membership for projects.

This service handles:
- Submitting team requests against a project's team settings
- Accepting or rejecting pending requests
- Removing members and changing member roles

Every state change is a single conditional update on the project
document. When the update does not apply, the fresh project is loaded
and checked again with the same rules, so callers see the specific
reason (team full, request already decided, ...) instead of a generic
conflict.
"""

import logging
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core import ensure_utc
from app.core.constants import (
    DECISION_ACCEPT,
    DECISION_REJECT,
    PROJECT_STATUS_IN_PROGRESS,
    TEAM_REQUEST_PENDING,
    TEAM_ROLE_ADMIN,
    TEAM_ROLE_MEMBER,
    TEAM_ROLE_OWNER,
    TEAM_ROLES,
    role_rank,
)
from app.core.exceptions import (
    ErrorCode,
    NotFound,
    PermissionDenied,
    PreconditionFailed,
    ValidationError,
)
from app.core.metrics import (
    team_members_removed_total,
    team_request_decisions_total,
    team_requests_total,
)
from app.models.project import Project, ProjectTeamMember, TeamRequest
from app.repositories import ProjectRepository, TaskRepository
from app.services.access import require_role

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = [TEAM_ROLE_ADMIN, TEAM_ROLE_MEMBER]


def check_can_submit(project: Project, user_id: str) -> None:
    """
    Raise the first failed precondition for a new team request.

    Raises:
        PreconditionFailed: With a code naming the failed precondition
    """
    if project.status != PROJECT_STATUS_IN_PROGRESS:
        raise PreconditionFailed(
            "This project is not accepting new team members",
            code=ErrorCode.PROJECT_NOT_ACCEPTING,
        )
    if user_id == project.owner_id:
        raise PreconditionFailed(
            "You own this project", code=ErrorCode.ALREADY_MEMBER
        )
    if project.get_member(user_id) is not None:
        raise PreconditionFailed(
            "You are already a member of this team", code=ErrorCode.ALREADY_MEMBER
        )
    if project.pending_request_for(user_id) is not None:
        raise PreconditionFailed(
            "You already have a pending request for this project",
            code=ErrorCode.REQUEST_PENDING,
        )
    if not project.team_settings.allow_team_requests:
        raise PreconditionFailed(
            "This project is not accepting team requests",
            code=ErrorCode.REQUESTS_DISABLED,
        )
    if project.is_full:
        raise PreconditionFailed("The team is full", code=ErrorCode.TEAM_FULL)


def check_can_decide(project: Project, request: TeamRequest, decision: str) -> None:
    """Raise if the request can no longer be decided as asked."""
    if request.status != TEAM_REQUEST_PENDING:
        raise PreconditionFailed(
            f"This request has already been {request.status}",
            code=ErrorCode.REQUEST_ALREADY_DECIDED,
        )
    if decision == DECISION_ACCEPT:
        if project.get_member(request.user_id) is not None:
            raise PreconditionFailed(
                "The requester is already a team member",
                code=ErrorCode.ALREADY_MEMBER,
            )
        if project.is_full:
            raise PreconditionFailed(
                "Accepting this request would exceed the maximum team size",
                code=ErrorCode.CAPACITY_EXCEEDED,
            )


def check_can_remove(project: Project, member_user_id: str, actor_role: str) -> ProjectTeamMember:
    """Return the member to remove, or raise if the actor may not remove them."""
    target = project.get_member(member_user_id)
    if target is None:
        raise NotFound("Team member not found")
    if target.role == TEAM_ROLE_OWNER:
        raise PermissionDenied(
            "The project owner cannot be removed", code=ErrorCode.OWNER_REMOVAL
        )
    if role_rank(actor_role) <= role_rank(target.role):
        raise PermissionDenied(
            f"A {actor_role} cannot remove a {target.role}",
            code=ErrorCode.INSUFFICIENT_ROLE,
        )
    return target


class TeamWorkflow:
    """
    Team request and membership operations for projects.

    Usage:
        workflow = TeamWorkflow(db)
        project, request = await workflow.submit_team_request(project, user_id, ["python"])
        project = await workflow.decide_team_request(project, request.id, "accept", owner_id)
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.project_repo = ProjectRepository(db)
        self.task_repo = TaskRepository(db)

    async def _reload(self, project_id: str) -> Project:
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    async def submit_team_request(
        self,
        project: Project,
        requester_id: str,
        skills: List[str],
        message: str = "",
    ) -> Tuple[Project, TeamRequest]:
        """
        Ask to join a project's team.

        Returns:
            The updated project and the new pending request

        Raises:
            ValidationError: If no skills are given
            PreconditionFailed: If the project cannot take the request
        """
        skills = [s.strip() for s in skills if s and s.strip()]
        if not skills:
            raise ValidationError("At least one skill is required")

        try:
            check_can_submit(project, requester_id)
            request = TeamRequest(
                user_id=requester_id, message=(message or "").strip(), skills=skills
            )
            updated = await self.project_repo.add_team_request(project.id, request)
            if updated is None:
                fresh = await self._reload(project.id)
                check_can_submit(fresh, requester_id)
                raise PreconditionFailed(
                    "The project changed while submitting the request, please retry"
                )
        except PreconditionFailed as e:
            team_requests_total.labels(outcome=e.code.value).inc()
            raise

        team_requests_total.labels(outcome="submitted").inc()
        logger.info(
            f"User {requester_id} requested to join project {project.id} (request {request.id})"
        )
        return updated, request

    async def decide_team_request(
        self,
        project: Project,
        request_id: str,
        decision: str,
        actor_id: str,
    ) -> Project:
        """
        Accept or reject a pending team request.

        Accepting marks the request accepted and adds the requester as a
        member in one write. The write only applies while the request is
        pending and the team has a free seat.

        Raises:
            PermissionDenied: If the actor is not owner or admin
            NotFound: If the request does not exist
            PreconditionFailed: REQUEST_ALREADY_DECIDED or CAPACITY_EXCEEDED
        """
        if decision not in (DECISION_ACCEPT, DECISION_REJECT):
            raise ValidationError(f"Decision must be '{DECISION_ACCEPT}' or '{DECISION_REJECT}'")

        require_role(project, actor_id)
        request = project.get_request(request_id)
        if request is None:
            raise NotFound("Team request not found")

        try:
            check_can_decide(project, request, decision)
            if decision == DECISION_ACCEPT:
                member = ProjectTeamMember(
                    user_id=request.user_id, role=TEAM_ROLE_MEMBER, skills=request.skills
                )
                updated = await self.project_repo.accept_team_request(
                    project.id, request_id, member, actor_id
                )
            else:
                updated = await self.project_repo.reject_team_request(
                    project.id, request_id, actor_id
                )

            if updated is None:
                fresh = await self._reload(project.id)
                require_role(fresh, actor_id)
                fresh_request = fresh.get_request(request_id)
                if fresh_request is None:
                    raise NotFound("Team request not found")
                check_can_decide(fresh, fresh_request, decision)
                raise PreconditionFailed(
                    "The project changed while deciding the request, please retry"
                )
        except PreconditionFailed as e:
            team_request_decisions_total.labels(decision=decision, outcome=e.code.value).inc()
            raise

        team_request_decisions_total.labels(decision=decision, outcome="applied").inc()
        logger.info(
            f"Team request {request_id} on project {project.id} {decision}ed by {actor_id}"
        )
        return updated

    async def remove_member(
        self, project: Project, member_user_id: str, actor_id: str
    ) -> Project:
        """
        Remove a member from the team.

        Admins may remove members, owners may remove admins and members.
        Open tasks assigned to the removed user are unassigned.
        """
        actor_role = require_role(project, actor_id)
        check_can_remove(project, member_user_id, actor_role)

        removable = [r for r in TEAM_ROLES if role_rank(r) < role_rank(actor_role)]
        updated = await self.project_repo.remove_member(project.id, member_user_id, removable)
        if updated is None:
            fresh = await self._reload(project.id)
            actor_role = require_role(fresh, actor_id)
            check_can_remove(fresh, member_user_id, actor_role)
            raise PreconditionFailed(
                "The team changed while removing the member, please retry"
            )

        unassigned = await self.task_repo.unassign_user(project.id, member_user_id)
        team_members_removed_total.inc()
        logger.info(
            f"User {member_user_id} removed from project {project.id} by {actor_id} "
            f"({unassigned} open tasks unassigned)"
        )
        return updated

    async def update_member_role(
        self, project: Project, member_user_id: str, role: str, actor_id: str
    ) -> Project:
        """Promote or demote a member. Only the owner may do this."""
        if role not in ASSIGNABLE_ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ASSIGNABLE_ROLES)}")

        require_role(project, actor_id, [TEAM_ROLE_OWNER])
        target = project.get_member(member_user_id)
        if target is None:
            raise NotFound("Team member not found")
        if target.role == TEAM_ROLE_OWNER:
            raise PermissionDenied(
                "The owner's role cannot be changed", code=ErrorCode.OWNER_REMOVAL
            )

        updated = await self.project_repo.set_member_role(project.id, member_user_id, role)
        if updated is None:
            fresh = await self._reload(project.id)
            if fresh.get_member(member_user_id) is None:
                raise NotFound("Team member not found")
            raise PreconditionFailed("The team changed while updating the role, please retry")

        logger.info(
            f"User {member_user_id} is now {role} on project {project.id} (by {actor_id})"
        )
        return updated

    def list_team_requests(
        self, project: Project, actor_id: str, status: Optional[str] = None
    ) -> List[TeamRequest]:
        """Requests on a project, newest first. Owner or admin only."""
        require_role(project, actor_id)
        requests = [r for r in project.team_requests if status is None or r.status == status]
        return sorted(requests, key=lambda r: ensure_utc(r.created_at), reverse=True)

    async def list_my_team_requests(self, user_id: str) -> List[Tuple[Project, TeamRequest]]:
        """The user's latest request on every project they applied to, newest first."""
        projects = await self.project_repo.find_by_requester(user_id)
        results = []
        for project in projects:
            mine = [r for r in project.team_requests if r.user_id == user_id]
            if mine:
                results.append((project, max(mine, key=lambda r: ensure_utc(r.created_at))))
        results.sort(key=lambda pair: ensure_utc(pair[1].created_at), reverse=True)
        return results
