"""
TaskBoard - Per-project task tracking for team members.
"""

import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core import ensure_utc
from app.core.constants import TASK_PRIORITY_ORDER, TEAM_MANAGER_ROLES
from app.core.exceptions import ErrorCode, NotFound, PermissionDenied, ValidationError
from app.core.metrics import tasks_created_total, tasks_updated_total
from app.models.project import Project
from app.models.task import Task, TaskComment
from app.repositories import TaskRepository
from app.schemas.task import TaskCreate, TaskStats, TaskUpdate
from app.services.access import require_member

logger = logging.getLogger(__name__)

# Fields that may be cleared by sending null
NULLABLE_TASK_FIELDS = {"assignee_id", "due_date", "estimated_hours", "actual_hours"}


def check_assignee(project: Project, assignee_id: Optional[str]) -> None:
    """Assignees must be current team members."""
    if assignee_id and not project.is_team_member(assignee_id):
        raise ValidationError(
            "Assignee must be a member of the project team",
            code=ErrorCode.INVALID_ASSIGNEE,
        )


def sort_tasks(tasks: List[Task]) -> List[Task]:
    """Order tasks urgent first, then newest first within a priority."""
    newest_first = sorted(tasks, key=lambda t: ensure_utc(t.created_at), reverse=True)
    return sorted(
        newest_first,
        key=lambda t: TASK_PRIORITY_ORDER.get(t.priority, -1),
        reverse=True,
    )


class TaskBoard:
    """Task operations scoped to a single project's team."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.task_repo = TaskRepository(db)

    async def get_task(self, project: Project, task_id: str) -> Task:
        task = await self.task_repo.get_by_id(task_id)
        if task is None or task.project_id != project.id:
            raise NotFound("Task not found")
        return task

    async def create_task(self, project: Project, creator_id: str, data: TaskCreate) -> Task:
        """
        Create a task on the project board.

        Raises:
            PermissionDenied: If the creator is not a team member
            ValidationError: If the assignee is not a team member
        """
        require_member(project, creator_id)
        check_assignee(project, data.assignee_id)

        task = Task(project_id=project.id, created_by=creator_id, **data.model_dump())
        await self.task_repo.create(task)

        tasks_created_total.inc()
        logger.info(f"Task {task.id} created on project {project.id} by {creator_id}")
        return task

    async def update_task(
        self, project: Project, task: Task, patch: TaskUpdate, actor_id: str
    ) -> Task:
        """
        Apply a partial update. Any status or priority may follow any other.
        """
        require_member(project, actor_id)

        update_data = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_TASK_FIELDS
        }
        if not update_data:
            return task
        if "assignee_id" in update_data:
            check_assignee(project, update_data["assignee_id"])

        updated = await self.task_repo.update_fields(task.id, update_data)
        if updated is None:
            raise NotFound("Task not found")

        if "status" in update_data and update_data["status"] != task.status:
            tasks_updated_total.labels(status=update_data["status"]).inc()
            logger.info(
                f"Task {task.id} moved from {task.status} to {update_data['status']} by {actor_id}"
            )
        return updated

    async def list_tasks(
        self,
        project: Project,
        actor_id: str,
        status: Optional[str] = None,
        assignee_id: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Task]:
        require_member(project, actor_id)
        filters = {}
        if status:
            filters["status"] = status
        if assignee_id:
            filters["assignee_id"] = assignee_id
        if priority:
            filters["priority"] = priority
        tasks = await self.task_repo.find_by_project(project.id, filters)
        return sort_tasks(tasks)

    async def add_task_comment(
        self, project: Project, task: Task, author_id: str, content: str
    ) -> Task:
        require_member(project, author_id)
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required")

        updated = await self.task_repo.add_comment(
            task.id, TaskComment(author_id=author_id, content=content)
        )
        if updated is None:
            raise NotFound("Task not found")
        return updated

    async def delete_task(self, project: Project, task: Task, actor_id: str) -> None:
        """Delete a task. Allowed for its creator and for project owners and admins."""
        role = require_member(project, actor_id)
        if task.created_by != actor_id and role not in TEAM_MANAGER_ROLES:
            raise PermissionDenied(
                "Only the task creator or a project admin can delete this task",
                code=ErrorCode.INSUFFICIENT_ROLE,
            )
        await self.task_repo.delete(task.id)
        logger.info(f"Task {task.id} deleted from project {project.id} by {actor_id}")

    async def task_stats(self, project_id: str) -> TaskStats:
        counts = await self.task_repo.count_by_status(project_id)
        return TaskStats.from_counts(counts)
