"""
Task Repository

Centralizes all database operations for project tasks.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.constants import TASK_STATUS_DONE
from app.models.task import Task, TaskComment
from app.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Repository for task database operations."""

    collection_name = "tasks"
    model_class = Task

    async def find_by_project(
        self, project_id: str, filters: Optional[Dict[str, Any]] = None, limit: int = 1000
    ) -> List[Task]:
        """Get tasks for a project, newest first."""
        query = {"project_id": project_id, **(filters or {})}
        return await self.find_many(query, limit=limit, sort=[("created_at", -1)])

    async def count_by_status(self, project_id: str) -> Dict[str, int]:
        """Count tasks per status for a project."""
        pipeline = [
            {"$match": {"project_id": project_id}},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        ]
        results = await self.aggregate(pipeline)
        return {row["_id"]: row["count"] for row in results}

    async def update_fields(self, task_id: str, update_data: Dict[str, Any]) -> Optional[Task]:
        """Set fields on a task and bump updated_at."""
        update_data = {**update_data, "updated_at": datetime.now(timezone.utc)}
        return await self.find_one_and_update({"_id": task_id}, {"$set": update_data})

    async def add_comment(self, task_id: str, comment: TaskComment) -> Optional[Task]:
        """Append a comment to a task."""
        return await self.find_one_and_update(
            {"_id": task_id},
            {
                "$push": {"comments": comment.model_dump()},
                "$set": {"updated_at": comment.created_at},
            },
        )

    async def unassign_user(self, project_id: str, user_id: str) -> int:
        """Clear the assignee on a user's open tasks within a project."""
        result = await self.collection.update_many(
            {
                "project_id": project_id,
                "assignee_id": user_id,
                "status": {"$ne": TASK_STATUS_DONE},
            },
            {"$set": {"assignee_id": None, "updated_at": datetime.now(timezone.utc)}},
        )
        return result.modified_count

    async def delete_by_project(self, project_id: str) -> int:
        """Delete all tasks of a project."""
        return await self.delete_many({"project_id": project_id})
