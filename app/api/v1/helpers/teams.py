"""
Team Dashboard Helper Functions

Serialization of tasks and discussions with author and assignee names.
"""

from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api.v1.helpers.projects import fetch_user_summaries
from app.models.discussion import TeamDiscussion
from app.models.task import Task


def task_user_ids(task: Task) -> List[str]:
    ids = [task.created_by]
    if task.assignee_id:
        ids.append(task.assignee_id)
    ids.extend(c.author_id for c in task.comments)
    return ids


def discussion_user_ids(discussion: TeamDiscussion) -> List[str]:
    ids = [discussion.author_id]
    ids.extend(r.author_id for r in discussion.replies)
    return ids


def build_task_response(task: Task, users: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    data = task.model_dump()
    data["creator"] = users.get(task.created_by)
    data["assignee"] = users.get(task.assignee_id) if task.assignee_id else None
    data["comments"] = [
        {**c, "author": users.get(c["author_id"])} for c in data["comments"]
    ]
    return data


def build_discussion_response(
    discussion: TeamDiscussion, users: Dict[str, Dict[str, Any]]
) -> Dict[str, Any]:
    data = discussion.model_dump()
    data["author"] = users.get(discussion.author_id)
    data["replies"] = [
        {**r, "author": users.get(r["author_id"])} for r in data["replies"]
    ]
    return data


async def enrich_tasks(tasks: List[Task], db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    """
    Attach creator, assignee and comment author names to tasks.

    Args:
        tasks: Tasks to serialize
        db: Database instance

    Returns:
        Task dicts ready for TaskResponse
    """
    ids: List[str] = []
    for task in tasks:
        ids.extend(task_user_ids(task))
    users = await fetch_user_summaries(ids, db)
    return [build_task_response(t, users) for t in tasks]


async def enrich_discussions(
    discussions: List[TeamDiscussion], db: AsyncIOMotorDatabase
) -> List[Dict[str, Any]]:
    """Attach author names to discussions and their replies."""
    ids: List[str] = []
    for discussion in discussions:
        ids.extend(discussion_user_ids(discussion))
    users = await fetch_user_summaries(ids, db)
    return [build_discussion_response(d, users) for d in discussions]
