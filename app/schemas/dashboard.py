from typing import List

from pydantic import BaseModel

from app.schemas.discussion import DiscussionResponse
from app.schemas.project import ProjectResponse
from app.schemas.task import TaskResponse, TaskStats


class DashboardOverview(BaseModel):
    project: ProjectResponse
    recent_discussions: List[DiscussionResponse]
    recent_tasks: List[TaskResponse]
    task_stats: TaskStats
