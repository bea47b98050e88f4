"""
API v1 Helper Functions

Shared helper functions extracted from endpoint modules for better
code organization and reusability.
"""

from app.api.v1.helpers.community import build_post_response, enrich_post, enrich_posts
from app.api.v1.helpers.pagination import build_pagination_response, skip_for_page
from app.api.v1.helpers.projects import (
    build_project_response,
    can_view_project,
    enrich_project,
    enrich_projects,
    fetch_user_summaries,
    get_project_or_404,
    project_user_ids,
)
from app.api.v1.helpers.teams import (
    build_discussion_response,
    build_task_response,
    enrich_discussions,
    enrich_tasks,
)
from app.api.v1.helpers.users import (
    build_user_search_query,
    can_view_profile,
    profile_visibility_filter,
)

__all__ = [
    # Community
    "build_post_response",
    "enrich_post",
    "enrich_posts",
    # Pagination
    "build_pagination_response",
    "skip_for_page",
    # Projects
    "build_project_response",
    "can_view_project",
    "enrich_project",
    "enrich_projects",
    "fetch_user_summaries",
    "get_project_or_404",
    "project_user_ids",
    # Team dashboard
    "build_discussion_response",
    "build_task_response",
    "enrich_discussions",
    "enrich_tasks",
    # Users
    "build_user_search_query",
    "can_view_profile",
    "profile_visibility_filter",
]
