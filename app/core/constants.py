"""
Shared Constants

Centralized constants used across the application to ensure consistency.
"""

from typing import Dict, List

# Team roles, ordered from least to most privileged
TEAM_ROLE_MEMBER = "member"
TEAM_ROLE_ADMIN = "admin"
TEAM_ROLE_OWNER = "owner"

TEAM_ROLES: List[str] = [TEAM_ROLE_MEMBER, TEAM_ROLE_ADMIN, TEAM_ROLE_OWNER]

# Roles that may manage requests and members
TEAM_MANAGER_ROLES: List[str] = [TEAM_ROLE_ADMIN, TEAM_ROLE_OWNER]

# Team request lifecycle
TEAM_REQUEST_PENDING = "pending"
TEAM_REQUEST_ACCEPTED = "accepted"
TEAM_REQUEST_REJECTED = "rejected"

TEAM_REQUEST_STATUSES: List[str] = [
    TEAM_REQUEST_PENDING,
    TEAM_REQUEST_ACCEPTED,
    TEAM_REQUEST_REJECTED,
]

DECISION_ACCEPT = "accept"
DECISION_REJECT = "reject"

# Project lifecycle
PROJECT_STATUS_IN_PROGRESS = "in-progress"
PROJECT_STATUS_COMPLETED = "completed"
PROJECT_STATUS_ON_HOLD = "on-hold"

PROJECT_STATUSES: List[str] = [
    PROJECT_STATUS_IN_PROGRESS,
    PROJECT_STATUS_COMPLETED,
    PROJECT_STATUS_ON_HOLD,
]

# Task board
TASK_STATUSES: List[str] = ["todo", "in-progress", "review", "done"]
TASK_STATUS_DONE = "done"

TASK_PRIORITIES: List[str] = ["low", "medium", "high", "urgent"]

# Sort weight for priorities (higher value = more urgent)
TASK_PRIORITY_ORDER: Dict[str, int] = {
    "urgent": 3,
    "high": 2,
    "medium": 1,
    "low": 0,
}

# Discussion board
DISCUSSION_CATEGORIES: List[str] = [
    "general",
    "frontend",
    "backend",
    "design",
    "bug",
    "feature",
    "question",
]

# Profile enums
LOOKING_FOR_OPTIONS: List[str] = [
    "hackathon-partner",
    "project-collaborator",
    "mentor",
    "mentee",
    "study-buddy",
]
AVAILABILITY_OPTIONS: List[str] = ["full-time", "part-time", "weekends", "flexible"]
EXPERIENCE_LEVELS: List[str] = ["beginner", "intermediate", "advanced", "expert"]

PROFILE_VISIBILITY_PUBLIC = "public"
PROFILE_VISIBILITY_CONNECTIONS = "connections"
PROFILE_VISIBILITY_PRIVATE = "private"

PROFILE_VISIBILITIES: List[str] = [
    PROFILE_VISIBILITY_PUBLIC,
    PROFILE_VISIBILITY_CONNECTIONS,
    PROFILE_VISIBILITY_PRIVATE,
]

# Dashboard overview sizes
OVERVIEW_RECENT_DISCUSSIONS = 5
OVERVIEW_RECENT_TASKS = 10

INCOMPLETE_PROFILE_HINT = (
    "Add more skills, interests, or what you're looking for to improve your match results."
)


def role_rank(role: str) -> int:
    """Position of a role in the hierarchy. Unknown roles rank below member."""
    try:
        return TEAM_ROLES.index(role)
    except ValueError:
        return -1
