"""
Project Repository

Centralizes all database operations for projects, including the
conditional updates behind the team request workflow.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.constants import (
    PROJECT_STATUS_IN_PROGRESS,
    TEAM_REQUEST_ACCEPTED,
    TEAM_REQUEST_PENDING,
    TEAM_REQUEST_REJECTED,
    TEAM_ROLE_OWNER,
)
from app.models.project import Project, ProjectComment, ProjectTeamMember, TeamRequest

# Evaluates to true while the team still has a free seat
HAS_FREE_SEAT = {
    "$lt": [
        {"$size": {"$ifNull": ["$team_members", []]}},
        "$team_settings.max_team_size",
    ]
}


def submit_request_filter(project_id: str, user_id: str) -> Dict[str, Any]:
    """
    Filter matching a project that can accept a new request from user_id.

    Mirrors the checks done before submitting so that the write only lands
    when every precondition still holds at write time.
    """
    return {
        "_id": project_id,
        "status": PROJECT_STATUS_IN_PROGRESS,
        "team_settings.allow_team_requests": True,
        "team_members.user_id": {"$ne": user_id},
        "team_requests": {
            "$not": {"$elemMatch": {"user_id": user_id, "status": TEAM_REQUEST_PENDING}}
        },
        "$expr": HAS_FREE_SEAT,
    }


def accept_request_filter(
    project_id: str, request_id: str, user_id: str
) -> Dict[str, Any]:
    """Filter matching a project where request_id may be accepted right now."""
    return {
        "_id": project_id,
        "team_requests": {
            "$elemMatch": {"id": request_id, "status": TEAM_REQUEST_PENDING}
        },
        "team_members.user_id": {"$ne": user_id},
        "$expr": HAS_FREE_SEAT,
    }


def public_feed_query(
    status: Optional[str] = None,
    technology: Optional[str] = None,
    featured: bool = False,
) -> Dict[str, Any]:
    """Filter for the public project feed. Each given filter narrows it further."""
    query: Dict[str, Any] = {"is_public": True}
    if status:
        query["status"] = status
    if technology:
        query["technologies"] = technology
    if featured:
        query["featured"] = True
    return query


class ProjectRepository:
    """Repository for project database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.projects

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        """Get project by ID."""
        data = await self.collection.find_one({"_id": project_id})
        if data:
            return Project(**data)
        return None

    async def create(self, project: Project) -> Project:
        """Create a new project."""
        await self.collection.insert_one(project.model_dump(by_alias=True))
        return project

    async def update(
        self,
        project_id: str,
        update_data: Dict[str, Any],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> Optional[Project]:
        """
        Update project by ID.

        When extra_filter is given the update only applies if the project
        also matches it; None is returned otherwise.
        """
        query: Dict[str, Any] = {"_id": project_id}
        if extra_filter:
            query.update(extra_filter)
        update_data = {**update_data, "updated_at": datetime.now(timezone.utc)}
        data = await self.collection.find_one_and_update(
            query, {"$set": update_data}, return_document=ReturnDocument.AFTER
        )
        if data:
            return Project(**data)
        return None

    async def delete(self, project_id: str) -> bool:
        """Delete project by ID."""
        result = await self.collection.delete_one({"_id": project_id})
        return result.deleted_count > 0

    async def find_many(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort_by: str = "created_at",
        sort_order: int = -1,
    ) -> List[Project]:
        """Find projects with pagination, newest first by default."""
        cursor = (
            self.collection.find(query)
            .sort(sort_by, sort_order)
            .skip(skip)
            .limit(limit)
        )
        docs = await cursor.to_list(limit)
        return [Project(**doc) for doc in docs]

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """Count projects matching query."""
        return await self.collection.count_documents(query or {})

    async def find_by_member(self, user_id: str) -> List[Project]:
        """Get projects the user owns or belongs to."""
        query = {"$or": [{"owner_id": user_id}, {"team_members.user_id": user_id}]}
        return await self.find_many(query, limit=1000)

    async def find_by_requester(self, user_id: str) -> List[Project]:
        """Get projects where the user has submitted a team request."""
        return await self.find_many({"team_requests.user_id": user_id}, limit=1000)

    async def count_owned(self, user_id: str) -> int:
        """Count projects owned by a user."""
        return await self.count({"owner_id": user_id})

    async def toggle_like(self, project_id: str, user_id: str) -> Tuple[bool, int]:
        """
        Like the project, or remove the like when already present.

        Returns (liked, like_count).
        """
        unliked = await self.collection.find_one_and_update(
            {"_id": project_id, "likes": user_id},
            {"$pull": {"likes": user_id}},
            projection={"likes": 1},
            return_document=ReturnDocument.AFTER,
        )
        if unliked is not None:
            return False, len(unliked.get("likes", []))

        liked = await self.collection.find_one_and_update(
            {"_id": project_id},
            {"$addToSet": {"likes": user_id}},
            projection={"likes": 1},
            return_document=ReturnDocument.AFTER,
        )
        if liked is None:
            return False, 0
        return True, len(liked.get("likes", []))

    async def add_comment(self, project_id: str, comment: ProjectComment) -> Optional[Project]:
        """Append a comment to the project."""
        data = await self.collection.find_one_and_update(
            {"_id": project_id},
            {"$push": {"comments": comment.model_dump()}},
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    # Team workflow

    async def add_team_request(
        self, project_id: str, request: TeamRequest
    ) -> Optional[Project]:
        """
        Append a pending request if the project still accepts it.

        Returns the updated project, or None when a precondition failed.
        """
        data = await self.collection.find_one_and_update(
            submit_request_filter(project_id, request.user_id),
            {"$push": {"team_requests": request.model_dump()}},
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def accept_team_request(
        self,
        project_id: str,
        request_id: str,
        member: ProjectTeamMember,
        decided_by: str,
    ) -> Optional[Project]:
        """
        Mark the request accepted and add the member in a single write.

        Only succeeds while the request is pending, the user is not yet a
        member and the team has a free seat.
        """
        data = await self.collection.find_one_and_update(
            accept_request_filter(project_id, request_id, member.user_id),
            {
                "$set": {
                    "team_requests.$.status": TEAM_REQUEST_ACCEPTED,
                    "team_requests.$.decided_at": member.joined_at,
                    "team_requests.$.decided_by": decided_by,
                    "updated_at": member.joined_at,
                },
                "$push": {"team_members": member.model_dump()},
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def reject_team_request(
        self, project_id: str, request_id: str, decided_by: str
    ) -> Optional[Project]:
        """Mark a pending request rejected. Returns None if it is no longer pending."""
        now = datetime.now(timezone.utc)
        data = await self.collection.find_one_and_update(
            {
                "_id": project_id,
                "team_requests": {
                    "$elemMatch": {"id": request_id, "status": TEAM_REQUEST_PENDING}
                },
            },
            {
                "$set": {
                    "team_requests.$.status": TEAM_REQUEST_REJECTED,
                    "team_requests.$.decided_at": now,
                    "team_requests.$.decided_by": decided_by,
                    "updated_at": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def remove_member(
        self, project_id: str, user_id: str, actor_role_allows: List[str]
    ) -> Optional[Project]:
        """
        Remove a non-owner member whose role is in actor_role_allows.

        The role condition is part of the filter so a concurrent promotion
        of the target makes the removal fail instead of bypassing the check.
        """
        allowed = [role for role in actor_role_allows if role != TEAM_ROLE_OWNER]
        data = await self.collection.find_one_and_update(
            {
                "_id": project_id,
                "team_members": {"$elemMatch": {"user_id": user_id, "role": {"$in": allowed}}},
            },
            {
                "$pull": {"team_members": {"user_id": user_id}},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def set_member_role(
        self, project_id: str, user_id: str, role: str
    ) -> Optional[Project]:
        """Change a non-owner member's role."""
        data = await self.collection.find_one_and_update(
            {
                "_id": project_id,
                "team_members": {
                    "$elemMatch": {"user_id": user_id, "role": {"$ne": TEAM_ROLE_OWNER}}
                },
            },
            {
                "$set": {
                    "team_members.$.role": role,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None
