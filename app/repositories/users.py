"""
User Repository

Centralizes all database operations for users, their profiles and
their connection network.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.user import Connection, User


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.users

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        data = await self.collection.find_one({"_id": user_id})
        if data:
            return User(**data)
        return None

    async def get_by_login(self, identifier: str) -> Optional[User]:
        """Get user by username or email."""
        data = await self.collection.find_one(
            {"$or": [{"username": identifier}, {"email": identifier.lower()}]}
        )
        if data:
            return User(**data)
        return None

    async def create(self, user: User) -> User:
        """Create a new user."""
        await self.collection.insert_one(user.model_dump(by_alias=True))
        return user

    async def update(self, user_id: str, update_data: Dict[str, Any]) -> Optional[User]:
        """Update user by ID."""
        await self.collection.update_one({"_id": user_id}, {"$set": update_data})
        return await self.get_by_id(user_id)

    async def find_by_ids(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        """Find users by list of IDs."""
        cursor = self.collection.find({"_id": {"$in": user_ids}})
        return await cursor.to_list(None)

    async def find_ids(self, query: Dict[str, Any]) -> Set[str]:
        """IDs of the users matching query."""
        cursor = self.collection.find(query, {"_id": 1})
        return {doc["_id"] for doc in await cursor.to_list(None)}

    async def search(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 12,
        exclude_fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Find users matching query, most recently active first."""
        projection = {field: 0 for field in exclude_fields} if exclude_fields else None
        cursor = (
            self.collection.find(query, projection)
            .sort("last_seen", -1)
            .skip(skip)
            .limit(limit)
        )
        return await cursor.to_list(limit)

    async def count(self, query: Dict[str, Any]) -> int:
        """Count users matching query."""
        return await self.collection.count_documents(query)

    async def exists_by_username(self, username: str) -> bool:
        """Check if username exists."""
        return await self.collection.find_one({"username": username}) is not None

    async def exists_by_email(self, email: str) -> bool:
        """Check if email exists."""
        return await self.collection.find_one({"email": email}) is not None

    async def aggregate(self, pipeline: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline over users."""
        return await self.collection.aggregate(pipeline).to_list(limit)

    async def touch_last_seen(self, user_id: str) -> None:
        """Record activity for a user."""
        await self.collection.update_one(
            {"_id": user_id}, {"$set": {"last_seen": datetime.now(timezone.utc)}}
        )

    async def increment_profile_views(self, user_id: str) -> None:
        """Count a profile view."""
        await self.collection.update_one({"_id": user_id}, {"$inc": {"profile_views": 1}})

    # Connections

    async def add_connection_request(self, sender_id: str, target_id: str) -> bool:
        """
        Record a connection request from sender to target.

        Returns False when the pair is already connected or a request from
        sender is already pending.
        """
        result = await self.collection.update_one(
            {
                "_id": target_id,
                "received_requests": {"$ne": sender_id},
                "connections.user_id": {"$ne": sender_id},
            },
            {"$addToSet": {"received_requests": sender_id}},
        )
        if result.modified_count == 0:
            return False
        await self.collection.update_one(
            {"_id": sender_id}, {"$addToSet": {"sent_requests": target_id}}
        )
        return True

    async def accept_connection_request(self, user_id: str, requester_id: str) -> bool:
        """
        Turn a received request into a connection on both sides.

        Returns False when no such request is pending.
        """
        connected_at = datetime.now(timezone.utc)
        result = await self.collection.update_one(
            {"_id": user_id, "received_requests": requester_id},
            {
                "$pull": {"received_requests": requester_id},
                "$push": {
                    "connections": Connection(
                        user_id=requester_id, connected_at=connected_at
                    ).model_dump()
                },
            },
        )
        if result.modified_count == 0:
            return False
        await self.collection.update_one(
            {"_id": requester_id, "connections.user_id": {"$ne": user_id}},
            {
                "$pull": {"sent_requests": user_id},
                "$push": {
                    "connections": Connection(
                        user_id=user_id, connected_at=connected_at
                    ).model_dump()
                },
            },
        )
        return True

    async def reject_connection_request(self, user_id: str, requester_id: str) -> bool:
        """Drop a received request. Returns False when none was pending."""
        result = await self.collection.update_one(
            {"_id": user_id, "received_requests": requester_id},
            {"$pull": {"received_requests": requester_id}},
        )
        if result.modified_count == 0:
            return False
        await self.collection.update_one(
            {"_id": requester_id}, {"$pull": {"sent_requests": user_id}}
        )
        return True

    async def remove_connection(self, user_id: str, other_id: str) -> bool:
        """Remove a connection from both users. Returns False when not connected."""
        result = await self.collection.update_one(
            {"_id": user_id, "connections.user_id": other_id},
            {"$pull": {"connections": {"user_id": other_id}}},
        )
        if result.modified_count == 0:
            return False
        await self.collection.update_one(
            {"_id": other_id}, {"$pull": {"connections": {"user_id": user_id}}}
        )
        return True
