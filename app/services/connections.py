"""
Developer connections: requests between users and the resulting network.
"""

import logging
from typing import Any, Dict

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import ErrorCode, NotFound, PreconditionFailed, ValidationError
from app.models.user import User
from app.repositories import UserRepository
from app.services.matching import invalidate_match_suggestions

logger = logging.getLogger(__name__)


class ConnectionService:
    """Send, answer and remove connection requests."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.user_repo = UserRepository(db)

    async def _get_target(self, target_id: str) -> User:
        target = await self.user_repo.get_by_id(target_id)
        if target is None or not target.is_active:
            raise NotFound("User not found")
        return target

    async def send_request(self, user: User, target_id: str) -> None:
        """
        Raises:
            ValidationError: When sending to yourself
            PreconditionFailed: When already connected or a request is pending either way
        """
        if target_id == user.id:
            raise ValidationError("You cannot connect with yourself")
        await self._get_target(target_id)

        if target_id in user.connection_ids:
            raise PreconditionFailed("You are already connected", code=ErrorCode.CONNECTION_EXISTS)
        if target_id in user.received_requests:
            raise PreconditionFailed(
                "This user has already sent you a request, accept it instead",
                code=ErrorCode.CONNECTION_EXISTS,
            )
        if target_id in user.sent_requests:
            raise PreconditionFailed(
                "Connection request already sent", code=ErrorCode.CONNECTION_EXISTS
            )

        if not await self.user_repo.add_connection_request(user.id, target_id):
            raise PreconditionFailed(
                "Connection request already sent", code=ErrorCode.CONNECTION_EXISTS
            )
        await invalidate_match_suggestions(user.id, target_id)
        logger.info(f"User {user.id} sent a connection request to {target_id}")

    async def accept_request(self, user: User, requester_id: str) -> None:
        if not await self.user_repo.accept_connection_request(user.id, requester_id):
            raise PreconditionFailed(
                "No pending connection request from this user",
                code=ErrorCode.CONNECTION_REQUEST_MISSING,
            )
        await invalidate_match_suggestions(user.id, requester_id)
        logger.info(f"User {user.id} accepted the connection request from {requester_id}")

    async def reject_request(self, user: User, requester_id: str) -> None:
        if not await self.user_repo.reject_connection_request(user.id, requester_id):
            raise PreconditionFailed(
                "No pending connection request from this user",
                code=ErrorCode.CONNECTION_REQUEST_MISSING,
            )
        await invalidate_match_suggestions(user.id, requester_id)

    async def remove_connection(self, user: User, other_id: str) -> None:
        if not await self.user_repo.remove_connection(user.id, other_id):
            raise NotFound("Connection not found")
        await invalidate_match_suggestions(user.id, other_id)
        logger.info(f"User {user.id} removed connection {other_id}")

    async def list_connections(self, user: User) -> Dict[str, Any]:
        """Connections plus sent and received requests, as public profiles."""
        ids = list(
            dict.fromkeys([*user.connection_ids, *user.sent_requests, *user.received_requests])
        )
        docs = await self.user_repo.find_by_ids(ids) if ids else []
        by_id = {doc["_id"]: doc for doc in docs}

        return {
            "connections": [
                {"user": by_id[c.user_id], "connected_at": c.connected_at}
                for c in user.connections
                if c.user_id in by_id
            ],
            "sent_requests": [by_id[i] for i in user.sent_requests if i in by_id],
            "received_requests": [by_id[i] for i in user.received_requests if i in by_id],
        }
