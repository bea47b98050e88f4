from typing import Any

from fastapi import Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.api.router import CustomAPIRouter
from app.api.v1.helpers.responses import (
    RESP_AUTH,
    RESP_AUTH_400_409_404,
    RESP_AUTH_404,
    RESP_AUTH_409_404,
)
from app.core.permissions import Permissions
from app.db.mongodb import get_database
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.user import ConnectionsResponse
from app.services.connections import ConnectionService

router = CustomAPIRouter()

require_connection_manage = deps.PermissionChecker(Permissions.CONNECTION_MANAGE)


@router.get("/", response_model=ConnectionsResponse, responses=RESP_AUTH)
async def list_connections(
    current_user: User = Depends(deps.get_current_active_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Connections plus pending sent and received requests.
    """
    return await ConnectionService(db).list_connections(current_user)


@router.post(
    "/{user_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses=RESP_AUTH_400_409_404,
)
async def send_connection_request(
    user_id: str,
    current_user: User = Depends(require_connection_manage),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    await ConnectionService(db).send_request(current_user, user_id)
    return {"message": "Connection request sent"}


@router.post("/{user_id}/accept", response_model=MessageResponse, responses=RESP_AUTH_409_404)
async def accept_connection_request(
    user_id: str,
    current_user: User = Depends(require_connection_manage),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    await ConnectionService(db).accept_request(current_user, user_id)
    return {"message": "Connection request accepted"}


@router.post("/{user_id}/reject", response_model=MessageResponse, responses=RESP_AUTH_409_404)
async def reject_connection_request(
    user_id: str,
    current_user: User = Depends(require_connection_manage),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    await ConnectionService(db).reject_request(current_user, user_id)
    return {"message": "Connection request rejected"}


@router.delete("/{user_id}", response_model=MessageResponse, responses=RESP_AUTH_404)
async def remove_connection(
    user_id: str,
    current_user: User = Depends(require_connection_manage),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    await ConnectionService(db).remove_connection(current_user, user_id)
    return {"message": "Connection removed"}
