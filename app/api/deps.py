from typing import List, Union

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from app.core import ensure_utc, security
from app.core.config import settings
from app.core.permissions import has_permission
from app.db.mongodb import get_database
from app.models.user import User
from app.repositories import UserRepository
from app.schemas.auth import TokenPayload

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
    db: AsyncIOMotorDatabase = Depends(get_database),
    token: str = Depends(oauth2_scheme),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = security.decode_token(token)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception
    try:
        token_data = TokenPayload(
            sub=payload["sub"], permissions=payload.get("permissions", [])
        )
    except ValidationError:
        raise credentials_exception

    user_repo = UserRepository(db)
    user = await user_repo.get_by_id(token_data.sub)
    if user is None:
        raise credentials_exception

    # Tokens issued before the last logout are revoked
    iat = payload.get("iat")
    if user.last_logout_at and iat and iat < int(ensure_utc(user.last_logout_at).timestamp()):
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


class PermissionChecker:
    def __init__(self, required_permissions: Union[str, List[str]]):
        self.required_permissions = (
            required_permissions
            if isinstance(required_permissions, list)
            else [required_permissions]
        )

    def __call__(self, current_user: User = Depends(get_current_active_user)) -> User:
        # Check if user has ANY of the required permissions
        if has_permission(current_user.permissions, self.required_permissions):
            return current_user

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not enough permissions. Required one of: {', '.join(self.required_permissions)}",
        )
