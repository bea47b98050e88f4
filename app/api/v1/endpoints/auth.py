import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.api import deps
from app.api.router import CustomAPIRouter
from app.core import ensure_utc, security
from app.core.metrics import auth_login_attempts_total, auth_signups_total
from app.core.permissions import PRESET_USER
from app.db.mongodb import get_database
from app.models.user import User
from app.repositories import UserRepository
from app.schemas.auth import MessageResponse, RefreshRequest, Token
from app.schemas.user import UserResponse, UserSignup

logger = logging.getLogger(__name__)

router = CustomAPIRouter()


def _issue_tokens(user: User) -> dict:
    return {
        "access_token": security.create_access_token(user.id, permissions=user.permissions),
        "refresh_token": security.create_refresh_token(user.id),
        "token_type": "bearer",
    }


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    user_in: UserSignup,
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Create a new account with the default user permissions.
    """
    user_repo = UserRepository(db)
    email = user_in.email.lower()
    if await user_repo.exists_by_username(user_in.username) or await user_repo.exists_by_email(email):
        auth_signups_total.labels(status="duplicate").inc()
        raise HTTPException(
            status_code=400,
            detail="A user with this username or email already exists.",
        )

    user = User(
        username=user_in.username,
        email=email,
        name=user_in.name,
        hashed_password=security.get_password_hash(user_in.password),
        permissions=list(PRESET_USER),
    )
    try:
        await user_repo.create(user)
    except DuplicateKeyError:
        auth_signups_total.labels(status="duplicate").inc()
        raise HTTPException(
            status_code=400,
            detail="A user with this username or email already exists.",
        )

    auth_signups_total.labels(status="success").inc()
    logger.info(f"New user registered: {user.username}")
    return user


@router.post("/login", response_model=Token, summary="Login to get access token")
async def login(
    db: AsyncIOMotorDatabase = Depends(get_database),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    OAuth2 compatible token login.

    - **username**: Username or email
    - **password**: User password
    """
    user_repo = UserRepository(db)
    user = await user_repo.get_by_login(form_data.username)
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        auth_login_attempts_total.labels(status="invalid_credentials").inc()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        auth_login_attempts_total.labels(status="inactive").inc()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )

    await user_repo.touch_last_seen(user.id)
    auth_login_attempts_total.labels(status="success").inc()
    return _issue_tokens(user)


@router.post("/refresh", response_model=Token, summary="Refresh access token")
async def refresh_token(
    body: RefreshRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Get a new token pair using a valid refresh token.
    """
    payload = security.decode_token(body.refresh_token, expected_type=security.REFRESH_TOKEN)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user_repo = UserRepository(db)
    user = await user_repo.get_by_id(payload["sub"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )

    # Check if refresh token was issued before last logout
    iat = payload.get("iat")
    if user.last_logout_at and iat and iat < int(ensure_utc(user.last_logout_at).timestamp()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token revoked",
        )

    return _issue_tokens(user)


@router.post("/logout", response_model=MessageResponse, summary="Logout user")
async def logout(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Any:
    """
    Invalidate all tokens issued before now.
    """
    user_repo = UserRepository(db)
    await user_repo.update(current_user.id, {"last_logout_at": datetime.now(timezone.utc)})
    return {"message": "Successfully logged out"}
