"""Shared fixtures for API endpoint tests."""

import pytest

from app.core.permissions import ALL_PERMISSIONS, PRESET_USER
from app.models.user import User


@pytest.fixture
def admin_user():
    """User with all permissions (admin)."""
    return User(
        id="admin-1",
        username="admin",
        email="admin@test.com",
        permissions=list(ALL_PERMISSIONS),
    )


@pytest.fixture
def regular_user():
    """User with standard user permissions."""
    return User(
        id="user-1",
        username="user",
        email="user@test.com",
        permissions=list(PRESET_USER),
        skills=["python"],
    )


@pytest.fixture
def owner_user():
    """Owner of the projects built by make_project()."""
    return User(
        id="owner-1",
        username="owner",
        email="owner@test.com",
        permissions=list(PRESET_USER),
    )


@pytest.fixture
def no_perms_user():
    """User with zero permissions."""
    return User(
        id="noperm-1",
        username="noperm",
        email="noperm@test.com",
        permissions=[],
    )
