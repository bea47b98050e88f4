"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any app imports to prevent
accidental connections to real databases.
"""

import os
import sys

# Ensure the app package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any app code imports the settings singleton
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "15"
os.environ["REFRESH_TOKEN_EXPIRE_DAYS"] = "1"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_skillsync"
os.environ["REDIS_URL"] = "redis://localhost:6399/15"

import pytest  # noqa: E402

from tests.mocks.projects import make_project  # noqa: E402


@pytest.fixture
def admin_permissions():
    from app.core.permissions import PRESET_ADMIN

    return PRESET_ADMIN.copy()


@pytest.fixture
def user_permissions():
    from app.core.permissions import PRESET_USER

    return PRESET_USER.copy()


@pytest.fixture
def open_project():
    """In-progress project owned by owner-1 with room for two more members."""
    return make_project(max_team_size=3)


@pytest.fixture
def full_project():
    """Project whose team already fills max_team_size."""
    return make_project(
        max_team_size=2,
        members=[("owner-1", "owner"), ("member-1", "member")],
    )
