"""Tests for user profile, auth and connection endpoints."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from app.core import security
from app.core.exceptions import NotFound, PermissionDenied, ValidationError
from app.models.user import PrivacySettings, User
from tests.mocks.mongodb import create_mock_collection, create_mock_db

USERS_MODULE = "app.api.v1.endpoints.users"
AUTH_MODULE = "app.api.v1.endpoints.auth"
DEPS_MODULE = "app.api.deps"


def _profile(visibility="public", **kwargs):
    return User(
        id="dev-1",
        username="dev",
        email="dev@test.com",
        privacy_settings=PrivacySettings(profile_visibility=visibility),
        **kwargs,
    )


class TestReadUserProfile:
    def test_counts_view(self, regular_user):
        from app.api.v1.endpoints.users import read_user_profile

        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=_profile())
        repo.increment_profile_views = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            result = asyncio.run(
                read_user_profile(user_id="dev-1", current_user=regular_user, db=MagicMock())
            )

        assert result.username == "dev"
        repo.increment_profile_views.assert_awaited_once_with("dev-1")

    def test_private_profile_denied(self, regular_user):
        from app.api.v1.endpoints.users import read_user_profile

        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=_profile("private"))
        repo.increment_profile_views = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(PermissionDenied):
                asyncio.run(
                    read_user_profile(user_id="dev-1", current_user=regular_user, db=MagicMock())
                )
        repo.increment_profile_views.assert_not_called()

    def test_unknown_user(self, regular_user):
        from app.api.v1.endpoints.users import read_user_profile

        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=None)

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(NotFound):
                asyncio.run(
                    read_user_profile(user_id="ghost", current_user=regular_user, db=MagicMock())
                )


class TestUpdateProfile:
    def test_invalidates_match_cache(self, regular_user):
        from app.api.v1.endpoints.users import update_profile
        from app.schemas.user import ProfileUpdate

        repo = MagicMock()
        repo.update = AsyncMock(return_value=regular_user)

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo), patch(
            f"{USERS_MODULE}.invalidate_match_suggestions", new=AsyncMock()
        ) as mock_invalidate:
            asyncio.run(
                update_profile(
                    profile_in=ProfileUpdate(skills=["go"], bio=None),
                    current_user=regular_user,
                    db=MagicMock(),
                )
            )

        repo.update.assert_awaited_once_with("user-1", {"skills": ["go"]})
        mock_invalidate.assert_awaited_once_with("user-1")

    def test_empty_update_skips_write(self, regular_user):
        from app.api.v1.endpoints.users import update_profile
        from app.schemas.user import ProfileUpdate

        repo = MagicMock()
        repo.update = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            result = asyncio.run(
                update_profile(profile_in=ProfileUpdate(), current_user=regular_user, db=MagicMock())
            )

        assert result is regular_user
        repo.update.assert_not_called()


class TestSearchUsers:
    def _search(self, user, collection, **filters):
        from app.api.v1.endpoints.users import search_users

        params = dict(
            search=None,
            skills=None,
            country=None,
            availability=None,
            experience=None,
            looking_for=None,
            page=1,
            limit=12,
        )
        params.update(filters)
        return asyncio.run(
            search_users(**params, current_user=user, db=create_mock_db({"users": collection}))
        )

    def test_query_sort_and_page(self, regular_user):
        collection = create_mock_collection(
            find=[{"_id": "dev-1", "username": "dev"}], count_documents=6
        )

        result = self._search(
            regular_user, collection, skills="react,node", availability="weekends", page=2, limit=5
        )

        query, projection = collection.find.call_args[0]
        assert query["_id"] == {"$ne": "user-1"}
        assert query["skills"] == {"$in": ["react", "node"]}
        assert query["availability"] == "weekends"
        assert "$or" in query
        assert projection["hashed_password"] == 0
        assert projection["email"] == 0
        cursor = collection.find.return_value
        cursor.sort.assert_called_once_with("last_seen", -1)
        cursor.skip.assert_called_once_with(5)
        collection.count_documents.assert_awaited_once_with(query)
        assert result["total"] == 6
        assert result["page"] == 2
        assert result["pages"] == 2

    def test_read_all_sees_every_visibility(self, admin_user):
        collection = create_mock_collection()

        self._search(admin_user, collection)

        query = collection.find.call_args[0][0]
        assert "$or" not in query
        assert query["_id"] == {"$ne": "admin-1"}

    def test_unknown_experience_rejected(self, regular_user):
        collection = create_mock_collection()

        with pytest.raises(ValidationError):
            self._search(regular_user, collection, experience="guru")
        collection.find.assert_not_called()


class TestChangePassword:
    def _user(self):
        return User(
            id="dev-1",
            username="dev",
            email="dev@test.com",
            hashed_password=security.get_password_hash("secret123"),
        )

    def test_updates_hash(self):
        from app.api.v1.endpoints.users import change_password
        from app.schemas.user import PasswordChange

        repo = MagicMock()
        repo.update = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            asyncio.run(
                change_password(
                    password_in=PasswordChange(
                        current_password="secret123", new_password="newsecret456"
                    ),
                    current_user=self._user(),
                    db=MagicMock(),
                )
            )

        user_id, update = repo.update.call_args[0]
        assert user_id == "dev-1"
        assert set(update) == {"hashed_password"}
        assert security.verify_password("newsecret456", update["hashed_password"])

    def test_wrong_current_password(self):
        from app.api.v1.endpoints.users import change_password
        from app.schemas.user import PasswordChange

        repo = MagicMock()
        repo.update = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(ValidationError) as exc_info:
                asyncio.run(
                    change_password(
                        password_in=PasswordChange(
                            current_password="wrong123", new_password="newsecret456"
                        ),
                        current_user=self._user(),
                        db=MagicMock(),
                    )
                )

        assert exc_info.value.message == "Current password is incorrect"
        repo.update.assert_not_called()

    def test_same_password_rejected(self):
        from app.api.v1.endpoints.users import change_password
        from app.schemas.user import PasswordChange

        repo = MagicMock()
        repo.update = AsyncMock()

        with patch(f"{USERS_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(ValidationError):
                asyncio.run(
                    change_password(
                        password_in=PasswordChange(
                            current_password="secret123", new_password="secret123"
                        ),
                        current_user=self._user(),
                        db=MagicMock(),
                    )
                )

        repo.update.assert_not_called()


class TestMyStats:
    def test_counts_owned_projects(self, regular_user):
        from app.api.v1.endpoints.users import read_my_stats

        project_repo = MagicMock()
        project_repo.count_owned = AsyncMock(return_value=3)

        with patch(f"{USERS_MODULE}.ProjectRepository", return_value=project_repo):
            stats = asyncio.run(read_my_stats(current_user=regular_user, db=MagicMock()))

        assert stats == {
            "connections": 0,
            "profile_views": 0,
            "sent_requests": 0,
            "received_requests": 0,
            "projects_owned": 3,
        }
        project_repo.count_owned.assert_awaited_once_with("user-1")


class TestSignup:
    def test_duplicate_rejected(self):
        from app.api.v1.endpoints.auth import signup
        from app.schemas.user import UserSignup

        repo = MagicMock()
        repo.exists_by_username = AsyncMock(return_value=True)
        repo.exists_by_email = AsyncMock(return_value=False)
        repo.create = AsyncMock()

        with patch(f"{AUTH_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(HTTPException) as exc_info:
                asyncio.run(
                    signup(
                        user_in=UserSignup(
                            email="dev@test.com", username="dev", name="Dev", password="secret123"
                        ),
                        db=MagicMock(),
                    )
                )

        assert exc_info.value.status_code == 400
        repo.create.assert_not_called()

    def test_new_user_gets_user_preset(self):
        from app.api.v1.endpoints.auth import signup
        from app.core.permissions import PRESET_USER
        from app.schemas.user import UserSignup

        repo = MagicMock()
        repo.exists_by_username = AsyncMock(return_value=False)
        repo.exists_by_email = AsyncMock(return_value=False)
        repo.create = AsyncMock()

        with patch(f"{AUTH_MODULE}.UserRepository", return_value=repo):
            user = asyncio.run(
                signup(
                    user_in=UserSignup(
                        email="Dev@Test.com", username="dev", name="Dev", password="secret123"
                    ),
                    db=MagicMock(),
                )
            )

        assert user.email == "dev@test.com"
        assert user.permissions == list(PRESET_USER)
        assert user.hashed_password != "secret123"
        repo.create.assert_awaited_once()


class TestCurrentUser:
    def test_token_before_logout_rejected(self):
        from app.api.deps import get_current_user

        token = security.create_access_token("dev-1")
        user = _profile(last_logout_at=datetime.now(timezone.utc) + timedelta(minutes=1))
        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=user)

        with patch(f"{DEPS_MODULE}.UserRepository", return_value=repo):
            with pytest.raises(HTTPException) as exc_info:
                asyncio.run(get_current_user(db=MagicMock(), token=token))

        assert exc_info.value.status_code == 401

    def test_valid_token(self):
        from app.api.deps import get_current_user

        token = security.create_access_token("dev-1")
        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=_profile())

        with patch(f"{DEPS_MODULE}.UserRepository", return_value=repo):
            user = asyncio.run(get_current_user(db=MagicMock(), token=token))

        assert user.id == "dev-1"
        repo.get_by_id.assert_awaited_once_with("dev-1")

    def test_refresh_token_not_accepted(self):
        from app.api.deps import get_current_user

        with pytest.raises(HTTPException):
            asyncio.run(
                get_current_user(db=MagicMock(), token=security.create_refresh_token("dev-1"))
            )

    def test_permission_checker(self, no_perms_user):
        from app.api.deps import PermissionChecker

        checker = PermissionChecker("project:create")
        with pytest.raises(HTTPException) as exc_info:
            checker(current_user=no_perms_user)
        assert exc_info.value.status_code == 403
