"""Tests for the User model."""

from app.models.user import Connection, User


def _user(**kwargs):
    return User(username="dev", email="dev@test.com", **kwargs)


class TestUserModel:
    def test_defaults(self):
        user = _user()
        assert user.is_active is True
        assert user.permissions == []
        assert user.privacy_settings.profile_visibility == "public"
        assert user.profile_views == 0

    def test_connection_ids(self):
        user = _user(connections=[Connection(user_id="a"), Connection(user_id="b")])
        assert user.connection_ids == ["a", "b"]


class TestIncompleteProfile:
    def test_complete(self):
        user = _user(skills=["python"], interests=["ai"], looking_for=["mentor"])
        assert user.has_incomplete_profile is False

    def test_missing_any_list(self):
        assert _user(skills=["python"], interests=["ai"]).has_incomplete_profile
        assert _user(interests=["ai"], looking_for=["mentor"]).has_incomplete_profile
