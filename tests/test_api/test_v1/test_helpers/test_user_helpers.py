"""Tests for profile visibility and the developer search filter."""

import pytest

from app.api.v1.helpers.users import (
    build_user_search_query,
    can_view_profile,
    profile_visibility_filter,
)
from app.core.exceptions import ValidationError
from app.models.user import Connection, PrivacySettings, User


def _profile(visibility="public", **kwargs):
    return User(
        id="dev-1",
        username="dev",
        email="dev@test.com",
        privacy_settings=PrivacySettings(profile_visibility=visibility),
        **kwargs,
    )


class TestCanViewProfile:
    def test_public(self, regular_user):
        assert can_view_profile(_profile(), regular_user)

    def test_private_hidden(self, regular_user):
        assert not can_view_profile(_profile("private"), regular_user)

    def test_private_visible_to_self(self):
        profile = _profile("private")
        assert can_view_profile(profile, profile)

    def test_connections_only(self, regular_user):
        assert not can_view_profile(_profile("connections"), regular_user)
        connected = _profile("connections", connections=[Connection(user_id=regular_user.id)])
        assert can_view_profile(connected, regular_user)

    def test_read_all_bypasses(self, admin_user):
        assert can_view_profile(_profile("private"), admin_user)


class TestProfileVisibilityFilter:
    def test_regular_viewer(self, regular_user):
        branches = profile_visibility_filter(regular_user)["$or"]

        assert {"privacy_settings.profile_visibility": "public"} in branches
        assert {
            "privacy_settings.profile_visibility": "connections",
            "connections.user_id": "user-1",
        } in branches
        assert not any(
            b.get("privacy_settings.profile_visibility") == "private" for b in branches
        )

    def test_read_all_unfiltered(self, admin_user):
        assert profile_visibility_filter(admin_user) == {}


class TestBuildUserSearchQuery:
    def test_excludes_caller_and_inactive(self, regular_user):
        query = build_user_search_query(regular_user)

        assert query["_id"] == {"$ne": "user-1"}
        assert query["is_active"] is True
        assert "$or" in query

    def test_all_filters(self, regular_user):
        query = build_user_search_query(
            regular_user,
            search=" react dev ",
            skills="react, node ,",
            country="New (Zealand",
            availability="weekends",
            experience="expert",
            looking_for="mentor,study-buddy",
        )

        assert query["$text"] == {"$search": "react dev"}
        assert query["skills"] == {"$in": ["react", "node"]}
        assert query["looking_for"] == {"$in": ["mentor", "study-buddy"]}
        assert query["country"] == {"$regex": r"New\ \(Zealand", "$options": "i"}
        assert query["availability"] == "weekends"
        assert query["experience"] == "expert"

    def test_blank_filters_ignored(self, regular_user):
        query = build_user_search_query(regular_user, search="  ", skills=" , ", country=" ")

        assert "$text" not in query
        assert "skills" not in query
        assert "country" not in query

    @pytest.mark.parametrize(
        "field, value", [("availability", "sometimes"), ("experience", "guru")]
    )
    def test_unknown_choice_rejected(self, regular_user, field, value):
        with pytest.raises(ValidationError):
            build_user_search_query(regular_user, **{field: value})
