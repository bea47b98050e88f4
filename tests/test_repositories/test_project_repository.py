"""Tests for ProjectRepository.

Checks the conditional filters behind the team workflow and the like
toggle using mocked MongoDB.
"""

import asyncio
from unittest.mock import AsyncMock

from app.models.project import ProjectTeamMember, TeamRequest
from app.repositories.projects import (
    HAS_FREE_SEAT,
    ProjectRepository,
    accept_request_filter,
    submit_request_filter,
)
from tests.mocks.mongodb import create_mock_collection, create_mock_db

PROJECT_DOC = {
    "_id": "project-1",
    "owner_id": "owner-1",
    "title": "DevMatch",
    "description": "Find developers",
    "github_url": "https://github.com/acme/devmatch",
}


def _repo(collection):
    return ProjectRepository(create_mock_db({"projects": collection}))


class TestSubmitRequestFilter:
    def test_encodes_every_precondition(self):
        query = submit_request_filter("project-1", "user-a")

        assert query["_id"] == "project-1"
        assert query["status"] == "in-progress"
        assert query["team_settings.allow_team_requests"] is True
        assert query["team_members.user_id"] == {"$ne": "user-a"}
        assert query["team_requests"] == {
            "$not": {"$elemMatch": {"user_id": "user-a", "status": "pending"}}
        }
        assert query["$expr"] == HAS_FREE_SEAT

    def test_free_seat_compares_members_to_max_size(self):
        size, max_size = HAS_FREE_SEAT["$lt"]
        assert size == {"$size": {"$ifNull": ["$team_members", []]}}
        assert max_size == "$team_settings.max_team_size"


class TestAcceptRequestFilter:
    def test_requires_pending_request_and_free_seat(self):
        query = accept_request_filter("project-1", "req-1", "user-a")

        assert query["team_requests"] == {"$elemMatch": {"id": "req-1", "status": "pending"}}
        assert query["team_members.user_id"] == {"$ne": "user-a"}
        assert query["$expr"] == HAS_FREE_SEAT


class TestTeamWrites:
    def test_add_team_request_returns_none_when_filter_misses(self):
        collection = create_mock_collection(find_one_and_update=None)
        repo = _repo(collection)

        result = asyncio.run(
            repo.add_team_request("project-1", TeamRequest(user_id="user-a", skills=["go"]))
        )

        assert result is None
        query, update = collection.find_one_and_update.call_args[0]
        assert query == submit_request_filter("project-1", "user-a")
        assert update["$push"]["team_requests"]["user_id"] == "user-a"

    def test_accept_updates_request_and_members_together(self):
        collection = create_mock_collection(find_one_and_update=PROJECT_DOC)
        repo = _repo(collection)
        member = ProjectTeamMember(user_id="user-a")

        result = asyncio.run(
            repo.accept_team_request("project-1", "req-1", member, "owner-1")
        )

        assert result.id == "project-1"
        query, update = collection.find_one_and_update.call_args[0]
        assert query == accept_request_filter("project-1", "req-1", "user-a")
        assert update["$set"]["team_requests.$.status"] == "accepted"
        assert update["$set"]["team_requests.$.decided_by"] == "owner-1"
        assert update["$push"]["team_members"]["user_id"] == "user-a"

    def test_reject_only_touches_pending_request(self):
        collection = create_mock_collection(find_one_and_update=None)
        repo = _repo(collection)

        result = asyncio.run(repo.reject_team_request("project-1", "req-1", "owner-1"))

        assert result is None
        query, update = collection.find_one_and_update.call_args[0]
        assert query["team_requests"] == {"$elemMatch": {"id": "req-1", "status": "pending"}}
        assert update["$set"]["team_requests.$.status"] == "rejected"
        assert "$push" not in update

    def test_remove_member_never_matches_owner(self):
        collection = create_mock_collection(find_one_and_update=PROJECT_DOC)
        repo = _repo(collection)

        asyncio.run(repo.remove_member("project-1", "user-a", ["member", "admin", "owner"]))

        query, update = collection.find_one_and_update.call_args[0]
        assert query["team_members"] == {
            "$elemMatch": {"user_id": "user-a", "role": {"$in": ["member", "admin"]}}
        }
        assert update["$pull"] == {"team_members": {"user_id": "user-a"}}


class TestUpdate:
    def test_extra_filter_merged_into_query(self):
        collection = create_mock_collection(find_one_and_update=None)
        repo = _repo(collection)
        guard = {"$expr": {"$lte": [{"$size": "$team_members"}, 4]}}

        result = asyncio.run(
            repo.update("project-1", {"team_settings.max_team_size": 4}, extra_filter=guard)
        )

        assert result is None
        query, update = collection.find_one_and_update.call_args[0]
        assert query == {"_id": "project-1", **guard}
        assert update["$set"]["team_settings.max_team_size"] == 4
        assert "updated_at" in update["$set"]


class TestToggleLike:
    def test_like_when_not_liked(self):
        collection = create_mock_collection()
        collection.find_one_and_update = AsyncMock(side_effect=[None, {"likes": ["a", "b"]}])
        repo = _repo(collection)

        assert asyncio.run(repo.toggle_like("project-1", "b")) == (True, 2)

    def test_unlike_when_liked(self):
        collection = create_mock_collection()
        collection.find_one_and_update = AsyncMock(return_value={"likes": ["a"]})
        repo = _repo(collection)

        assert asyncio.run(repo.toggle_like("project-1", "b")) == (False, 1)
        assert collection.find_one_and_update.await_count == 1

    def test_missing_project(self):
        collection = create_mock_collection()
        collection.find_one_and_update = AsyncMock(side_effect=[None, None])
        repo = _repo(collection)

        assert asyncio.run(repo.toggle_like("missing", "b")) == (False, 0)


class TestQueries:
    def test_find_by_member_includes_owner(self):
        collection = create_mock_collection(find=[PROJECT_DOC])
        repo = _repo(collection)

        result = asyncio.run(repo.find_by_member("user-a"))

        assert [p.id for p in result] == ["project-1"]
        collection.find.assert_called_once_with(
            {"$or": [{"owner_id": "user-a"}, {"team_members.user_id": "user-a"}]}
        )

    def test_get_by_id_not_found(self):
        repo = _repo(create_mock_collection(find_one=None))
        assert asyncio.run(repo.get_by_id("missing")) is None
