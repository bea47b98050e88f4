"""Tests for the team discussion board."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.exceptions import NotFound, PermissionDenied, ValidationError
from app.models.discussion import DiscussionReply, TeamDiscussion
from app.schemas.discussion import DiscussionCreate
from app.services.discussion_board import DiscussionBoard
from tests.mocks.projects import make_project

MODULE = "app.services.discussion_board"


class FakeDiscussionRepository:
    """Keeps discussions in a dict and toggles likes like $pull/$addToSet would."""

    def __init__(self, *discussions):
        self.discussions = {d.id: d for d in discussions}

    async def get_by_id(self, discussion_id):
        return self.discussions.get(discussion_id)

    async def toggle_like(self, discussion_id, user_id):
        likes = self.discussions[discussion_id].likes
        if user_id in likes:
            likes.remove(user_id)
            return False, len(likes)
        likes.append(user_id)
        return True, len(likes)

    async def toggle_reply_like(self, discussion_id, reply_id, user_id):
        for reply in self.discussions[discussion_id].replies:
            if reply.id == reply_id:
                if user_id in reply.likes:
                    reply.likes.remove(user_id)
                    return False, len(reply.likes)
                reply.likes.append(user_id)
                return True, len(reply.likes)
        return None


def _team():
    return make_project(members=[("owner-1", "owner"), ("member-1", "member")])


def _discussion(**kwargs):
    return TeamDiscussion(
        id="disc-1",
        project_id="project-1",
        author_id="member-1",
        title="API design",
        content="REST or GraphQL?",
        **kwargs,
    )


def _board(repo):
    with patch(f"{MODULE}.DiscussionRepository", return_value=repo):
        return DiscussionBoard(MagicMock())


class TestLike:
    def test_double_like_restores_state(self):
        repo = FakeDiscussionRepository(_discussion(likes=["owner-1"]))
        board = _board(repo)
        project = _team()

        first = asyncio.run(board.like(project, "disc-1", "member-1"))
        second = asyncio.run(board.like(project, "disc-1", "member-1"))

        assert first == {"liked": True, "like_count": 2}
        assert second == {"liked": False, "like_count": 1}
        assert repo.discussions["disc-1"].likes == ["owner-1"]

    def test_non_member_cannot_like(self):
        board = _board(FakeDiscussionRepository(_discussion()))

        with pytest.raises(PermissionDenied):
            asyncio.run(board.like(_team(), "disc-1", "stranger"))

    def test_discussion_of_other_project(self):
        other = _discussion()
        other.project_id = "project-2"
        board = _board(FakeDiscussionRepository(other))

        with pytest.raises(NotFound):
            asyncio.run(board.like(_team(), "disc-1", "member-1"))

    def test_reply_like_toggles(self):
        reply = DiscussionReply(id="reply-1", author_id="owner-1", content="REST")
        repo = FakeDiscussionRepository(_discussion(replies=[reply]))
        board = _board(repo)
        project = _team()

        first = asyncio.run(board.like_reply(project, "disc-1", "reply-1", "member-1"))
        second = asyncio.run(board.like_reply(project, "disc-1", "reply-1", "member-1"))

        assert first["liked"] is True
        assert second == {"liked": False, "like_count": 0}

    def test_unknown_reply(self):
        board = _board(FakeDiscussionRepository(_discussion()))

        with pytest.raises(NotFound):
            asyncio.run(board.like_reply(_team(), "disc-1", "missing", "member-1"))


class TestCreateDiscussion:
    def test_hashtags_invalidate_cache(self):
        repo = MagicMock()
        repo.create = AsyncMock()
        board = _board(repo)

        with patch(f"{MODULE}.cache_service") as mock_cache:
            mock_cache.delete = AsyncMock(return_value=True)
            discussion = asyncio.run(
                board.create_discussion(
                    _team(),
                    "member-1",
                    DiscussionCreate(
                        title="Sprint plan", content="Goals", hashtags=["#Sprint", "sprint "]
                    ),
                )
            )

        assert discussion.hashtags == ["sprint"]
        assert discussion.author_id == "member-1"
        mock_cache.delete.assert_awaited_once()
        repo.create.assert_awaited_once()

    def test_non_member_denied(self):
        repo = MagicMock()
        repo.create = AsyncMock()
        board = _board(repo)

        with pytest.raises(PermissionDenied):
            asyncio.run(
                board.create_discussion(
                    _team(), "stranger", DiscussionCreate(title="Hello", content="hi")
                )
            )
        repo.create.assert_not_called()


class TestReply:
    def test_blank_reply_rejected(self):
        board = _board(FakeDiscussionRepository(_discussion()))

        with pytest.raises(ValidationError):
            asyncio.run(board.reply(_team(), "disc-1", "member-1", "  "))


class TestPin:
    def test_member_cannot_pin(self):
        board = _board(FakeDiscussionRepository(_discussion()))

        with pytest.raises(PermissionDenied):
            asyncio.run(board.set_pinned(_team(), "disc-1", True, "member-1"))

    def test_owner_pins(self):
        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=_discussion())
        repo.update = AsyncMock(return_value=_discussion(is_pinned=True))
        board = _board(repo)

        result = asyncio.run(board.set_pinned(_team(), "disc-1", True, "owner-1"))

        assert result.is_pinned is True
        repo.update.assert_awaited_once_with("disc-1", {"is_pinned": True})


class TestListDiscussions:
    def test_hashtag_filter_is_normalized(self):
        repo = MagicMock()
        repo.find_by_project = AsyncMock(return_value=[])
        repo.count_by_project = AsyncMock(return_value=45)
        board = _board(repo)

        _, total = asyncio.run(
            board.list_discussions(_team(), "member-1", hashtag="#Backend", skip=20, limit=20)
        )

        assert total == 45
        repo.find_by_project.assert_awaited_once_with(
            "project-1", {"hashtags": "backend"}, skip=20, limit=20
        )


class TestHashtags:
    def test_served_through_cache(self):
        repo = MagicMock()
        repo.hashtag_counts = AsyncMock(return_value=[{"tag": "api", "count": 3}])
        board = _board(repo)

        async def fake_get_or_fetch(key, fetch_fn, ttl_seconds=None):
            return await fetch_fn()

        with patch(f"{MODULE}.cache_service") as mock_cache:
            mock_cache.get_or_fetch = AsyncMock(side_effect=fake_get_or_fetch)
            result = asyncio.run(board.project_hashtags(_team(), "member-1"))

        assert result == [{"tag": "api", "count": 3}]
        assert mock_cache.get_or_fetch.call_args[0][0].endswith("project-1")
