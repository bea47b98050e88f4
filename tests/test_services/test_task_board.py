"""Tests for the project task board."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.exceptions import ErrorCode, NotFound, PermissionDenied, ValidationError
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.task_board import TaskBoard, check_assignee, sort_tasks
from tests.mocks.projects import make_project

MODULE = "app.services.task_board"


def _team():
    return make_project(
        members=[("owner-1", "owner"), ("admin-1", "admin"), ("member-1", "member"), ("member-2", "member")]
    )


def _task(id="task-1", priority="medium", created_at=None, created_by="member-1", **kwargs):
    return Task(
        id=id,
        project_id="project-1",
        title="Wire up login",
        description="Hook the form to the API",
        priority=priority,
        created_by=created_by,
        created_at=created_at or datetime.now(timezone.utc),
        **kwargs,
    )


def _board(task_repo):
    with patch(f"{MODULE}.TaskRepository", return_value=task_repo):
        return TaskBoard(MagicMock())


class TestCheckAssignee:
    def test_member_is_valid(self):
        check_assignee(_team(), "member-1")

    def test_no_assignee_is_valid(self):
        check_assignee(_team(), None)

    def test_outsider_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            check_assignee(_team(), "stranger")
        assert exc_info.value.code == ErrorCode.INVALID_ASSIGNEE


class TestSortTasks:
    def test_priority_then_newest(self):
        now = datetime.now(timezone.utc)
        tasks = [
            _task("low", "low", now),
            _task("urgent-old", "urgent", now - timedelta(days=1)),
            _task("medium", "medium", now),
            _task("urgent-new", "urgent", now),
            _task("high", "high", now - timedelta(days=5)),
        ]

        assert [t.id for t in sort_tasks(tasks)] == [
            "urgent-new",
            "urgent-old",
            "high",
            "medium",
            "low",
        ]

    def test_naive_and_aware_timestamps_mix(self):
        now = datetime.now(timezone.utc)
        tasks = [
            _task("naive", "high", (now - timedelta(hours=1)).replace(tzinfo=None)),
            _task("aware", "high", now),
        ]

        assert [t.id for t in sort_tasks(tasks)] == ["aware", "naive"]


class TestCreateTask:
    def test_member_creates_task(self):
        repo = MagicMock()
        repo.create = AsyncMock()
        board = _board(repo)

        task = asyncio.run(
            board.create_task(
                _team(),
                "member-1",
                TaskCreate(title="Add CI", description="Run tests on push", assignee_id="member-2"),
            )
        )

        assert task.project_id == "project-1"
        assert task.created_by == "member-1"
        assert task.assignee_id == "member-2"
        assert task.status == "todo"
        repo.create.assert_awaited_once()

    def test_non_member_denied(self):
        repo = MagicMock()
        repo.create = AsyncMock()
        board = _board(repo)

        with pytest.raises(PermissionDenied) as exc_info:
            asyncio.run(
                board.create_task(_team(), "stranger", TaskCreate(title="Add CI", description="x"))
            )

        assert exc_info.value.code == ErrorCode.NOT_TEAM_MEMBER
        repo.create.assert_not_called()

    def test_assignee_outside_team(self):
        repo = MagicMock()
        repo.create = AsyncMock()
        board = _board(repo)

        with pytest.raises(ValidationError):
            asyncio.run(
                board.create_task(
                    _team(),
                    "member-1",
                    TaskCreate(title="Add CI", description="x", assignee_id="stranger"),
                )
            )
        repo.create.assert_not_called()


class TestUpdateTask:
    def test_clearing_assignee_is_kept(self):
        repo = MagicMock()
        updated = _task(assignee_id=None)
        repo.update_fields = AsyncMock(return_value=updated)
        board = _board(repo)

        asyncio.run(
            board.update_task(
                _team(),
                _task(assignee_id="member-2"),
                TaskUpdate(assignee_id=None, title=None),
                "member-1",
            )
        )

        repo.update_fields.assert_awaited_once_with("task-1", {"assignee_id": None})

    def test_any_status_transition(self):
        repo = MagicMock()
        repo.update_fields = AsyncMock(return_value=_task(status="todo"))
        board = _board(repo)

        asyncio.run(
            board.update_task(_team(), _task(status="done"), TaskUpdate(status="todo"), "member-2")
        )

        repo.update_fields.assert_awaited_once_with("task-1", {"status": "todo"})

    def test_empty_update_is_noop(self):
        repo = MagicMock()
        repo.update_fields = AsyncMock()
        board = _board(repo)
        task = _task()

        result = asyncio.run(board.update_task(_team(), task, TaskUpdate(), "member-1"))

        assert result is task
        repo.update_fields.assert_not_called()

    def test_assignee_outside_team(self):
        repo = MagicMock()
        repo.update_fields = AsyncMock()
        board = _board(repo)

        with pytest.raises(ValidationError):
            asyncio.run(
                board.update_task(_team(), _task(), TaskUpdate(assignee_id="stranger"), "member-1")
            )

    def test_task_vanished(self):
        repo = MagicMock()
        repo.update_fields = AsyncMock(return_value=None)
        board = _board(repo)

        with pytest.raises(NotFound):
            asyncio.run(
                board.update_task(_team(), _task(), TaskUpdate(title="Renamed"), "member-1")
            )


class TestGetTask:
    def test_task_from_other_project_is_not_found(self):
        repo = MagicMock()
        other = _task()
        other.project_id = "project-2"
        repo.get_by_id = AsyncMock(return_value=other)
        board = _board(repo)

        with pytest.raises(NotFound):
            asyncio.run(board.get_task(_team(), "task-1"))


class TestListTasks:
    def test_filters_passed_to_repository(self):
        repo = MagicMock()
        repo.find_by_project = AsyncMock(return_value=[])
        board = _board(repo)

        asyncio.run(board.list_tasks(_team(), "member-1", status="todo", priority="high"))

        repo.find_by_project.assert_awaited_once_with(
            "project-1", {"status": "todo", "priority": "high"}
        )

    def test_non_member_denied(self):
        repo = MagicMock()
        repo.find_by_project = AsyncMock(return_value=[])
        board = _board(repo)

        with pytest.raises(PermissionDenied):
            asyncio.run(board.list_tasks(_team(), "stranger"))


class TestDeleteTask:
    def _repo(self):
        repo = MagicMock()
        repo.delete = AsyncMock()
        return repo

    def test_creator_can_delete(self):
        repo = self._repo()
        asyncio.run(_board(repo).delete_task(_team(), _task(created_by="member-1"), "member-1"))
        repo.delete.assert_awaited_once_with("task-1")

    def test_admin_can_delete_any(self):
        repo = self._repo()
        asyncio.run(_board(repo).delete_task(_team(), _task(created_by="member-1"), "admin-1"))
        repo.delete.assert_awaited_once_with("task-1")

    def test_other_member_cannot_delete(self):
        repo = self._repo()
        with pytest.raises(PermissionDenied):
            asyncio.run(
                _board(repo).delete_task(_team(), _task(created_by="member-1"), "member-2")
            )
        repo.delete.assert_not_called()


class TestComments:
    def test_blank_comment_rejected(self):
        repo = MagicMock()
        repo.add_comment = AsyncMock()
        board = _board(repo)

        with pytest.raises(ValidationError):
            asyncio.run(board.add_task_comment(_team(), _task(), "member-1", "   "))
        repo.add_comment.assert_not_called()


class TestTaskStats:
    def test_missing_statuses_are_zero(self):
        repo = MagicMock()
        repo.count_by_status = AsyncMock(return_value={"todo": 2, "in-progress": 1})
        board = _board(repo)

        stats = asyncio.run(board.task_stats("project-1"))

        assert stats.todo == 2
        assert stats.in_progress == 1
        assert stats.review == 0
        assert stats.done == 0
