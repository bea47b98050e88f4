"""Tests for constants utility functions."""

from app.core.constants import (
    TASK_PRIORITIES,
    TASK_PRIORITY_ORDER,
    TEAM_MANAGER_ROLES,
    role_rank,
)


class TestRoleRank:
    def test_owner_outranks_admin(self):
        assert role_rank("owner") > role_rank("admin")

    def test_admin_outranks_member(self):
        assert role_rank("admin") > role_rank("member")

    def test_unknown_ranks_lowest(self):
        assert role_rank("guest") == -1
        assert role_rank("guest") < role_rank("member")

    def test_managers_are_admin_and_owner(self):
        assert set(TEAM_MANAGER_ROLES) == {"admin", "owner"}


class TestPriorityOrder:
    def test_every_priority_has_weight(self):
        assert set(TASK_PRIORITY_ORDER) == set(TASK_PRIORITIES)

    def test_urgent_is_highest(self):
        assert max(TASK_PRIORITY_ORDER, key=TASK_PRIORITY_ORDER.get) == "urgent"
        assert min(TASK_PRIORITY_ORDER, key=TASK_PRIORITY_ORDER.get) == "low"
