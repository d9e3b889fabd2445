"""Tests for read-side store queries."""

import pytest

from taskboard_sync.models import (
    UNASSIGNED,
    Account,
    AssignmentMode,
    Person,
    Snapshot,
    WorkItem,
)
from taskboard_sync.store import queries


@pytest.fixture
def board(store):
    store.apply_snapshot(
        Snapshot(
            people=[
                Person(id="p1", name="Pat", email="pat@example.com"),
                Person(id="p2", name="Sam", email="sam@example.com"),
            ],
            accounts=[
                Account(id="A", name="Acme", assigned_person_id="p1"),
                Account(id="B", name="Beta", assigned_person_id="gone"),
                Account(id="C", name="Corp"),
            ],
            work_items=[
                WorkItem(id="old", title="Old", assigned_account_ids=["A", "B"], created_at=1),
                WorkItem(id="new", title="New", assigned_account_ids=["A", "ghost"], created_at=3),
                WorkItem(id="done", title="Archived", archived=True, created_at=2),
                WorkItem(
                    id="people",
                    title="Survey",
                    assignment_mode=AssignmentMode.BY_PERSON,
                    assigned_person_ids=["p1", "p2"],
                    created_at=2,
                ),
            ],
        )
    )
    return store


class TestQueries:
    """Test cases for store queries."""

    def test_dangling_references_resolve_to_unassigned(self, board):
        """Test missing people and accounts render as the sentinel."""
        assert queries.person_name(board, "p1") == "Pat"
        assert queries.person_name(board, "gone") == UNASSIGNED
        assert queries.person_name(board, None) == UNASSIGNED
        assert queries.account_name(board, "ghost") == UNASSIGNED

    def test_assignees_skip_dangling_ids(self, board):
        """Test assignees only include records that still exist."""
        new = board.work_items.get("new")
        survey = board.work_items.get("people")

        assert [a.id for a in queries.assignees(board, new)] == ["A"]
        assert [p.id for p in queries.assignees(board, survey)] == ["p1", "p2"]

    def test_completion_percent(self, board):
        """Test completion share over the assigned ids."""
        old = board.work_items.get("old")
        assert queries.completion_percent(board, old) == 0.0

        board.set_completion("old", account_id="A", is_complete=True)
        board.set_completion("old", account_id="B", is_complete=False)

        assert queries.completion_percent(board, old) == 50.0

    def test_completion_percent_by_person(self, board):
        """Test person-mode items count person completions."""
        survey = board.work_items.get("people")
        assert queries.completion_percent(board, survey) == 0.0

        board.set_completion("people", person_id="p1", is_complete=True)
        board.set_completion("people", person_id="p2", is_complete=True)
        assert queries.completion_percent(board, survey) == 100.0

    def test_completion_percent_without_assignees(self, board):
        """Test an unassigned item is 0% done."""
        assert queries.completion_percent(board, board.work_items.get("done")) == 0.0

    def test_active_work_items_newest_first(self, board):
        """Test archived items are hidden and order is newest first."""
        assert [i.id for i in queries.active_work_items(board)] == ["new", "people", "old"]

    def test_accounts_for_person(self, board):
        assert [a.id for a in queries.accounts_for_person(board, "p1")] == ["A"]

    def test_progress_by_assignee(self, board):
        """Test progress maps display names to completion flags."""
        board.set_completion("old", account_id="A", is_complete=True)

        progress = queries.progress_by_assignee(board, board.work_items.get("old"))

        assert progress == {"Acme": True, "Beta": False}

    def test_assigned_work(self, board):
        """Test assigned work follows the assignment mode."""
        by_account = queries.assigned_work(board, account_id="A")
        by_person = queries.assigned_work(board, person_id="p2")

        assert [i.id for i in by_account] == ["new", "old"]
        assert [i.id for i in by_person] == ["people"]
