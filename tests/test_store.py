"""Tests for the reactive store."""

import json

import pytest

from taskboard_sync.models import (
    Account,
    AssignmentMode,
    InputKind,
    Note,
    Person,
    Role,
    Snapshot,
)
from taskboard_sync.store import (
    AssigneeMismatchError,
    AuthenticationError,
    DuplicateKeyError,
    FileSessionStorage,
    LastPersonError,
    MemorySessionStorage,
    NotFoundError,
    Observable,
    ReactiveStore,
)

from .conftest import ENDPOINT, START_MS


@pytest.fixture
def populated(store) -> ReactiveStore:
    """Two people, two accounts, and records owned by each."""
    store.apply_snapshot(
        Snapshot(
            people=[
                Person(id="lead", name="Lee", email="lee@example.com", password="secret1", role=Role.LEAD),
                Person(id="p1", name="Pat", email="Pat@Example.com", password="hunter22"),
            ],
            accounts=[
                Account(id="A", name="Acme", assigned_person_id="p1"),
                Account(id="B", name="Beta", assigned_person_id="lead"),
            ],
        )
    )
    return store


class TestObservable:
    """Test cases for Observable and Collection."""

    def test_listeners_run_synchronously(self):
        """Test a listener has run by the time set() returns."""
        seen = []
        value = Observable(0, "counter")
        value.subscribe(seen.append)

        value.set(1)
        value.set(2)

        assert seen == [1, 2]

    def test_unsubscribe(self):
        """Test an unsubscribed listener is no longer called."""
        seen = []
        value = Observable(0)
        unsubscribe = value.subscribe(seen.append)

        unsubscribe()
        value.set(1)

        assert seen == []

    def test_failing_listener_does_not_block_others(self):
        """Test one failing listener does not stop the rest."""
        seen = []
        value = Observable(0)

        def broken(_):
            raise RuntimeError("boom")

        value.subscribe(broken)
        value.subscribe(seen.append)
        value.set(5)

        assert seen == [5]

    def test_mutation_derives_new_tuple(self, store):
        """Test earlier collection values are left untouched."""
        store.add_accounts("Acme")
        before = store.accounts.value

        store.add_accounts("Beta")

        assert len(before) == 1
        assert len(store.accounts.value) == 2

    def test_duplicate_key_rejected(self, store):
        """Test add() refuses an existing key."""
        store.accounts.add(Account(id="A", name="Acme"))

        with pytest.raises(DuplicateKeyError):
            store.accounts.add(Account(id="A", name="Other"))

    def test_replace_collapses_duplicate_keys(self, store):
        """Test replace() keeps one item per key, the last one, in first position."""
        store.accounts.replace(
            [
                Account(id="A", name="Acme"),
                Account(id="B", name="Beta"),
                Account(id="A", name="Acme Corp"),
            ]
        )

        assert [(a.id, a.name) for a in store.accounts] == [("A", "Acme Corp"), ("B", "Beta")]

    def test_replace_collapses_notes_per_owner(self, store):
        """Test two notes for one owner collapse into the later one."""
        store.notes.replace(
            [Note(account_id="A", text="first"), Note(account_id="A", text="second")]
        )

        assert [n.text for n in store.notes] == ["second"]

    def test_update_missing_raises(self, store):
        """Test update() on an unknown key raises."""
        with pytest.raises(NotFoundError):
            store.accounts.update("missing", name="x")


class TestCompletions:
    """Test cases for completion upserts."""

    def test_second_call_updates_not_duplicates(self, store, clock):
        """Test one (work item, assignee) pair has a single completion."""
        item = store.add_work_item(title="Renew contract", assigned_account_ids=["A"])

        store.set_completion(item.id, account_id="A", is_complete=True)
        clock.advance(1)
        store.set_completion(item.id, account_id="A", free_text="done")

        assert len(store.completions) == 1
        completion = store.completions.value[0]
        assert completion.is_complete is True
        assert completion.free_text == "done"
        assert completion.completed_at == START_MS

    def test_completed_at_cleared_when_reopened(self, store):
        """Test unchecking a completion clears its timestamp."""
        store.set_completion("item1", account_id="A", is_complete=True)

        completion = store.set_completion("item1", account_id="A", is_complete=False)

        assert completion.completed_at is None

    def test_free_text_completion(self, store):
        """Test non-blank free text counts as complete."""
        assert store.record_free_text("item1", "   ", person_id="P").is_complete is False
        completion = store.record_free_text("item1", "All good", person_id="P")

        assert completion.is_complete is True
        assert completion.free_text == "All good"
        assert len(store.completions) == 1

    def test_choose_option(self, store):
        """Test choosing an option completes, clearing it reopens."""
        completion = store.choose_option("item1", "opt1", account_id="A")
        assert completion.chosen_option_ids == ["opt1"]
        assert completion.is_complete is True

        completion = store.choose_option("item1", None, account_id="A")
        assert completion.chosen_option_ids == []
        assert completion.is_complete is False

    def test_assignee_kind_must_match_work_item(self, store):
        """Test a completion must use the work item's assignee kind."""
        by_account = store.add_work_item(title="Renew", assigned_account_ids=["A"])
        by_person = store.add_work_item(
            title="Survey",
            assignment_mode=AssignmentMode.BY_PERSON,
            assigned_person_ids=["p1"],
        )

        with pytest.raises(AssigneeMismatchError):
            store.set_completion(by_account.id, person_id="p1", is_complete=True)
        with pytest.raises(AssigneeMismatchError):
            store.record_free_text(by_person.id, "done", account_id="A")

        assert len(store.completions) == 0
        store.set_completion(by_person.id, person_id="p1", is_complete=True)
        assert len(store.completions) == 1

    def test_unknown_work_item_is_not_checked(self, store):
        """Test completions for a work item not in the store are accepted."""
        completion = store.set_completion("missing", person_id="p1", is_complete=True)

        assert completion.person_id == "p1"

    def test_account_and_person_completions_are_distinct(self, store):
        """Test the same ids by account and by person do not collide."""
        store.set_completion("item1", account_id="X", is_complete=True)
        store.set_completion("item1", person_id="X", is_complete=True)

        assert len(store.completions) == 2


class TestCascades:
    """Test cases for delete cascades."""

    def test_delete_work_item_removes_completions(self, store):
        """Test deleting a work item drops its completions only."""
        item = store.add_work_item(title="T", assigned_account_ids=["A"])
        store.set_completion(item.id, account_id="A", is_complete=True)
        store.set_completion("other", account_id="A", is_complete=True)

        store.delete_work_item(item.id)

        assert store.work_items.get(item.id) is None
        assert [c.work_item_id for c in store.completions] == ["other"]

    def test_delete_account_removes_owned_records(self, populated):
        """Test deleting an account drops everything it owns."""
        store = populated
        store.set_completion("item1", account_id="A", is_complete=True)
        store.add_action_item("Call", account_id="A")
        store.add_bug_report("Crash", account_id="A")
        store.add_feature_request("Dark mode", account_id="A")
        store.set_note("notes", account_id="A")
        store.add_action_item("Keep", account_id="B")

        store.delete_account("A")

        assert [a.id for a in store.accounts] == ["B"]
        assert len(store.completions) == 0
        assert [r.text for r in store.action_items] == ["Keep"]
        assert len(store.bug_reports) == 0
        assert len(store.feature_requests) == 0
        assert len(store.notes) == 0

    def test_delete_person_unassigns_accounts(self, populated):
        """Test deleting a person unassigns their accounts and drops their records."""
        store = populated
        store.set_completion("item1", person_id="p1", is_complete=True)
        store.add_bug_report("Crash", person_id="p1")
        store.set_note("1:1 notes", person_id="p1")

        store.delete_person("p1")

        assert store.people.get("p1") is None
        assert store.accounts.get("A").assigned_person_id is None
        assert store.accounts.get("B").assigned_person_id == "lead"
        assert len(store.completions) == 0
        assert len(store.bug_reports) == 0
        assert len(store.notes) == 0

    def test_cannot_delete_last_person(self, populated):
        """Test the last remaining person is protected."""
        populated.delete_person("p1")

        with pytest.raises(LastPersonError):
            populated.delete_person("lead")

    def test_delete_missing_raises(self, populated):
        """Test deleting unknown records raises NotFoundError."""
        with pytest.raises(NotFoundError):
            populated.delete_person("ghost")
        with pytest.raises(NotFoundError):
            populated.delete_account("ghost")
        with pytest.raises(NotFoundError):
            populated.delete_work_item("ghost")


class TestDomainOperations:
    """Test cases for the remaining store operations."""

    def test_add_accounts_from_lines(self, store):
        """Test one account per non-blank line."""
        created = store.add_accounts("Acme\n\n  Beta Corp  \n", assigned_person_id="p1")

        assert [a.name for a in created] == ["Acme", "Beta Corp"]
        assert all(a.assigned_person_id == "p1" for a in store.accounts)

    def test_add_work_item_uses_clock(self, store):
        """Test new work items are stamped with the store clock."""
        item = store.add_work_item(
            title="Poll",
            input_kinds=[InputKind.SINGLE_CHOICE],
            assignment_mode=AssignmentMode.BY_PERSON,
        )

        assert item.created_at == START_MS
        assert item.choice_options == []

    def test_archive_work_item(self, store):
        """Test archiving keeps the item but flags it."""
        item = store.add_work_item(title="Old")

        store.archive_work_item(item.id)

        assert store.work_items.get(item.id).archived is True

    def test_toggle_complete(self, store, clock):
        """Test toggling stamps and clears completed_at."""
        action = store.add_action_item("Call back", account_id="A")
        clock.advance(3)

        done = store.toggle_complete("action_items", action.id)
        assert done.is_complete is True
        assert done.completed_at == START_MS + 3000

        reopened = store.toggle_complete("action_items", action.id)
        assert reopened.is_complete is False
        assert reopened.completed_at is None

    def test_set_note_upserts(self, store):
        """Test an owner has at most one note."""
        store.set_note("first", account_id="A")
        store.set_note("second", account_id="A")

        assert [n.text for n in store.notes] == ["second"]

    def test_update_person_keeps_password_when_blank(self, populated):
        """Test an empty password in an update keeps the old one."""
        populated.update_person("p1", name="Patricia", password="")

        person = populated.people.get("p1")
        assert person.name == "Patricia"
        assert person.password == "hunter22"

    def test_apply_snapshot_replaces_everything(self, populated):
        """Test applying an empty snapshot clears every collection."""
        populated.apply_snapshot(Snapshot())

        assert all(len(c) == 0 for c in populated.collections().values())


class TestAuthentication:
    """Test cases for login and password changes."""

    def test_authenticate_case_insensitive_email(self, populated):
        """Test email matching ignores case."""
        user = populated.authenticate("pat@example.com", "hunter22")

        assert user.id == "p1"
        assert populated.current_user.value == user

    def test_authenticate_wrong_password(self, populated):
        """Test a wrong password is rejected."""
        with pytest.raises(AuthenticationError):
            populated.authenticate("pat@example.com", "nope")
        assert populated.current_user.value is None

    def test_change_password(self, populated):
        """Test a valid password change."""
        populated.authenticate("lee@example.com", "secret1")

        populated.change_password("secret1", "newpass", "newpass")

        assert populated.people.get("lead").password == "newpass"

    @pytest.mark.parametrize(
        "current,new,confirm",
        [
            ("secret1", "newpass", "different"),
            ("secret1", "short", "short"),
            ("wrong", "newpass", "newpass"),
        ],
    )
    def test_change_password_rejected(self, populated, current, new, confirm):
        """Test mismatched, short, or wrong-current changes are refused."""
        populated.authenticate("lee@example.com", "secret1")

        with pytest.raises(AuthenticationError):
            populated.change_password(current, new, confirm)
        assert populated.people.get("lead").password == "secret1"

    def test_change_password_requires_login(self, populated):
        """Test a password change needs a logged-in user."""
        with pytest.raises(AuthenticationError):
            populated.change_password("secret1", "newpass", "newpass")


class TestSessionPersistence:
    """Test cases for durable session values."""

    def test_default_endpoint_connects(self, store):
        """Test a configured default endpoint counts as connected."""
        assert store.is_connected
        assert store.connection.value.endpoint_url == ENDPOINT

    def test_session_values_written_through(self):
        """Test session values reach storage on every change."""
        storage = MemorySessionStorage()
        store = ReactiveStore(storage=storage)

        store.connect(ENDPOINT)
        store.set_credential_key("k3y")

        assert storage.data["connection"] == {"endpoint_url": ENDPOINT}
        assert storage.data["credential_key"] == "k3y"

        store.disconnect()
        store.set_credential_key("")
        assert "connection" not in storage.data
        assert "credential_key" not in storage.data
        assert not store.is_connected

    def test_file_storage_survives_restart(self, tmp_path):
        """Test a new store picks up the saved session."""
        path = tmp_path / "nested" / "session.json"
        first = ReactiveStore(storage=FileSessionStorage(path))
        first.people.add(Person(id="p1", name="Pat", email="pat@example.com", password="pw1234"))
        first.connect(ENDPOINT)
        first.authenticate("pat@example.com", "pw1234")

        second = ReactiveStore(storage=FileSessionStorage(path))

        assert second.is_connected
        assert second.current_user.value.id == "p1"
        assert "password" not in json.loads(path.read_text())["current_user"]
        # Entity collections are not persisted locally
        assert len(second.people) == 0

    def test_corrupt_session_file_is_ignored(self, tmp_path):
        """Test an unreadable session file starts an empty session."""
        path = tmp_path / "session.json"
        path.write_text("{not json")

        store = ReactiveStore(storage=FileSessionStorage(path))

        assert not store.is_connected
        assert store.current_user.value is None

    def test_invalid_stored_value_is_ignored(self):
        """Test a stored value with the wrong shape is dropped."""
        storage = MemorySessionStorage({"current_user": {"id": "p1"}})

        store = ReactiveStore(storage=storage)

        assert store.current_user.value is None

    def test_get_status(self, populated):
        """Test the status summary."""
        status = populated.get_status()

        assert status["connected"] is True
        assert status["collections"]["people"] == 2
        assert status["current_user"] is None
        assert status["has_credential_key"] is False
