"""
Reactive store - the single source of truth for the dashboard.

Holds the eight entity collections and the session values. The view layer
reads and mutates it; the sync engine reads it at push time and replaces it
wholesale at pull time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import (
    COLLECTION_NAMES,
    Account,
    ActionItem,
    AssignmentMode,
    AuthenticatedUser,
    BugReport,
    Completion,
    ConnectionConfig,
    FeatureRequest,
    Note,
    Person,
    Role,
    Snapshot,
    WorkItem,
    completion_key,
    now_ms,
)
from .errors import (
    AssigneeMismatchError,
    AuthenticationError,
    LastPersonError,
    NotFoundError,
)
from .observable import Collection, Observable
from .session import (
    CONNECTION,
    CREDENTIAL_KEY,
    CURRENT_USER,
    MemorySessionStorage,
    SessionStorage,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

MIN_PASSWORD_LENGTH = 6


class ReactiveStore:
    """In-memory collections plus persisted session values.

    Collections are observable; every mutation notifies subscribers
    synchronously. Session values are written through to ``storage`` on
    every change.
    """

    def __init__(
        self,
        storage: Optional[SessionStorage] = None,
        default_endpoint_url: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the store.

        Args:
            storage: Durable session storage (default: in memory)
            default_endpoint_url: Connection used when none is stored
            clock: Epoch-millisecond clock used for timestamps
        """
        self.storage = storage or MemorySessionStorage()
        self.clock = clock

        self.people: Collection[Person] = Collection("people", key=lambda p: p.id)
        self.accounts: Collection[Account] = Collection("accounts", key=lambda a: a.id)
        self.work_items: Collection[WorkItem] = Collection("work_items", key=lambda w: w.id)
        self.completions: Collection[Completion] = Collection(
            "completions", key=lambda c: c.key
        )
        self.action_items: Collection[ActionItem] = Collection(
            "action_items", key=lambda a: a.id
        )
        self.bug_reports: Collection[BugReport] = Collection(
            "bug_reports", key=lambda b: b.id
        )
        self.feature_requests: Collection[FeatureRequest] = Collection(
            "feature_requests", key=lambda f: f.id
        )
        self.notes: Collection[Note] = Collection("notes", key=lambda n: n.owner_key)

        connection = self._load_model(CONNECTION, ConnectionConfig)
        if connection is None and default_endpoint_url:
            connection = ConnectionConfig(endpoint_url=default_endpoint_url)

        self.credential_key: Observable[Optional[str]] = Observable(
            self._load_text(CREDENTIAL_KEY), CREDENTIAL_KEY
        )
        self.current_user: Observable[Optional[AuthenticatedUser]] = Observable(
            self._load_model(CURRENT_USER, AuthenticatedUser), CURRENT_USER
        )
        self.connection: Observable[Optional[ConnectionConfig]] = Observable(
            connection, CONNECTION
        )

        for observable in (self.credential_key, self.current_user, self.connection):
            observable.subscribe(self._persister(observable.name))

    # Session persistence

    def _load_text(self, key: str) -> Optional[str]:
        value = self.storage.load(key)
        return value if isinstance(value, str) and value else None

    def _load_model(self, key: str, model: Type[M]) -> Optional[M]:
        value = self.storage.load(key)
        if value is None:
            return None
        try:
            return model.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Error parsing stored session key {key!r}: {e}")
            return None

    def _persister(self, key: str) -> Callable[[Any], None]:
        def persist(value: Any) -> None:
            if value is None:
                self.storage.delete(key)
            elif isinstance(value, BaseModel):
                self.storage.save(key, value.model_dump(mode="json"))
            else:
                self.storage.save(key, value)

        return persist

    # Whole-store access

    def collections(self) -> Dict[str, Collection]:
        """The eight entity collections keyed by snapshot name."""
        return {name: getattr(self, name) for name in COLLECTION_NAMES}

    def snapshot(self) -> Snapshot:
        """Current values of all eight collections."""
        return Snapshot(
            **{name: list(collection.value) for name, collection in self.collections().items()}
        )

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Replace all eight collections, including with empty ones."""
        for name, collection in self.collections().items():
            collection.replace(getattr(snapshot, name))

    # Connection

    @property
    def is_connected(self) -> bool:
        """True when a non-empty endpoint URL is configured."""
        config = self.connection.value
        return config is not None and bool(config.endpoint_url.strip())

    def connect(self, endpoint_url: str) -> ConnectionConfig:
        config = ConnectionConfig(endpoint_url=endpoint_url)
        self.connection.set(config)
        logger.info("Backend connection configured")
        return config

    def disconnect(self) -> None:
        self.connection.set(None)
        logger.info("Backend connection removed")

    def set_credential_key(self, key: Optional[str]) -> None:
        self.credential_key.set(key or None)

    # Authentication

    def authenticate(self, email: str, password: str) -> AuthenticatedUser:
        """Log in by email and plaintext password.

        Raises:
            AuthenticationError: if no person matches
        """
        wanted = email.strip().lower()
        for person in self.people:
            if person.email.strip().lower() == wanted and person.password == password:
                user = AuthenticatedUser(
                    id=person.id, name=person.name, email=person.email, role=person.role
                )
                self.current_user.set(user)
                return user
        raise AuthenticationError("Invalid email or password")

    def logout(self) -> None:
        self.current_user.set(None)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        """Change the logged-in person's password.

        Raises:
            AuthenticationError: if nobody is logged in, the new passwords
                differ, the new password is too short, or the current
                password is wrong
        """
        user = self.current_user.value
        if user is None:
            raise AuthenticationError("Not logged in")
        if new_password != confirm_password:
            raise AuthenticationError("New passwords do not match")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        person = self.people.get(user.id)
        if person is None or person.password != current_password:
            raise AuthenticationError("Current password is incorrect")
        self.people.update(user.id, password=new_password)

    # People

    def add_person(self, name: str, email: str, password: str, role: Role = Role.ASSIGNEE) -> Person:
        return self.people.add(Person(name=name, email=email, password=password, role=role))

    def update_person(self, person_id: str, **changes: Any) -> Person:
        """Update a person. An empty password keeps the current one."""
        if not changes.get("password"):
            changes.pop("password", None)
        return self.people.update(person_id, **changes)

    def delete_person(self, person_id: str) -> None:
        """Delete a person, unassign their accounts and drop their records.

        Raises:
            LastPersonError: if this is the only person left
            NotFoundError: if the person does not exist
        """
        if self.people.get(person_id) is None:
            raise NotFoundError(f"people: {person_id!r} not found")
        if len(self.people) <= 1:
            raise LastPersonError("You cannot delete the last person")

        self.people.remove(person_id)
        self.accounts.update_where(
            lambda a: a.assigned_person_id == person_id, assigned_person_id=None
        )

        def owned(record) -> bool:
            return record.person_id == person_id

        self.completions.remove_where(owned)
        self.action_items.remove_where(owned)
        self.bug_reports.remove_where(owned)
        self.feature_requests.remove_where(owned)
        self.notes.remove_where(owned)
        logger.info(f"Deleted person {person_id}")

    # Accounts

    def add_accounts(self, names: str, assigned_person_id: Optional[str] = None) -> List[Account]:
        """Create one account per non-blank line of ``names``."""
        created = [
            Account(name=line.strip(), assigned_person_id=assigned_person_id)
            for line in names.splitlines()
            if line.strip()
        ]
        if created:
            self.accounts.replace(self.accounts.value + tuple(created))
        return created

    def delete_account(self, account_id: str) -> None:
        """Delete an account and everything it owns (best effort)."""
        if not self.accounts.remove(account_id):
            raise NotFoundError(f"accounts: {account_id!r} not found")

        def owned(record) -> bool:
            return record.account_id == account_id

        self.completions.remove_where(owned)
        self.action_items.remove_where(owned)
        self.bug_reports.remove_where(owned)
        self.feature_requests.remove_where(owned)
        self.notes.remove_where(owned)
        logger.info(f"Deleted account {account_id}")

    # Work items

    def add_work_item(self, **fields: Any) -> WorkItem:
        fields.setdefault("created_at", self.clock())
        return self.work_items.add(WorkItem(**fields))

    def archive_work_item(self, work_item_id: str) -> WorkItem:
        return self.work_items.update(work_item_id, archived=True)

    def delete_work_item(self, work_item_id: str) -> None:
        """Delete a work item and its completions."""
        if not self.work_items.remove(work_item_id):
            raise NotFoundError(f"work_items: {work_item_id!r} not found")
        self.completions.remove_where(lambda c: c.work_item_id == work_item_id)

    # Completions

    def set_completion(
        self,
        work_item_id: str,
        *,
        account_id: Optional[str] = None,
        person_id: Optional[str] = None,
        **changes: Any,
    ) -> Completion:
        """Create or update the completion for one (work item, assignee) pair.

        There is never more than one completion per pair; a second call
        updates the first. ``completed_at`` is stamped when ``is_complete``
        turns true and cleared when it turns false.

        Raises:
            AssigneeMismatchError: if the assignee kind does not match the
                work item's assignment mode. A work item not in the store
                is not checked.
        """
        item = self.work_items.get(work_item_id)
        if item is not None:
            by_person = item.assignment_mode == AssignmentMode.BY_PERSON
            if (person_id is None) == by_person:
                raise AssigneeMismatchError(
                    f"Work item {work_item_id!r} is assigned by "
                    f"{item.assignment_mode.value}"
                )
        key = completion_key(work_item_id, account_id, person_id)
        existing = self.completions.get(key)

        if "is_complete" in changes:
            if not changes["is_complete"]:
                changes["completed_at"] = None
            elif existing is None or not existing.is_complete:
                changes["completed_at"] = self.clock()

        if existing is not None:
            return self.completions.update(key, **changes)
        completion = Completion(
            work_item_id=work_item_id,
            account_id=account_id,
            person_id=person_id,
            **changes,
        )
        return self.completions.add(completion)

    def record_free_text(
        self,
        work_item_id: str,
        text: str,
        *,
        account_id: Optional[str] = None,
        person_id: Optional[str] = None,
    ) -> Completion:
        """Save a free-text answer; non-blank text counts as complete."""
        return self.set_completion(
            work_item_id,
            account_id=account_id,
            person_id=person_id,
            free_text=text,
            is_complete=bool(text.strip()),
        )

    def choose_option(
        self,
        work_item_id: str,
        option_id: Optional[str],
        *,
        account_id: Optional[str] = None,
        person_id: Optional[str] = None,
    ) -> Completion:
        """Record a single chosen option; choosing one counts as complete."""
        return self.set_completion(
            work_item_id,
            account_id=account_id,
            person_id=person_id,
            chosen_option_ids=[option_id] if option_id else [],
            is_complete=bool(option_id),
        )

    # Owned records

    def add_action_item(self, text: str, *, account_id: Optional[str] = None, person_id: Optional[str] = None) -> ActionItem:
        return self.action_items.add(
            ActionItem(text=text, account_id=account_id, person_id=person_id, created_at=self.clock())
        )

    def add_bug_report(
        self,
        name: str,
        ticket_link: str = "",
        *,
        account_id: Optional[str] = None,
        person_id: Optional[str] = None,
    ) -> BugReport:
        return self.bug_reports.add(
            BugReport(
                name=name,
                ticket_link=ticket_link,
                account_id=account_id,
                person_id=person_id,
                created_at=self.clock(),
            )
        )

    def add_feature_request(self, text: str, *, account_id: Optional[str] = None, person_id: Optional[str] = None) -> FeatureRequest:
        return self.feature_requests.add(
            FeatureRequest(text=text, account_id=account_id, person_id=person_id, created_at=self.clock())
        )

    def toggle_complete(self, collection: str, record_id: str) -> Any:
        """Flip ``is_complete`` on an action item, bug report or feature request."""
        target: Collection = getattr(self, collection)
        record = target.get(record_id)
        if record is None:
            raise NotFoundError(f"{collection}: {record_id!r} not found")
        done = not record.is_complete
        return target.update(
            record_id, is_complete=done, completed_at=self.clock() if done else None
        )

    def set_note(self, text: str, *, account_id: Optional[str] = None, person_id: Optional[str] = None) -> Note:
        """Create or replace the single note of an owner."""
        return self.notes.upsert(Note(account_id=account_id, person_id=person_id, text=text))

    def get_status(self) -> Dict[str, Any]:
        """Counts and session state, for status displays."""
        user = self.current_user.value
        return {
            "collections": {name: len(c) for name, c in self.collections().items()},
            "connected": self.is_connected,
            "current_user": user.email if user else None,
            "has_credential_key": self.credential_key.value is not None,
        }
