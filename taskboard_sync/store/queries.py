"""
Read-side helpers over the store.

Soft references are resolved here, lazily. A reference to a deleted person
or account resolves to the ``UNASSIGNED`` sentinel instead of failing.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from ..models import (
    UNASSIGNED,
    Account,
    AssignmentMode,
    Completion,
    Person,
    WorkItem,
    completion_key,
)
from .reactive import ReactiveStore

Assignee = Union[Account, Person]


def person_name(store: ReactiveStore, person_id: Optional[str]) -> str:
    """Display name of a person, or UNASSIGNED for a missing reference."""
    person = store.people.get(person_id) if person_id else None
    return person.name if person else UNASSIGNED


def account_name(store: ReactiveStore, account_id: Optional[str]) -> str:
    """Display name of an account, or UNASSIGNED for a missing reference."""
    account = store.accounts.get(account_id) if account_id else None
    return account.name if account else UNASSIGNED


def assignees(store: ReactiveStore, item: WorkItem) -> List[Assignee]:
    """Accounts or people targeted by a work item, in assignment order.

    Dangling ids are skipped.
    """
    if item.assignment_mode == AssignmentMode.BY_PERSON:
        people = store.people.index()
        return [people[pid] for pid in item.assigned_person_ids if pid in people]
    accounts = store.accounts.index()
    return [accounts[aid] for aid in item.assigned_account_ids if aid in accounts]


def completion_for(store: ReactiveStore, item: WorkItem, assignee_id: str) -> Optional[Completion]:
    """The completion of ``item`` for one assignee, if any."""
    if item.assignment_mode == AssignmentMode.BY_PERSON:
        key = completion_key(item.id, person_id=assignee_id)
    else:
        key = completion_key(item.id, account_id=assignee_id)
    return store.completions.get(key)


def completion_percent(store: ReactiveStore, item: WorkItem) -> float:
    """Share of assignees that completed ``item``, 0-100."""
    assignee_ids = item.assignee_ids
    if not assignee_ids:
        return 0.0
    done = 0
    for assignee_id in assignee_ids:
        completion = completion_for(store, item, assignee_id)
        if completion is not None and completion.is_complete:
            done += 1
    return done * 100.0 / len(assignee_ids)


def active_work_items(store: ReactiveStore) -> List[WorkItem]:
    """Non-archived work items, newest first."""
    return sorted(
        (item for item in store.work_items if not item.archived),
        key=lambda item: item.created_at,
        reverse=True,
    )


def accounts_for_person(store: ReactiveStore, person_id: str) -> List[Account]:
    return [a for a in store.accounts if a.assigned_person_id == person_id]


def progress_by_assignee(store: ReactiveStore, item: WorkItem) -> Dict[str, bool]:
    """Assignee display name -> completed flag, for one work item."""
    result: Dict[str, bool] = {}
    by_person = item.assignment_mode == AssignmentMode.BY_PERSON
    for assignee_id in item.assignee_ids:
        name = person_name(store, assignee_id) if by_person else account_name(store, assignee_id)
        completion = completion_for(store, item, assignee_id)
        result[name] = bool(completion and completion.is_complete)
    return result


def assigned_work(store: ReactiveStore, *, account_id: Optional[str] = None, person_id: Optional[str] = None) -> List[WorkItem]:
    """Active work items assigned to one account or one person."""
    items = []
    for item in active_work_items(store):
        if person_id is not None and item.assignment_mode == AssignmentMode.BY_PERSON:
            if person_id in item.assigned_person_ids:
                items.append(item)
        elif account_id is not None and item.assignment_mode == AssignmentMode.BY_ACCOUNT:
            if account_id in item.assigned_account_ids:
                items.append(item)
    return items
