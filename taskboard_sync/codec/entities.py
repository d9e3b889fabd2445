"""
One codec per entity kind.

Column orders here are the on-sheet layout; changing them breaks decoding
of data already stored remotely.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from pydantic import TypeAdapter

from ..models import (
    AssignmentMode,
    Account,
    ActionItem,
    BugReport,
    ChoiceOption,
    Completion,
    FeatureRequest,
    InputKind,
    Note,
    Person,
    Role,
    WorkCategory,
    WorkItem,
)
from .base import EntityCodec
from .cells import (
    boolean,
    composite,
    date_text,
    encode_composite,
    encode_optional,
    enum_value,
    integer,
    optional_integer,
    optional_text,
    text,
)

_STRING_LIST = TypeAdapter(List[str])
_OPTIONS = TypeAdapter(List[ChoiceOption])
# Spellings written by the earlier dashboard into the same sheet
_LEGACY_INPUT_KINDS = {
    "Checkbox": InputKind.ACKNOWLEDGE,
    "Text Area": InputKind.FREE_TEXT,
    "Multi-select Dropdown": InputKind.SINGLE_CHOICE,
}
_LEGACY_ROLES = {"manager": Role.LEAD, "csm": Role.ASSIGNEE}


def _input_kinds(raw: List[str]) -> List[InputKind]:
    """Known input kinds of a decoded list; unknown entries are dropped."""
    kinds = []
    for value in raw:
        kind = enum_value(InputKind, value, None, aliases=_LEGACY_INPUT_KINDS)
        if kind is not None:
            kinds.append(kind)
    return kinds


class PersonCodec(EntityCodec[Person]):
    table_name = "Users"
    collection = "people"
    header = ("ID", "Name", "Email", "Password", "Role")

    def to_row(self, entity: Person) -> List[Any]:
        return [
            entity.id,
            entity.name,
            entity.email,
            encode_optional(entity.password),
            entity.role.value,
        ]

    def from_row(self, row: Sequence[Any]) -> Person:
        return Person(
            id=text(row[0]),
            name=text(row[1]),
            email=text(row[2]),
            password=optional_text(row[3]),
            role=enum_value(Role, row[4], Role.ASSIGNEE, aliases=_LEGACY_ROLES),
        )


class AccountCodec(EntityCodec[Account]):
    table_name = "Customers"
    collection = "accounts"
    header = ("ID", "Name", "Assigned CSM ID")

    def to_row(self, entity: Account) -> List[Any]:
        return [entity.id, entity.name, encode_optional(entity.assigned_person_id)]

    def from_row(self, row: Sequence[Any]) -> Account:
        return Account(
            id=text(row[0]),
            name=text(row[1]),
            assigned_person_id=optional_text(row[2]),
        )


class WorkItemCodec(EntityCodec[WorkItem]):
    table_name = "Tasks"
    collection = "work_items"
    header = (
        "ID",
        "Title",
        "Description",
        "Due Date",
        "Category",
        "Input Types (JSON)",
        "Assignment Type",
        "Customer IDs (JSON)",
        "CSM IDs (JSON)",
        "Options (JSON)",
        "Archived",
        "Created At",
    )

    def to_row(self, entity: WorkItem) -> List[Any]:
        return [
            entity.id,
            entity.title,
            entity.description,
            entity.due_date,
            entity.category.value,
            encode_composite(entity.input_kinds),
            entity.assignment_mode.value,
            encode_composite(entity.assigned_account_ids),
            encode_composite(entity.assigned_person_ids),
            encode_composite(entity.choice_options),
            entity.archived,
            entity.created_at,
        ]

    def from_row(self, row: Sequence[Any]) -> WorkItem:
        raw_kinds = composite(row[5], _STRING_LIST) or []
        return WorkItem(
            id=text(row[0]),
            title=text(row[1]),
            description=text(row[2]),
            due_date=date_text(row[3]),
            category=enum_value(WorkCategory, row[4], WorkCategory.OTHER),
            input_kinds=_input_kinds(raw_kinds),
            assignment_mode=enum_value(
                AssignmentMode, row[6], AssignmentMode.BY_ACCOUNT
            ),
            assigned_account_ids=composite(row[7], _STRING_LIST) or [],
            assigned_person_ids=composite(row[8], _STRING_LIST) or [],
            choice_options=composite(row[9], _OPTIONS),
            archived=boolean(row[10]),
            created_at=integer(row[11]),
        )


class CompletionCodec(EntityCodec[Completion]):
    table_name = "TaskCompletions"
    collection = "completions"
    header = (
        "Task ID",
        "Customer ID",
        "CSM ID",
        "Is Completed",
        "Notes",
        "Selected Options (JSON)",
        "Completed At",
    )

    def to_row(self, entity: Completion) -> List[Any]:
        return [
            entity.work_item_id,
            encode_optional(entity.account_id),
            encode_optional(entity.person_id),
            entity.is_complete,
            encode_optional(entity.free_text),
            encode_composite(entity.chosen_option_ids),
            encode_optional(entity.completed_at),
        ]

    def from_row(self, row: Sequence[Any]) -> Completion:
        return Completion(
            work_item_id=text(row[0]),
            account_id=optional_text(row[1]),
            person_id=optional_text(row[2]),
            is_complete=boolean(row[3]),
            free_text=optional_text(row[4]),
            chosen_option_ids=composite(row[5], _STRING_LIST),
            completed_at=optional_integer(row[6]),
        )


class ActionItemCodec(EntityCodec[ActionItem]):
    table_name = "ActionItems"
    collection = "action_items"
    header = (
        "ID",
        "Customer ID",
        "CSM ID",
        "Text",
        "Is Completed",
        "Completed At",
        "Created At",
    )

    def to_row(self, entity: ActionItem) -> List[Any]:
        return [
            entity.id,
            encode_optional(entity.account_id),
            encode_optional(entity.person_id),
            entity.text,
            entity.is_complete,
            encode_optional(entity.completed_at),
            entity.created_at,
        ]

    def from_row(self, row: Sequence[Any]) -> ActionItem:
        return ActionItem(
            id=text(row[0]),
            account_id=optional_text(row[1]),
            person_id=optional_text(row[2]),
            text=text(row[3]),
            is_complete=boolean(row[4]),
            completed_at=optional_integer(row[5]),
            created_at=integer(row[6]),
        )


class BugReportCodec(EntityCodec[BugReport]):
    table_name = "BugReports"
    collection = "bug_reports"
    header = (
        "ID",
        "Customer ID",
        "CSM ID",
        "Name",
        "Ticket Link",
        "Is Completed",
        "Completed At",
        "Created At",
    )

    def to_row(self, entity: BugReport) -> List[Any]:
        return [
            entity.id,
            encode_optional(entity.account_id),
            encode_optional(entity.person_id),
            entity.name,
            entity.ticket_link,
            entity.is_complete,
            encode_optional(entity.completed_at),
            entity.created_at,
        ]

    def from_row(self, row: Sequence[Any]) -> BugReport:
        return BugReport(
            id=text(row[0]),
            account_id=optional_text(row[1]),
            person_id=optional_text(row[2]),
            name=text(row[3]),
            ticket_link=text(row[4]),
            is_complete=boolean(row[5]),
            completed_at=optional_integer(row[6]),
            created_at=integer(row[7]),
        )


class FeatureRequestCodec(EntityCodec[FeatureRequest]):
    table_name = "FeatureRequests"
    collection = "feature_requests"
    header = (
        "ID",
        "Customer ID",
        "CSM ID",
        "Text",
        "Is Completed",
        "Completed At",
        "Created At",
    )

    def to_row(self, entity: FeatureRequest) -> List[Any]:
        return [
            entity.id,
            encode_optional(entity.account_id),
            encode_optional(entity.person_id),
            entity.text,
            entity.is_complete,
            encode_optional(entity.completed_at),
            entity.created_at,
        ]

    def from_row(self, row: Sequence[Any]) -> FeatureRequest:
        return FeatureRequest(
            id=text(row[0]),
            account_id=optional_text(row[1]),
            person_id=optional_text(row[2]),
            text=text(row[3]),
            is_complete=boolean(row[4]),
            completed_at=optional_integer(row[5]),
            created_at=integer(row[6]),
        )


class NoteCodec(EntityCodec[Note]):
    table_name = "MeetingNotes"
    collection = "notes"
    header = ("Customer ID", "CSM ID", "Text")

    def to_row(self, entity: Note) -> List[Any]:
        return [
            encode_optional(entity.account_id),
            encode_optional(entity.person_id),
            entity.text,
        ]

    def from_row(self, row: Sequence[Any]) -> Note:
        return Note(
            account_id=optional_text(row[0]),
            person_id=optional_text(row[1]),
            text=text(row[2]),
        )
