"""
Work items and per-assignee completions.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from pydantic import Field, constr, field_validator, model_validator

from .enums import AssignmentMode, InputKind, WorkCategory
from .primitives import Entity, blank_to_none, generate_id, now_ms


class ChoiceOption(Entity):
    """One selectable answer of a single-choice work item."""

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("opt"))
    label: str


class WorkItem(Entity):
    """A unit of work assigned to accounts or to people.

    Invariants:
    - ``input_kinds`` behaves as a set; duplicates collapse, first order wins.
    - ``choice_options`` is present iff SINGLE_CHOICE is an input kind.
    """

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("item"))
    title: str
    description: str = Field("", description="Markdown body")
    due_date: str = Field("", description="Calendar date, YYYY-MM-DD")
    category: WorkCategory = WorkCategory.OTHER
    input_kinds: List[InputKind] = Field(
        default_factory=lambda: [InputKind.ACKNOWLEDGE]
    )
    assignment_mode: AssignmentMode = AssignmentMode.BY_ACCOUNT
    assigned_account_ids: List[str] = Field(default_factory=list)
    assigned_person_ids: List[str] = Field(default_factory=list)
    choice_options: Optional[List[ChoiceOption]] = None
    archived: bool = False
    created_at: int = Field(default_factory=now_ms)

    @model_validator(mode="before")
    @classmethod
    def _align_choice_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kinds = data.get("input_kinds") or []
        if not isinstance(kinds, (list, tuple, set)):
            return data
        # str enum: plain strings from a decoded row compare equal too
        wants_choices = InputKind.SINGLE_CHOICE in list(kinds)
        data = dict(data)
        if not wants_choices:
            data["choice_options"] = None
        elif data.get("choice_options") is None:
            data["choice_options"] = []
        return data

    @field_validator("input_kinds")
    @classmethod
    def _dedupe_kinds(cls, value: List[InputKind]) -> List[InputKind]:
        return list(dict.fromkeys(value))

    @property
    def assignee_ids(self) -> List[str]:
        """Ids of the assignees targeted by the current assignment mode."""
        if self.assignment_mode == AssignmentMode.BY_PERSON:
            return list(self.assigned_person_ids)
        return list(self.assigned_account_ids)


class Completion(Entity):
    """Completion state of one work item for one assignee.

    Exactly one of ``account_id`` / ``person_id`` is set, matching the owning
    work item's assignment mode.
    """

    work_item_id: constr(min_length=1)
    account_id: Optional[str] = None
    person_id: Optional[str] = None
    is_complete: bool = False
    free_text: Optional[str] = None
    chosen_option_ids: Optional[List[str]] = None
    completed_at: Optional[int] = None

    @field_validator("account_id", "person_id", "free_text", mode="before")
    @classmethod
    def _blank_optional(cls, value: Any) -> Any:
        return blank_to_none(value)

    @model_validator(mode="after")
    def _exactly_one_assignee(self) -> "Completion":
        if (self.account_id is None) == (self.person_id is None):
            raise ValueError(
                "completion needs exactly one of account_id or person_id"
            )
        return self

    @property
    def key(self) -> Tuple[str, str, str]:
        """(work item id, account id, person id) with absent ids as ''."""
        return completion_key(self.work_item_id, self.account_id, self.person_id)


def completion_key(
    work_item_id: str,
    account_id: Optional[str] = None,
    person_id: Optional[str] = None,
) -> Tuple[str, str, str]:
    """Build the composite key of a completion."""
    return (work_item_id, account_id or "", person_id or "")
