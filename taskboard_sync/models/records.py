"""
Account- or person-owned records: action items, bug reports, feature
requests and notes.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, constr

from .primitives import OwnedRecord, generate_id, now_ms


class ActionItem(OwnedRecord):
    """A follow-up to do for an owner."""

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("action"))
    text: str
    is_complete: bool = False
    completed_at: Optional[int] = None
    created_at: int = Field(default_factory=now_ms)


class BugReport(OwnedRecord):
    """A bug raised on behalf of an owner, linked to an external ticket."""

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("bug"))
    name: str
    ticket_link: str = ""
    is_complete: bool = False
    completed_at: Optional[int] = None
    created_at: int = Field(default_factory=now_ms)


class FeatureRequest(OwnedRecord):
    """A feature requested by an owner."""

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("feature"))
    text: str
    is_complete: bool = False
    completed_at: Optional[int] = None
    created_at: int = Field(default_factory=now_ms)


class Note(OwnedRecord):
    """Free-form meeting notes. One per owner."""

    text: str = ""
