"""
Whole-store snapshot exchanged between the store and the sync engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .people import Account, Person
from .records import ActionItem, BugReport, FeatureRequest, Note
from .work import Completion, WorkItem


@dataclass
class Snapshot:
    """All eight collections at one point in time."""

    people: List[Person] = field(default_factory=list)
    accounts: List[Account] = field(default_factory=list)
    work_items: List[WorkItem] = field(default_factory=list)
    completions: List[Completion] = field(default_factory=list)
    action_items: List[ActionItem] = field(default_factory=list)
    bug_reports: List[BugReport] = field(default_factory=list)
    feature_requests: List[FeatureRequest] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        """Number of records per collection."""
        return {name: len(getattr(self, name)) for name in COLLECTION_NAMES}


COLLECTION_NAMES = (
    "people",
    "accounts",
    "work_items",
    "completions",
    "action_items",
    "bug_reports",
    "feature_requests",
    "notes",
)
