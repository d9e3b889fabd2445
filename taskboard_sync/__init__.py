"""
Taskboard Sync

Offline-first synchronization between a work-assignment dashboard and a
spreadsheet backend.
"""

import importlib.metadata

__version__ = importlib.metadata.version("taskboard-sync")

from .codec import decode_payload, encode_snapshot
from .models import (
    Account,
    ActionItem,
    BugReport,
    Completion,
    FeatureRequest,
    Note,
    Person,
    Snapshot,
    WorkItem,
)
from .store import ReactiveStore
from .sync import BackendTransport, SyncOrchestrator, SyncOutcome, SyncState

__all__ = [
    "Account",
    "ActionItem",
    "BackendTransport",
    "BugReport",
    "Completion",
    "FeatureRequest",
    "Note",
    "Person",
    "ReactiveStore",
    "Snapshot",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncState",
    "WorkItem",
    "decode_payload",
    "encode_snapshot",
]
