"""
Taskboard domain models.
"""

from .enums import AssignmentMode, InputKind, Role, WorkCategory
from .people import Account, Person
from .primitives import UNASSIGNED, Entity, OwnedRecord, generate_id, now_ms
from .records import ActionItem, BugReport, FeatureRequest, Note
from .session import AuthenticatedUser, ConnectionConfig
from .snapshot import COLLECTION_NAMES, Snapshot
from .work import ChoiceOption, Completion, WorkItem, completion_key

__all__ = [
    # Enums
    "AssignmentMode",
    "InputKind",
    "Role",
    "WorkCategory",
    # Primitives
    "UNASSIGNED",
    "Entity",
    "OwnedRecord",
    "generate_id",
    "now_ms",
    # Entities
    "Person",
    "Account",
    "WorkItem",
    "ChoiceOption",
    "Completion",
    "completion_key",
    "ActionItem",
    "BugReport",
    "FeatureRequest",
    "Note",
    # Session
    "AuthenticatedUser",
    "ConnectionConfig",
    # Snapshot
    "COLLECTION_NAMES",
    "Snapshot",
]
