"""
Sync engine - keeps the reactive store consistent with the spreadsheet backend.

Components:
    - detector: classifies store changes as local edits or pull echoes
    - orchestrator: Idle/Pushing/Pulling state machine and the auto loops
    - transport: HTTP wrapper around the backend endpoint
"""

from .detector import ChangeDetector, SyncFlags
from .errors import SyncError, SyncFailed, TransportError
from .orchestrator import (
    SyncDirection,
    SyncOrchestrator,
    SyncOutcome,
    SyncState,
    TransportFactory,
)
from .transport import BackendTransport

__all__ = [
    "BackendTransport",
    "ChangeDetector",
    "SyncFlags",
    "SyncDirection",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncState",
    "TransportFactory",
    "SyncError",
    "SyncFailed",
    "TransportError",
]
