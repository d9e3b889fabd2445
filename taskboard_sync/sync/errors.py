"""
Sync engine errors.

None of these are fatal. A failed sync leaves the store in its last
known-good state and the next timer tick tries again.
"""


class SyncError(Exception):
    """Base class for sync engine errors."""


class TransportError(SyncError):
    """The backend could not be reached, refused the request, or answered
    with something that is not a table payload."""


class SyncFailed(SyncError):
    """A push or pull did not complete. Carries a text cause.

    Transport errors and timeouts are folded into this one outcome; the
    orchestrator retries all of them the same way.
    """
