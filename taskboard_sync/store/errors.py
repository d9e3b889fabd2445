"""
Errors raised by store mutations.

These are user-facing: the view layer shows them the way it would show a
validation message. Sync code never raises them.
"""


class StoreError(Exception):
    """Base class for rejected store mutations."""


class NotFoundError(StoreError):
    """The referenced record does not exist."""


class DuplicateKeyError(StoreError):
    """A record with the same key already exists."""


class LastPersonError(StoreError):
    """The last person cannot be deleted."""


class AuthenticationError(StoreError):
    """Credentials did not match, or a password change was invalid."""


class AssigneeMismatchError(StoreError):
    """A completion names the wrong kind of assignee for its work item."""
