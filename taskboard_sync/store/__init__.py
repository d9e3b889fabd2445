"""
Reactive store: entity collections and session values.
"""

from .errors import (
    AssigneeMismatchError,
    AuthenticationError,
    DuplicateKeyError,
    LastPersonError,
    NotFoundError,
    StoreError,
)
from .observable import Collection, Observable
from .reactive import ReactiveStore
from .session import FileSessionStorage, MemorySessionStorage, SessionStorage

__all__ = [
    "ReactiveStore",
    "Collection",
    "Observable",
    "SessionStorage",
    "FileSessionStorage",
    "MemorySessionStorage",
    "StoreError",
    "NotFoundError",
    "DuplicateKeyError",
    "LastPersonError",
    "AuthenticationError",
    "AssigneeMismatchError",
]
