"""
Observable values and keyed collections.

Listeners run synchronously, in subscription order, before the mutating call
returns. Nothing is batched, so every listener sees every value.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from ..models import Entity
from .errors import DuplicateKeyError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Entity)

Listener = Callable[[Any], None]


class Observable(Generic[T]):
    """A value that notifies listeners whenever it is replaced."""

    def __init__(self, initial: T, name: str = ""):
        self.name = name
        self._value = initial
        self._listeners: List[Listener] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify every listener."""
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                logger.exception(f"Listener failed for {self.name or 'observable'}: {e}")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, value={self._value!r})"


class Collection(Observable[Tuple[E, ...]]):
    """An observable tuple of entities addressed by a key function.

    Every mutation derives a new tuple from the old one; the previous tuple
    is never modified, so a value handed to a listener stays valid.
    """

    def __init__(self, name: str, key: Callable[[E], Hashable]):
        super().__init__((), name)
        self.key = key

    def __len__(self) -> int:
        return len(self._value)

    def __iter__(self) -> Iterator[E]:
        return iter(self._value)

    def replace(self, items: Iterable[E]) -> None:
        """Replace the whole collection.

        Items sharing a key collapse into one: the last wins, at the
        position of the first.
        """
        by_key: Dict[Hashable, E] = {}
        count = 0
        for item in items:
            by_key[self.key(item)] = item
            count += 1
        if len(by_key) < count:
            logger.warning(
                f"{self.name}: collapsed {count - len(by_key)} item(s) with duplicate keys"
            )
        self.set(tuple(by_key.values()))

    def get(self, key: Hashable) -> Optional[E]:
        for item in self._value:
            if self.key(item) == key:
                return item
        return None

    def index(self) -> Dict[Hashable, E]:
        """Map of key to item for lookups over many keys."""
        return {self.key(item): item for item in self._value}

    def add(self, item: E) -> E:
        """Append a new item.

        Raises:
            DuplicateKeyError: if an item with the same key exists
        """
        if self.get(self.key(item)) is not None:
            raise DuplicateKeyError(f"{self.name}: {self.key(item)!r} already exists")
        self.set(self._value + (item,))
        return item

    def upsert(self, item: E) -> E:
        """Replace the item with the same key in place, or append it."""
        key = self.key(item)
        if self.get(key) is None:
            self.set(self._value + (item,))
        else:
            self.set(tuple(item if self.key(old) == key else old for old in self._value))
        return item

    def update(self, key: Hashable, **changes: Any) -> E:
        """Apply field changes to one item, re-validating the result.

        Raises:
            NotFoundError: if no item has this key
        """
        current = self.get(key)
        if current is None:
            raise NotFoundError(f"{self.name}: {key!r} not found")
        updated = _with_changes(current, changes)
        self.set(tuple(updated if self.key(old) == key else old for old in self._value))
        return updated

    def update_where(self, predicate: Callable[[E], bool], **changes: Any) -> int:
        """Apply field changes to every matching item. Returns the match count."""
        matched = 0
        items = []
        for item in self._value:
            if predicate(item):
                items.append(_with_changes(item, changes))
                matched += 1
            else:
                items.append(item)
        if matched:
            self.set(tuple(items))
        return matched

    def remove(self, key: Hashable) -> bool:
        """Remove the item with this key. Returns False if it was absent."""
        return self.remove_where(lambda item: self.key(item) == key) > 0

    def remove_where(self, predicate: Callable[[E], bool]) -> int:
        """Remove every matching item. Returns the number removed."""
        kept = tuple(item for item in self._value if not predicate(item))
        removed = len(self._value) - len(kept)
        if removed:
            self.set(kept)
        return removed


def _with_changes(item: E, changes: Dict[str, Any]) -> E:
    return type(item).model_validate({**item.model_dump(), **changes})
