"""
Change detector - tells local edits apart from remote-load echoes.

Every collection change marks the store dirty unless the suppression flag is
set. The orchestrator sets that flag for exactly the span in which it writes
pulled data into the store. The flag is a plain attribute and the store
notifies synchronously, so the check always sees the flag's current value.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from ..models import now_ms
from ..store import ReactiveStore

logger = logging.getLogger(__name__)


@dataclass
class SyncFlags:
    """Sync bookkeeping shared by the detector and the orchestrator."""

    dirty: bool = False
    suppressed: bool = False
    last_local_change: Optional[int] = None
    # Bumped on every local change; lets a sync tell whether edits landed
    # while its request was in flight
    change_count: int = 0


class ChangeDetector:
    """Watches the eight collections and maintains ``SyncFlags``."""

    def __init__(
        self,
        store: ReactiveStore,
        flags: Optional[SyncFlags] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.flags = flags or SyncFlags()
        self.clock = clock
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self) -> None:
        """Start observing the store. Idempotent."""
        if self.attached:
            return
        for name, collection in self.store.collections().items():
            self._unsubscribers.append(collection.subscribe(self._listener(name)))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _listener(self, name: str) -> Callable[[object], None]:
        def on_change(_value: object) -> None:
            self.record_change(name)

        return on_change

    def record_change(self, collection: str) -> None:
        """Classify one change: ignored while suppressed, dirty otherwise."""
        if self.flags.suppressed:
            return
        self.flags.dirty = True
        self.flags.last_local_change = self.clock()
        self.flags.change_count += 1
        logger.debug(f"Local change in {collection}")

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Ignore changes made inside the block."""
        self.flags.suppressed = True
        try:
            yield
        finally:
            self.flags.suppressed = False
