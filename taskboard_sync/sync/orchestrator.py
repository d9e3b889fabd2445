"""
Sync orchestrator - coordinates pushes and pulls against the backend.

State machine:
    Idle -> Pushing   manual push, or auto-push tick when dirty and the last
                      local change is older than the debounce threshold
    Idle -> Pulling   manual pull, or auto-pull tick when not dirty
    Pushing -> Idle   success clears dirty; failure keeps it for the next tick
    Pulling -> Idle   success overwrites all eight collections (empty remote
                      tables included); failure leaves local state untouched

At most one push or pull is in flight. The check and the transition happen
without an intervening await, so requests arriving while busy are dropped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from ..codec import decode_payload, encode_snapshot
from ..config import Settings, get_settings
from ..models import now_ms
from ..store import Observable, ReactiveStore
from .detector import ChangeDetector, SyncFlags
from .errors import SyncFailed, TransportError
from .transport import BackendTransport

logger = structlog.get_logger()

R = TypeVar("R")

TransportFactory = Callable[[str], BackendTransport]


class SyncState(str, Enum):
    IDLE = "idle"
    PUSHING = "pushing"
    PULLING = "pulling"


class SyncDirection(str, Enum):
    PUSH = "push"
    PULL = "pull"


@dataclass
class SyncOutcome:
    """Result of one push or pull."""

    direction: SyncDirection
    manual: bool
    success: bool
    # Pull: remote data was written to the store. Push: dirty was cleared.
    applied: bool = False
    error: Optional[str] = None
    finished_at: int = 0

    @property
    def failed(self) -> bool:
        return not self.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction.value,
            "manual": self.manual,
            "success": self.success,
            "applied": self.applied,
            "error": self.error,
            "finished_at": self.finished_at,
        }


class SyncOrchestrator:
    """Owns the sync state, the dirty flag and the suppression flag.

    The orchestrator never keeps its own copy of the data: it reads the
    store's live collections at push time and replaces them at pull time.
    """

    def __init__(
        self,
        store: ReactiveStore,
        settings: Optional[Settings] = None,
        transport_factory: Optional[TransportFactory] = None,
        clock: Callable[[], int] = now_ms,
        on_failure: Optional[Callable[[SyncOutcome], None]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Store to sync
            settings: Intervals, debounce and timeout (default from config)
            transport_factory: Builds a transport for an endpoint URL
            clock: Epoch-millisecond clock
            on_failure: Called with the outcome of every failed manual sync
        """
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock
        self.on_failure = on_failure
        self.transport_factory = transport_factory or self._default_transport

        self.flags = SyncFlags()
        self.detector = ChangeDetector(store, self.flags, clock)
        self.detector.attach()

        self.state: Observable[SyncState] = Observable(SyncState.IDLE, "sync_state")
        self.last_sync_time: Observable[Optional[int]] = Observable(None, "last_sync_time")
        self.last_outcome: Optional[SyncOutcome] = None

        self.running_tasks: Dict[str, asyncio.Task] = {}
        self.is_running = False
        self._stop_event = asyncio.Event()
        self._transport: Optional[BackendTransport] = None

        self.logger = logger.bind(component="sync")

    def _default_transport(self, endpoint_url: str) -> BackendTransport:
        return BackendTransport(endpoint_url, timeout=self.settings.sync_timeout_seconds)

    # State

    @property
    def dirty(self) -> bool:
        return self.flags.dirty

    @property
    def is_busy(self) -> bool:
        return self.state.value != SyncState.IDLE

    @property
    def debounce_ms(self) -> int:
        return int(self.settings.debounce_seconds * 1000)

    def should_auto_push(self) -> bool:
        """Connected, idle, dirty, and the last edit is older than the debounce."""
        if not self.store.is_connected or self.is_busy or not self.flags.dirty:
            return False
        last_change = self.flags.last_local_change
        if last_change is None:
            return True
        return self.clock() - last_change > self.debounce_ms

    def should_auto_pull(self) -> bool:
        """Connected, idle, and nothing local waiting to be pushed."""
        return self.store.is_connected and not self.is_busy and not self.flags.dirty

    # Triggers

    async def push(self, manual: bool = True) -> Optional[SyncOutcome]:
        """Push the whole store. Returns None if dropped (busy or offline)."""
        return await self._sync(SyncDirection.PUSH, manual)

    async def pull(self, manual: bool = True) -> Optional[SyncOutcome]:
        """Pull the whole store. Returns None if dropped (busy or offline)."""
        return await self._sync(SyncDirection.PULL, manual)

    async def auto_push_tick(self) -> Optional[SyncOutcome]:
        """One auto-push timer tick; a no-op unless the debounce allows it."""
        if not self.should_auto_push():
            return None
        self.logger.info("auto_push")
        return await self._sync(SyncDirection.PUSH, manual=False)

    async def auto_pull_tick(self) -> Optional[SyncOutcome]:
        """One auto-pull timer tick; a no-op while dirty or busy."""
        if not self.should_auto_pull():
            return None
        self.logger.info("auto_pull")
        return await self._sync(SyncDirection.PULL, manual=False)

    # Sync operations

    async def _sync(self, direction: SyncDirection, manual: bool) -> Optional[SyncOutcome]:
        if not self.store.is_connected:
            self.logger.debug("sync_skipped_offline", direction=direction.value)
            return None
        if self.is_busy:
            self.logger.debug(
                "sync_dropped_busy",
                direction=direction.value,
                state=self.state.value,
                manual=manual,
            )
            return None

        # No await between the busy check above and this transition
        self.state.set(
            SyncState.PUSHING if direction == SyncDirection.PUSH else SyncState.PULLING
        )
        try:
            if direction == SyncDirection.PUSH:
                outcome = await self._push(manual)
            else:
                outcome = await self._pull(manual)
        except SyncFailed as e:
            outcome = SyncOutcome(
                direction=direction,
                manual=manual,
                success=False,
                error=str(e),
                finished_at=self.clock(),
            )
            self._report_failure(outcome)
        finally:
            self.state.set(SyncState.IDLE)

        self.last_outcome = outcome
        return outcome

    async def _push(self, manual: bool) -> SyncOutcome:
        seen_changes = self.flags.change_count
        payload = encode_snapshot(self.store.snapshot())
        transport = await self._transport_for_connection()

        await self._call(transport.push(payload))

        now = self.clock()
        cleared = self.flags.change_count == seen_changes
        if cleared:
            self.flags.dirty = False
        else:
            self.logger.info("push_kept_dirty", reason="local changes during push")
        self.last_sync_time.set(now)
        self.logger.info("push_completed", manual=manual, cleared=cleared)
        return SyncOutcome(
            direction=SyncDirection.PUSH,
            manual=manual,
            success=True,
            applied=cleared,
            finished_at=now,
        )

    async def _pull(self, manual: bool) -> SyncOutcome:
        seen_changes = self.flags.change_count
        transport = await self._transport_for_connection()

        data = await self._call(transport.pull())
        snapshot = decode_payload(data)

        now = self.clock()
        if self.flags.change_count != seen_changes:
            # An edit landed while the request was in flight; it wins and
            # goes out with the next push
            self.logger.warning("pull_discarded", reason="local changes during pull")
            return SyncOutcome(
                direction=SyncDirection.PULL,
                manual=manual,
                success=True,
                applied=False,
                finished_at=now,
            )

        with self.detector.suppressed():
            self.store.apply_snapshot(snapshot)
        self.flags.dirty = False
        self.last_sync_time.set(now)
        self.logger.info("pull_completed", manual=manual, counts=snapshot.counts())
        return SyncOutcome(
            direction=SyncDirection.PULL,
            manual=manual,
            success=True,
            applied=True,
            finished_at=now,
        )

    async def _call(self, request: Awaitable[R]) -> R:
        """Await a transport call with the configured timeout.

        Raises:
            SyncFailed: on transport error or timeout
        """
        timeout = self.settings.sync_timeout_seconds
        try:
            return await asyncio.wait_for(request, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise SyncFailed(f"Backend did not answer within {timeout:g}s") from e
        except TransportError as e:
            raise SyncFailed(str(e)) from e

    async def _transport_for_connection(self) -> BackendTransport:
        endpoint_url = self.store.connection.value.endpoint_url
        if self._transport is not None and self._transport.endpoint_url != endpoint_url:
            await self._transport.close()
            self._transport = None
        if self._transport is None:
            self._transport = self.transport_factory(endpoint_url)
        return self._transport

    def _report_failure(self, outcome: SyncOutcome) -> None:
        if not outcome.manual:
            # Background failures stay quiet; the next tick retries
            self.logger.warning(
                "auto_sync_failed", direction=outcome.direction.value, error=outcome.error
            )
            return
        self.logger.error(
            "sync_failed", direction=outcome.direction.value, error=outcome.error
        )
        if self.on_failure is not None:
            self.on_failure(outcome)

    # Timers

    async def start(self, initial_pull: bool = True) -> None:
        """Start the auto-push and auto-pull loops.

        Args:
            initial_pull: Pull once before the loops start
        """
        if self.is_running:
            return
        self.logger.info(
            "sync_starting",
            push_interval=self.settings.auto_push_interval_seconds,
            pull_interval=self.settings.auto_pull_interval_seconds,
            debounce=self.settings.debounce_seconds,
        )
        self.is_running = True
        self._stop_event.clear()
        self.detector.attach()

        if initial_pull:
            await self.pull(manual=False)

        self.running_tasks["auto_push"] = asyncio.create_task(
            self._run_loop(
                "auto_push", self.settings.auto_push_interval_seconds, self.auto_push_tick
            )
        )
        self.running_tasks["auto_pull"] = asyncio.create_task(
            self._run_loop(
                "auto_pull", self.settings.auto_pull_interval_seconds, self.auto_pull_tick
            )
        )

    async def stop(self) -> None:
        """Stop both loops and stop observing the store.

        An in-flight sync runs to completion first. ``start()`` observes the
        store again.
        """
        self.logger.info("sync_stopping")
        self.is_running = False
        self._stop_event.set()

        for task_name, task in self.running_tasks.items():
            try:
                await task
            except Exception as e:
                self.logger.error("loop_stop_error", loop=task_name, error=str(e))

        self.running_tasks.clear()
        self.detector.detach()
        if self._transport is not None:
            await self._transport.close()
            self._transport = None
        self.logger.info("sync_stopped")

    async def _run_loop(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[Optional[SyncOutcome]]],
    ) -> None:
        while self.is_running:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await tick()
            except Exception as e:
                self.logger.exception("loop_error", loop=name, error=str(e))

    def get_status(self) -> Dict[str, Any]:
        """Current sync status for display."""
        return {
            "state": self.state.value.value,
            "is_running": self.is_running,
            "connected": self.store.is_connected,
            "dirty": self.flags.dirty,
            "last_local_change": self.flags.last_local_change,
            "last_sync_time": self.last_sync_time.value,
            "last_outcome": self.last_outcome.to_dict() if self.last_outcome else None,
            "loops": {name: not task.done() for name, task in self.running_tasks.items()},
        }
