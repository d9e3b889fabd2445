"""Test configuration and fixtures."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from taskboard_sync.config import Settings
from taskboard_sync.store import MemorySessionStorage, ReactiveStore
from taskboard_sync.sync import SyncOrchestrator

ENDPOINT = "https://script.example.test/macros/s/abc/exec"
START_MS = 1_700_000_000_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class FakeTransport:
    """In-memory stand-in for BackendTransport.

    Set ``gate`` to an unset asyncio.Event to hold calls in flight.
    """

    def __init__(self, endpoint_url: str = ENDPOINT):
        self.endpoint_url = endpoint_url
        self.remote: Dict[str, Any] = {}
        self.pushed: List[Dict[str, Any]] = []
        self.pull_calls = 0
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def push(self, payload: Dict[str, Any]) -> None:
        self.pushed.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def pull(self) -> Dict[str, Any]:
        self.pull_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.remote

    async def close(self) -> None:
        self.closed = True


async def settle(rounds: int = 5) -> None:
    """Let pending tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        auto_push_interval_seconds=5,
        debounce_seconds=10,
        auto_pull_interval_seconds=60,
        sync_timeout_seconds=1,
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def store(clock) -> ReactiveStore:
    """A connected store with in-memory session storage."""
    return ReactiveStore(
        storage=MemorySessionStorage(),
        default_endpoint_url=ENDPOINT,
        clock=clock,
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def failures() -> list:
    """Outcomes reported through the manual-failure callback."""
    return []


@pytest_asyncio.fixture
async def orchestrator(store, settings, transport, clock, failures) -> SyncOrchestrator:
    """Orchestrator wired to the fake transport and clock."""
    orch = SyncOrchestrator(
        store,
        settings=settings,
        transport_factory=lambda url: transport,
        clock=clock,
        on_failure=failures.append,
    )
    yield orch
    if transport.gate is not None:
        transport.gate.set()
    await orch.stop()
