"""
Pytest configuration for the user record store.

Provides fixtures for:
- Settings with test-specific overrides
- A deterministic clock
- In-memory store, orchestrator and dispatcher wiring
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

from userstore.config import Settings
from userstore.dispatcher import Dispatcher
from userstore.orchestrator import UserOrchestrator
from userstore.stores.memory import MemoryRecordStore

CLOCK_START = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns a fixed start time, advancing one second per call."""

    def __init__(self, start: datetime = CLOCK_START) -> None:
        self.now = start
        self.calls = 0

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        self.calls += 1
        return current


class SpyStore(MemoryRecordStore):
    """Memory store that records which primitives were called."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str]] = []

    async def put(self, key, item):
        self.calls.append(("put", key))
        return await super().put(key, item)

    async def get(self, key):
        self.calls.append(("get", key))
        return await super().get(key)

    async def update(self, key, changes):
        self.calls.append(("update", key))
        return await super().update(key, changes)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        table_name="users-test",
        region="eu-west-1",
        store_backend="memory",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "userstore"),
        log_level="DEBUG",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> SpyStore:
    return SpyStore()


@pytest.fixture
def orchestrator(store: SpyStore, clock: FakeClock) -> UserOrchestrator:
    return UserOrchestrator(store, clock=clock)


@pytest.fixture
def dispatcher(orchestrator: UserOrchestrator) -> Dispatcher:
    return Dispatcher(orchestrator)
