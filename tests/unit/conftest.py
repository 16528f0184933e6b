"""Shared fixtures and mocks for unit tests."""

from __future__ import annotations

import typing as t
from unittest.mock import AsyncMock

import pytest

from linkcache.core.coordinator import Coordinator
from linkcache.core.models import ExpiryPolicy, LinkRecord
from linkcache.monitoring import metrics
from linkcache.monitoring.recorder import EventRecorder
from linkcache.storage.base import InMemoryLinkStore


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_all()
    yield
    metrics.reset_all()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def memory_store():
    return InMemoryLinkStore()


@pytest.fixture
def mock_store():
    """Mock link store."""
    store = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.put = AsyncMock(return_value=None)
    store.delete = AsyncMock(return_value=True)
    store.increment_counter = AsyncMock(return_value=1)
    store.find_by_value = AsyncMock(return_value=None)
    store.is_healthy = AsyncMock(return_value=True)
    store.close = AsyncMock(return_value=None)
    return store


@pytest.fixture
def coordinator(memory_store, clock):
    """Coordinator over an in-memory store with the background sweeper off."""
    return Coordinator(
        memory_store,
        capacity=3,
        sweeper_enabled=False,
        restore_on_start=False,
        clock=clock,
    )


@pytest.fixture
def mock_redis_client():
    """Mock Redis client."""
    client = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.mget = AsyncMock(return_value=[None, None])
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=1)
    client.incr = AsyncMock(return_value=1)
    client.aclose = AsyncMock(return_value=None)
    return client


# Helper functions for tests
def create_record(
    key: str = "abc123",
    value: str = "https://example.com/",
    policy: t.Optional[ExpiryPolicy] = None,
    clicks: int = 0,
) -> LinkRecord:
    """Helper to create test link records."""
    return LinkRecord(key=key, value=value, policy=policy or ExpiryPolicy.none(), clicks=clicks)


class AsyncIterator:
    """Helper for creating async iterators in tests."""

    def __init__(self, items):
        self.items = list(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.items:
            raise StopAsyncIteration
        return self.items.pop(0)
