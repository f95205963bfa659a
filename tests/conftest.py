"""Pytest configuration and fixtures."""

import asyncio
from typing import Optional

import pytest

from keyvify import KeyValueStore, MemoryBackend, StoreEvent


class YieldingBackend(MemoryBackend):
    """Memory backend that suspends before every I/O call.

    Lets concurrent tasks interleave at the same points a network or disk
    backend would.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.calls: list[tuple[str, Optional[str]]] = []

    async def point_get(self, key: str) -> Optional[str]:
        self.calls.append(("point_get", key))
        await asyncio.sleep(0)
        return await super().point_get(key)

    async def upsert(self, key: str, value: str) -> None:
        self.calls.append(("upsert", key))
        await asyncio.sleep(0)
        await super().upsert(key, value)

    async def point_delete(self, key: str) -> int:
        self.calls.append(("point_delete", key))
        await asyncio.sleep(0)
        return await super().point_delete(key)


class FailingBackend(MemoryBackend):
    """Memory backend whose writes always fail."""

    async def upsert(self, key: str, value: str) -> None:
        raise ConnectionError("Backend unavailable")

    async def point_delete(self, key: str) -> int:
        raise ConnectionError("Backend unavailable")


class EventRecorder:
    """Collects every event a store emits, as ``(event, payload)`` tuples."""

    def __init__(self, store: KeyValueStore) -> None:
        self.events: list[tuple[StoreEvent, tuple]] = []
        for kind in StoreEvent:
            store.on(kind, self._recorder(kind))

    def _recorder(self, kind: StoreEvent):
        def record(*payload):
            self.events.append((kind, payload))

        return record

    def kinds(self) -> list[StoreEvent]:
        return [kind for kind, _ in self.events]

    def last(self, kind: StoreEvent) -> tuple:
        for event, payload in reversed(self.events):
            if event == kind:
                return payload
        raise AssertionError(f"No {kind.value} event was emitted")


@pytest.fixture
def backend():
    """Fresh in-memory backend."""
    return MemoryBackend("records")


@pytest.fixture
async def store(backend):
    """Connected store over the memory backend, cache enabled."""
    store = KeyValueStore("records", dialect=backend)
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def recorder(store):
    """Event recorder attached to ``store``."""
    return EventRecorder(store)


@pytest.fixture
def yielding_backend():
    """Memory backend that suspends at every I/O call."""
    return YieldingBackend("records")


@pytest.fixture
def failing_backend():
    """Memory backend whose writes raise ConnectionError."""
    return FailingBackend("records")


@pytest.fixture
def make_recorder():
    """Factory attaching an EventRecorder to any store."""
    return EventRecorder
