"""Unit test fixtures with mocked dependencies."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from unittest.mock import Mock

import pytest

from shared_kernel.sync.observability import SyncQueueProbe
from shared_kernel.sync.ports import OutboxStore
from shared_kernel.sync.queue import SyncQueue


class FakeDatabase:
    """In-memory stand-in for the change event source.

    Yields a fixed context object from read() and write() and records how
    many write transactions were committed or rolled back.
    """

    def __init__(self) -> None:
        self.context = object()
        self.listeners: dict[int, Any] = {}
        self.commits = 0
        self.rollbacks = 0
        self._next_id = 0

    def add_listener(self, listener: Any) -> int:
        self._next_id += 1
        self.listeners[self._next_id] = listener
        return self._next_id

    def remove_listener(self, listener_id: int) -> None:
        self.listeners.pop(listener_id, None)

    @contextmanager
    def read(self) -> Iterator[Any]:
        yield self.context

    @contextmanager
    def write(self) -> Iterator[Any]:
        try:
            yield self.context
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1

    def emit(self, change_type: Any, record_type: str, record: Any) -> None:
        for listener in list(self.listeners.values()):
            listener(self.context, change_type, record_type, record)


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def mock_store() -> Mock:
    """Provide an outbox store with no pending entries."""
    store = Mock(spec=OutboxStore)
    store.find.return_value = None
    store.count.return_value = 0
    store.oldest.return_value = []
    store.remove.return_value = True
    return store


@pytest.fixture
def mock_probe() -> Mock:
    return Mock(spec=SyncQueueProbe)


@pytest.fixture
def sync_queue(fake_database, mock_store, mock_probe) -> SyncQueue:
    """Provide a disabled queue over the fake database and mocked store."""
    return SyncQueue(
        fake_database,
        outbox=lambda context: mock_store,
        probe=mock_probe,
        clock=lambda: 1_700_000_000_000,
    )
