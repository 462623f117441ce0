"""Integration test fixtures backed by an in-memory SQLite datastore.

No external services are required: each test gets a fresh database.
"""

from collections.abc import Generator
from itertools import count

import pytest

import records  # noqa: F401 - registers record tables
from infrastructure.database.datastore import Database
from infrastructure.database.engines import create_engine_from_settings
from infrastructure.settings import DatabaseSettings
from infrastructure.sync.store import SqlAlchemyOutboxStore
from shared_kernel.sync.queue import SyncQueue


class SteppingClock:
    """Clock returning strictly increasing millisecond timestamps."""

    def __init__(self, start: int = 1_000, step: int = 10) -> None:
        self._ticks = count(start, step)
        self.now = start

    def __call__(self) -> int:
        self.now = next(self._ticks)
        return self.now


@pytest.fixture
def database() -> Generator[Database, None, None]:
    """Provide an empty in-memory datastore with all tables created."""
    engine = create_engine_from_settings(DatabaseSettings(path=":memory:"))
    database = Database(engine)
    database.create_schema()
    yield database
    engine.dispose()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def sync_queue(database: Database, clock: SteppingClock) -> Generator[SyncQueue, None, None]:
    """Provide an enabled sync queue over the datastore."""
    queue = SyncQueue(database, outbox=SqlAlchemyOutboxStore, clock=clock)
    queue.enable()
    yield queue
    queue.disable()
