"""Sync queue: change capture and oldest-first outbox drain.

The queue listens to the datastore, stages a change entry for every
mutation of a synchronized record kind, serves pending entries to the
sync client in the order they were captured, and removes them once the
client acknowledges them.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import Any

from shared_kernel.sync.observability import DefaultSyncQueueProbe, SyncQueueProbe
from shared_kernel.sync.ports import ChangeEventSource, OutboxStoreFactory
from shared_kernel.sync.value_objects import (
    DEFAULT_SYNCED_RECORD_TYPES,
    QUEUED_CHANGE_TYPES,
    ChangeEntry,
    ChangeType,
)


def _current_time_millis() -> int:
    return time.time_ns() // 1_000_000


class SyncQueue:
    """Maintains the queue of records to be synced.

    First changed, first out: the oldest changes are synced first. At most
    one entry is pending per (change_type, record_type, record_id), so a
    pending CREATE and a pending UPDATE of the same record coexist while
    repeated UPDATEs collapse into one.

    The queue starts disabled. While enabled, on_database_event() runs
    inside every write transaction of the datastore; a failure while
    staging an entry aborts the mutation that triggered it.
    """

    def __init__(
        self,
        database: ChangeEventSource,
        outbox: OutboxStoreFactory,
        synced_record_types: Iterable[str] = DEFAULT_SYNCED_RECORD_TYPES,
        probe: SyncQueueProbe | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            database: Datastore reporting mutations and providing transactions
            outbox: Factory binding outbox operations to a transaction context
            synced_record_types: Whitelist of record kinds to capture
            probe: Optional observability probe
            clock: Returns the current time in epoch milliseconds
        """
        self._database = database
        self._outbox = outbox
        self._synced_record_types = frozenset(synced_record_types)
        self._probe = probe or DefaultSyncQueueProbe()
        self._clock = clock or _current_time_millis
        self._listener_id: int | None = None

    @property
    def synced_record_types(self) -> frozenset[str]:
        return self._synced_record_types

    @property
    def is_enabled(self) -> bool:
        return self._listener_id is not None

    def enable(self) -> None:
        """Start listening to database changes.

        Enabling an enabled queue replaces its listener, so each mutation
        is still captured once.
        """
        if self._listener_id is not None:
            self._database.remove_listener(self._listener_id)
        self._listener_id = self._database.add_listener(self.on_database_event)
        self._probe.queue_enabled(self._listener_id)

    def disable(self) -> None:
        """Stop listening to database changes. No-op when already disabled."""
        if self._listener_id is None:
            return
        listener_id, self._listener_id = self._listener_id, None
        self._database.remove_listener(listener_id)
        self._probe.queue_disabled(listener_id)

    def on_database_event(
        self,
        context: Any,
        change_type: ChangeType,
        record_type: str,
        record: Any,
    ) -> None:
        """Respond to a database change event.

        Must be called from within the write transaction that performed the
        mutation; ``context`` is that transaction's handle.

        Args:
            context: Transaction context of the mutating write
            change_type: The type of change, e.g. CREATE, UPDATE, DELETE
            record_type: The kind of record changed
            record: The record changed; must expose an ``id`` attribute
        """
        if record_type not in self.synced_record_types:
            return
        if change_type not in QUEUED_CHANGE_TYPES:
            self._probe.change_ignored(change_type, record_type, "unsupported_change")
            return
        record_id = getattr(record, "id", None)
        if not record_id:
            self._probe.change_ignored(change_type, record_type, "missing_record_id")
            return
        record_id = str(record_id)

        store = self._outbox(context)
        duplicate = store.find(change_type, record_type, record_id)
        if duplicate is not None:
            self._probe.change_deduplicated(duplicate)
            return

        entry = ChangeEntry.create(
            change_type=change_type,
            record_type=record_type,
            record_id=record_id,
            change_time=self._clock(),
        )
        store.add(entry)
        self._probe.change_enqueued(entry)

    def length(self) -> int:
        """Return the number of entries awaiting sync."""
        with self._database.read() as context:
            return self._outbox(context).count()

    def next(self, count: int | None = 1) -> list[ChangeEntry]:
        """Return the next entries to be synced, without removing them.

        Args:
            count: Number of entries to return (defaults to 1)

        Returns:
            Up to ``count`` entries, ordered by change_time ascending

        Raises:
            ValueError: If count is less than 1
        """
        if count is None:
            count = 1
        if count < 1:
            raise ValueError(f"count must be a positive integer, got {count}")

        with self._database.read() as context:
            entries = self._outbox(context).oldest(count)

        self._probe.entries_served(requested=count, returned=len(entries))
        return entries

    def use(self, entries: Iterable[ChangeEntry]) -> None:
        """Remove the given entries from the queue.

        Entries already removed are skipped, so overlapping batches can be
        retried safely. All removals happen in one transaction: if any of
        them fails, none are applied.

        Args:
            entries: Entries previously returned by next()
        """
        removed = 0
        stale = 0
        with self._database.write() as context:
            store = self._outbox(context)
            for entry in entries:
                if store.remove(entry.id):
                    removed += 1
                else:
                    stale += 1

        self._probe.entries_used(removed=removed, stale=stale)
