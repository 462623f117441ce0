"""Observability probes for the sync queue.

Following Domain Oriented Observability, probes capture domain-significant
events without cluttering the capture and drain logic with logging calls.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from shared_kernel.sync.value_objects import ChangeEntry, ChangeType

logger = structlog.get_logger()


class SyncQueueProbe(Protocol):
    """Protocol for sync queue observability."""

    def queue_enabled(self, listener_id: int) -> None:
        """Called when the queue starts listening to the datastore."""
        ...

    def queue_disabled(self, listener_id: int) -> None:
        """Called when the queue stops listening to the datastore."""
        ...

    def change_ignored(
        self, change_type: ChangeType, record_type: str, reason: str
    ) -> None:
        """Called when a change event is filtered out."""
        ...

    def change_deduplicated(self, entry: ChangeEntry) -> None:
        """Called when an equivalent entry is already pending."""
        ...

    def change_enqueued(self, entry: ChangeEntry) -> None:
        """Called when a new entry is staged in the outbox."""
        ...

    def entries_served(self, requested: int, returned: int) -> None:
        """Called when the sync client reads the next batch."""
        ...

    def entries_used(self, removed: int, stale: int) -> None:
        """Called when the sync client acknowledges a batch."""
        ...


class DefaultSyncQueueProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="sync_queue")

    def queue_enabled(self, listener_id: int) -> None:
        self._log.info("sync_queue_enabled", listener_id=listener_id)

    def queue_disabled(self, listener_id: int) -> None:
        self._log.info("sync_queue_disabled", listener_id=listener_id)

    def change_ignored(
        self, change_type: ChangeType, record_type: str, reason: str
    ) -> None:
        self._log.debug(
            "sync_change_ignored",
            change_type=str(change_type),
            record_type=record_type,
            reason=reason,
        )

    def change_deduplicated(self, entry: ChangeEntry) -> None:
        self._log.debug(
            "sync_change_deduplicated",
            entry_id=entry.id,
            change_type=str(entry.change_type),
            record_type=entry.record_type,
            record_id=entry.record_id,
        )

    def change_enqueued(self, entry: ChangeEntry) -> None:
        self._log.info(
            "sync_change_enqueued",
            entry_id=entry.id,
            change_type=str(entry.change_type),
            record_type=entry.record_type,
            record_id=entry.record_id,
            change_time=entry.change_time,
        )

    def entries_served(self, requested: int, returned: int) -> None:
        self._log.debug(
            "sync_entries_served", requested=requested, returned=returned
        )

    def entries_used(self, removed: int, stale: int) -> None:
        """Log acknowledged batch.

        Stale entries were already removed by an earlier acknowledgement.
        """
        self._log.info("sync_entries_used", removed=removed, stale=stale)
