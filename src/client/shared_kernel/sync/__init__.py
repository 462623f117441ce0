"""Change capture and outbox queue for offline-first synchronization.

Every mutation of a synchronized record kind is staged in an outbox table
within the same transaction as the mutation itself, then served to the
sync client oldest first and removed once acknowledged.
"""

from shared_kernel.sync.ports import ChangeEventSource, OutboxStore
from shared_kernel.sync.queue import SyncQueue
from shared_kernel.sync.value_objects import (
    DEFAULT_SYNCED_RECORD_TYPES,
    ChangeEntry,
    ChangeType,
)

__all__ = [
    "ChangeEntry",
    "ChangeEventSource",
    "ChangeType",
    "DEFAULT_SYNCED_RECORD_TYPES",
    "OutboxStore",
    "SyncQueue",
]
