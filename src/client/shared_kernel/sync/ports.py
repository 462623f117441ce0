"""Protocols (ports) for the sync outbox.

The queue depends only on these interfaces. The datastore supplies the
transaction contexts and change notifications, and a store factory turns
a transaction context into outbox operations scoped to that transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from shared_kernel.sync.value_objects import ChangeEntry, ChangeType

ChangeListener = Callable[[Any, ChangeType, str, Any], None]
"""Callback invoked per mutated record as ``(context, change_type, record_type, record)``.

``context`` is the transaction-scoped handle of the write that produced the
mutation. Anything the listener writes through it commits or rolls back
together with the mutation.
"""


@runtime_checkable
class ChangeEventSource(Protocol):
    """Embedded datastore that reports mutations to registered listeners.

    Listeners are invoked synchronously, inside the write transaction that
    performed the mutation.
    """

    def add_listener(self, listener: ChangeListener) -> int:
        """Register a listener.

        Returns:
            Handle to pass to remove_listener()
        """
        ...

    def remove_listener(self, listener_id: int) -> None:
        """Unregister the listener registered under the given handle."""
        ...

    def read(self) -> AbstractContextManager[Any]:
        """Open a read-only snapshot and yield its transaction context."""
        ...

    def write(self) -> AbstractContextManager[Any]:
        """Open an atomic write transaction and yield its context.

        The transaction commits when the block exits normally and rolls
        back, re-raising, when it exits with an error.
        """
        ...


@runtime_checkable
class OutboxStore(Protocol):
    """Outbox table operations bound to a single transaction context.

    Implementations never commit. The caller owns the transaction boundary.
    """

    def find(
        self,
        change_type: ChangeType,
        record_type: str,
        record_id: str,
    ) -> ChangeEntry | None:
        """Return the pending entry for the given dedup key, if any."""
        ...

    def add(self, entry: ChangeEntry) -> None:
        """Stage a new entry in the current transaction."""
        ...

    def count(self) -> int:
        """Return the number of pending entries."""
        ...

    def oldest(self, limit: int) -> list[ChangeEntry]:
        """Return up to ``limit`` pending entries, oldest first.

        Entries with equal change_time are returned in insertion order.
        """
        ...

    def remove(self, entry_id: str) -> bool:
        """Remove the entry with the given id.

        Returns:
            True if the entry was present and removed, False if it was
            already gone
        """
        ...


OutboxStoreFactory = Callable[[Any], OutboxStore]
