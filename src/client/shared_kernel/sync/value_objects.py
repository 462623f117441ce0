"""Value objects for the sync outbox.

Value objects are immutable descriptors that provide type safety and
domain semantics for captured changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import uuid4


class ChangeType(StrEnum):
    """Kind of mutation reported by the datastore.

    WIPE is emitted when the whole store is cleared. It is never queued:
    wiping removes pending entries along with everything else.
    """

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    WIPE = "WIPE"


QUEUED_CHANGE_TYPES: frozenset[ChangeType] = frozenset(
    {ChangeType.CREATE, ChangeType.UPDATE, ChangeType.DELETE}
)

DEFAULT_SYNCED_RECORD_TYPES: frozenset[str] = frozenset(
    {
        "ItemLine",
        "Requisition",
        "RequisitionLine",
        "Stocktake",
        "StocktakeLine",
        "Transaction",
        "TransactionLine",
    }
)


@dataclass(frozen=True)
class ChangeEntry:
    """A captured mutation awaiting synchronization.

    Entries are created once, never modified, and destroyed only when the
    sync client acknowledges them.

    Attributes:
        id: Unique identifier generated at enqueue time (UUID string)
        change_time: Wall-clock enqueue time in epoch milliseconds
        change_type: CREATE, UPDATE or DELETE
        record_type: Name of the mutated record kind (e.g., "Transaction")
        record_id: Identifier of the mutated record
    """

    id: str
    change_time: int
    change_type: ChangeType
    record_type: str
    record_id: str

    @classmethod
    def create(
        cls,
        change_type: ChangeType,
        record_type: str,
        record_id: str,
        change_time: int,
    ) -> ChangeEntry:
        """Create a new entry with a freshly generated id."""
        return cls(
            id=str(uuid4()),
            change_time=change_time,
            change_type=ChangeType(change_type),
            record_type=record_type,
            record_id=record_id,
        )

    @property
    def dedup_key(self) -> tuple[ChangeType, str, str]:
        """Return the key under which at most one entry may be pending."""
        return (self.change_type, self.record_type, self.record_id)
