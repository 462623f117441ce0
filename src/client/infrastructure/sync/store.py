"""SQLAlchemy implementation of the outbox store.

The store shares the session of the calling transaction. It only calls
session.add(), session.delete() and session.execute() - it never commits.
The datastore's write() block owns the transaction boundary.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from infrastructure.sync.models import SyncOutModel
from shared_kernel.sync.value_objects import ChangeEntry, ChangeType


class SqlAlchemyOutboxStore:
    """Outbox store bound to one SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with the session of the current transaction.

        Args:
            session: The SQLAlchemy session (shared with the caller)
        """
        self._session = session

    def find(
        self,
        change_type: ChangeType,
        record_type: str,
        record_id: str,
    ) -> ChangeEntry | None:
        """Return the pending entry for the dedup key, if any.

        Entries staged in this session but not yet flushed count as pending.
        Inside a flush the session does not autoflush, so they are looked
        up among the session's new objects first.
        """
        key = (ChangeType(change_type), record_type, record_id)
        for obj in self._session.new:
            if isinstance(obj, SyncOutModel):
                pending = obj.to_value_object()
                if pending.dedup_key == key:
                    return pending

        stmt = (
            select(SyncOutModel)
            .where(SyncOutModel.change_type == str(change_type))
            .where(SyncOutModel.record_type == record_type)
            .where(SyncOutModel.record_id == record_id)
            .limit(1)
        )
        model = self._session.scalars(stmt).first()
        return model.to_value_object() if model is not None else None

    def add(self, entry: ChangeEntry) -> None:
        self._session.add(SyncOutModel.from_value_object(entry))

    def count(self) -> int:
        stmt = select(func.count()).select_from(SyncOutModel)
        return self._session.scalar(stmt) or 0

    def oldest(self, limit: int) -> list[ChangeEntry]:
        """Fetch up to ``limit`` entries ordered by change time.

        Ties on change_time are broken by insertion sequence.

        Args:
            limit: Maximum number of entries to fetch

        Returns:
            List of ChangeEntry value objects, oldest first
        """
        stmt = (
            select(SyncOutModel)
            .order_by(SyncOutModel.change_time, SyncOutModel.sequence)
            .limit(limit)
        )
        models = self._session.scalars(stmt).all()
        return [model.to_value_object() for model in models]

    def remove(self, entry_id: str) -> bool:
        """Delete the entry with the given id if it still exists.

        Args:
            entry_id: The id of the entry to remove

        Returns:
            False if the entry was already removed
        """
        stmt = select(SyncOutModel).where(SyncOutModel.id == entry_id)
        model = self._session.scalars(stmt).one_or_none()
        if model is None:
            return False
        self._session.delete(model)
        return True
