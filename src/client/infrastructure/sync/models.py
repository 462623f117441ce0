"""SQLAlchemy ORM model for the sync outbox table."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base
from shared_kernel.sync.value_objects import ChangeEntry, ChangeType


class SyncOutModel(Base):
    """ORM model for the sync_out table.

    Each row is a change entry awaiting synchronization. ``sequence`` is
    assigned on insert and breaks ties between entries captured within the
    same millisecond; it is not part of the value object.

    Indexes:
    - ix_sync_out_order: oldest-first scan
    - ix_sync_out_dedup: duplicate lookup during capture
    """

    __tablename__ = "sync_out"
    __record_type__ = "SyncOut"

    sequence: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    change_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    change_type: Mapped[str] = mapped_column(String(16), nullable=False)
    record_type: Mapped[str] = mapped_column(String(64), nullable=False)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        Index("ix_sync_out_order", "change_time", "sequence"),
        Index("ix_sync_out_dedup", "change_type", "record_type", "record_id"),
    )

    @classmethod
    def from_value_object(cls, entry: ChangeEntry) -> SyncOutModel:
        return cls(
            id=entry.id,
            change_time=entry.change_time,
            change_type=str(entry.change_type),
            record_type=entry.record_type,
            record_id=entry.record_id,
        )

    def to_value_object(self) -> ChangeEntry:
        """Convert this ORM model to a ChangeEntry value object.

        Returns:
            An immutable ChangeEntry detached from the session.
        """
        return ChangeEntry(
            id=self.id,
            change_time=self.change_time,
            change_type=ChangeType(self.change_type),
            record_type=self.record_type,
            record_id=self.record_id,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<SyncOutModel("
            f"id={self.id}, "
            f"change_type={self.change_type}, "
            f"record_type={self.record_type}, "
            f"record_id={self.record_id}, "
            f"change_time={self.change_time}"
            f")>"
        )
