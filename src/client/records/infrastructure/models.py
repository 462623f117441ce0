"""SQLAlchemy ORM models for the record kinds of the local datastore.

Each model declares the record kind name it reports in change events.
Whether a kind is synchronized is decided by the sync queue's whitelist,
not here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TimestampMixin


class ItemLineModel(Base, TimestampMixin):
    """A batch of an item held in stock."""

    __tablename__ = "item_lines"
    __record_type__ = "ItemLine"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    batch: Mapped[str | None] = mapped_column(String(64), nullable=True)
    expiry_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    total_quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)


class TransactionModel(Base, TimestampMixin):
    """A stock movement document (receipt, issue, ...)."""

    __tablename__ = "transactions"
    __record_type__ = "Transaction"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    serial_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="customer_invoice")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new")
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[TransactionLineModel]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TransactionModel(id={self.id}, serial_number={self.serial_number}, "
            f"status={self.status})>"
        )


class TransactionLineModel(Base, TimestampMixin):
    __tablename__ = "transaction_lines"
    __record_type__ = "TransactionLine"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    transaction_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    number_of_items: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cost_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    transaction: Mapped[TransactionModel] = relationship(back_populates="lines")

    @property
    def total_price(self) -> float:
        return self.number_of_items * self.cost_price


class RequisitionModel(Base, TimestampMixin):
    """A request for stock sent to a supplying store."""

    __tablename__ = "requisitions"
    __record_type__ = "Requisition"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    serial_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new")
    days_to_supply: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[RequisitionLineModel]] = relationship(
        back_populates="requisition",
        cascade="all, delete-orphan",
    )


class RequisitionLineModel(Base, TimestampMixin):
    __tablename__ = "requisition_lines"
    __record_type__ = "RequisitionLine"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    requisition_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("requisitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    required_quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    requisition: Mapped[RequisitionModel] = relationship(back_populates="lines")


class StocktakeModel(Base, TimestampMixin):
    """A stock count session."""

    __tablename__ = "stocktakes"
    __record_type__ = "Stocktake"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    serial_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new")

    lines: Mapped[list[StocktakeLineModel]] = relationship(
        back_populates="stocktake",
        cascade="all, delete-orphan",
    )


class StocktakeLineModel(Base, TimestampMixin):
    __tablename__ = "stocktake_lines"
    __record_type__ = "StocktakeLine"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    stocktake_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("stocktakes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_line_id: Mapped[str] = mapped_column(String(64), nullable=False)
    snapshot_total_quantity: Mapped[float] = mapped_column(
        Float, nullable=False, default=0
    )
    counted_total_quantity: Mapped[float | None] = mapped_column(Float, nullable=True)

    stocktake: Mapped[StocktakeModel] = relationship(back_populates="lines")


class SettingModel(Base):
    """Device-local key/value setting. Never synchronized."""

    __tablename__ = "settings"
    __record_type__ = "Setting"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class NumberSequenceModel(Base):
    """Counter issuing serial numbers for one sequence key."""

    __tablename__ = "number_sequences"
    __record_type__ = "NumberSequence"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sequence_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    highest_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    numbers_to_reuse: Mapped[list[NumberToReuseModel]] = relationship(
        back_populates="number_sequence",
        cascade="all, delete-orphan",
        order_by="NumberToReuseModel.number",
    )


class NumberToReuseModel(Base):
    """A released serial number waiting to be issued again."""

    __tablename__ = "numbers_to_reuse"
    __record_type__ = "NumberToReuse"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    number_sequence_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("number_sequences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)

    number_sequence: Mapped[NumberSequenceModel | None] = relationship(
        back_populates="numbers_to_reuse"
    )

    @property
    def sequence_key(self) -> str:
        return self.number_sequence.sequence_key if self.number_sequence else ""

    def __str__(self) -> str:
        return f"{self.number} available for reuse in sequence {self.sequence_key}"


RECORD_MODELS: dict[str, type[Base]] = {
    model.__record_type__: model
    for model in (
        ItemLineModel,
        TransactionModel,
        TransactionLineModel,
        RequisitionModel,
        RequisitionLineModel,
        StocktakeModel,
        StocktakeLineModel,
        SettingModel,
        NumberSequenceModel,
        NumberToReuseModel,
    )
}
