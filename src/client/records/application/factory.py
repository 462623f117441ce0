"""Record creation helper."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from infrastructure.database.models import Base
from records.application.numbering import NumberSequenceKey, get_next_number
from records.infrastructure.models import RECORD_MODELS

SERIAL_NUMBER_SEQUENCES: dict[str, NumberSequenceKey] = {
    "Requisition": NumberSequenceKey.REQUISITION_SERIAL_NUMBER,
    "Stocktake": NumberSequenceKey.STOCKTAKE_SERIAL_NUMBER,
    "Transaction": NumberSequenceKey.TRANSACTION_SERIAL_NUMBER,
}


def create_record(session: Session, record_type: str, **attributes: Any) -> Base:
    """Create a record of the given kind and add it to the session.

    A missing id is generated. Kinds numbered by a sequence get the next
    serial number unless one is given.

    Args:
        session: Session of the current write transaction
        record_type: Record kind name, e.g. "Transaction"
        **attributes: Column values for the new record

    Returns:
        The new, pending record

    Raises:
        ValueError: If the record kind is unknown
    """
    model = RECORD_MODELS.get(record_type)
    if model is None:
        raise ValueError(f"Unknown record type: {record_type}")

    attributes.setdefault("id", str(uuid4()))
    sequence_key = SERIAL_NUMBER_SEQUENCES.get(record_type)
    if sequence_key is not None and attributes.get("serial_number") is None:
        attributes["serial_number"] = get_next_number(session, sequence_key)

    record = model(**attributes)
    session.add(record)
    return record
