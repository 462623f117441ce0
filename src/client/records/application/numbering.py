"""Serial number allocation.

Each sequence key has one counter holding the highest number issued so
far, plus a pool of released numbers. Released numbers are issued again,
lowest first, before the counter advances.

All functions work inside the caller's write transaction and never commit.
"""

from __future__ import annotations

from enum import StrEnum
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from records.infrastructure.models import NumberSequenceModel, NumberToReuseModel


class NumberSequenceKey(StrEnum):
    REQUISITION_SERIAL_NUMBER = "requisition_serial_number"
    STOCKTAKE_SERIAL_NUMBER = "stocktake_serial_number"
    TRANSACTION_SERIAL_NUMBER = "transaction_serial_number"


def get_number_sequence(session: Session, sequence_key: str) -> NumberSequenceModel:
    """Return the sequence for the key, creating it at zero if missing."""
    stmt = select(NumberSequenceModel).where(
        NumberSequenceModel.sequence_key == str(sequence_key)
    )
    sequence = session.scalars(stmt).one_or_none()
    if sequence is None:
        sequence = NumberSequenceModel(
            id=str(uuid4()),
            sequence_key=str(sequence_key),
            highest_number=0,
        )
        session.add(sequence)
    return sequence


def get_next_number(session: Session, sequence_key: str) -> int:
    """Issue the next serial number of a sequence.

    Returns:
        The lowest released number if any, otherwise highest_number + 1
    """
    sequence = get_number_sequence(session, sequence_key)
    if sequence.numbers_to_reuse:
        reusable = sequence.numbers_to_reuse[0]
        sequence.numbers_to_reuse.remove(reusable)
        return reusable.number

    sequence.highest_number += 1
    return sequence.highest_number


def reuse_number(session: Session, sequence_key: str, number: int) -> None:
    """Release a serial number so it is issued again.

    Releasing a number already in the pool is a no-op.

    Raises:
        ValueError: If the number was never issued by the sequence
    """
    sequence = get_number_sequence(session, sequence_key)
    if number < 1 or number > sequence.highest_number:
        raise ValueError(
            f"{number} was never issued by sequence {sequence.sequence_key}"
        )
    if any(reusable.number == number for reusable in sequence.numbers_to_reuse):
        return

    sequence.numbers_to_reuse.append(
        NumberToReuseModel(id=str(uuid4()), number=number)
    )
    sequence.numbers_to_reuse.sort(key=lambda reusable: reusable.number)
