"""Application helpers for creating records and allocating serial numbers."""

from records.application.factory import create_record
from records.application.numbering import (
    NumberSequenceKey,
    get_next_number,
    get_number_sequence,
    reuse_number,
)
from records.application.utilities import (
    MILLISECONDS_PER_DAY,
    get_total,
    milliseconds_to_days,
)

__all__ = [
    "MILLISECONDS_PER_DAY",
    "NumberSequenceKey",
    "create_record",
    "get_next_number",
    "get_number_sequence",
    "get_total",
    "milliseconds_to_days",
    "reuse_number",
]
