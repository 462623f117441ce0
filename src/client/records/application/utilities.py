"""Arithmetic and date helpers shared by record code."""

from collections.abc import Iterable
from typing import Any

MILLISECONDS_PER_DAY = 24 * 60 * 60 * 1000


def milliseconds_to_days(milliseconds: int | float) -> int:
    """Return the number of whole days in a duration, rounded down."""
    return int(milliseconds // MILLISECONDS_PER_DAY)


def get_total(records: Iterable[Any], attribute: str) -> float:
    """Sum an attribute over records, treating missing values as zero."""
    return sum(getattr(record, attribute, None) or 0 for record in records)
