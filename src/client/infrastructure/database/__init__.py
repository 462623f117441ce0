"""Database infrastructure - embedded SQLite datastore primitives."""

from infrastructure.database.datastore import Database
from infrastructure.database.exceptions import (
    DatabaseError,
    TransactionError,
    UncapturedWriteError,
)

__all__ = [
    "Database",
    "DatabaseError",
    "TransactionError",
    "UncapturedWriteError",
]
