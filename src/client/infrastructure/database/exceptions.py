"""Database-specific exceptions."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class TransactionError(DatabaseError):
    """Raised when a write transaction fails and is rolled back."""

    pass


class UncapturedWriteError(DatabaseError):
    """Raised for a write whose affected records cannot be reported."""

    pass
