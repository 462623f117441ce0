"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class DatabaseProbe(Protocol):
    """Domain probe for local datastore observability.

    This probe captures domain-significant events related to the datastore
    without exposing logging implementation details.
    """

    def schema_created(self, table_count: int) -> None:
        """Record that the schema was created."""
        ...

    def listener_added(self, listener_id: int) -> None:
        """Record that a change listener was registered."""
        ...

    def listener_removed(self, listener_id: int) -> None:
        """Record that a change listener was unregistered."""
        ...

    def listener_not_found(self, listener_id: int) -> None:
        """Record that removal was requested for an unknown listener."""
        ...

    def database_wiped(self, table_count: int) -> None:
        """Record that every table was cleared."""
        ...

    def transaction_failed(self, error: Exception) -> None:
        """Record that a write transaction was rolled back."""
        ...


class DefaultDatabaseProbe:
    """Default implementation of DatabaseProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def schema_created(self, table_count: int) -> None:
        """Record that the schema was created."""
        self._logger.info("database_schema_created", table_count=table_count)

    def listener_added(self, listener_id: int) -> None:
        """Record that a change listener was registered."""
        self._logger.debug("database_listener_added", listener_id=listener_id)

    def listener_removed(self, listener_id: int) -> None:
        """Record that a change listener was unregistered."""
        self._logger.debug("database_listener_removed", listener_id=listener_id)

    def listener_not_found(self, listener_id: int) -> None:
        """Record that removal was requested for an unknown listener."""
        self._logger.warning("database_listener_not_found", listener_id=listener_id)

    def database_wiped(self, table_count: int) -> None:
        """Record that every table was cleared."""
        self._logger.warning("database_wiped", table_count=table_count)

    def transaction_failed(self, error: Exception) -> None:
        """Record that a write transaction was rolled back."""
        self._logger.error(
            "database_transaction_failed",
            error=str(error),
            error_type=type(error).__name__,
        )
