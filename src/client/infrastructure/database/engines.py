"""Database engine creation for the embedded SQLite store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "MEMORY_PATH",
    "create_engine_from_settings",
]

MEMORY_PATH = ":memory:"


def create_engine_from_settings(settings: DatabaseSettings) -> Engine:
    """Create the engine for the local datastore.

    An in-memory database lives on a single shared connection, otherwise
    every pooled connection would see its own empty database.

    Args:
        settings: Database settings

    Returns:
        Engine with foreign key enforcement enabled on every connection
    """
    if settings.path == MEMORY_PATH:
        engine = create_engine(
            settings.url,
            echo=settings.echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(settings.url, echo=settings.echo)

    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()
