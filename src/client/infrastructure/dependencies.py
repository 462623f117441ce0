"""Application wiring for the datastore and the sync queue.

The sync client obtains its queue here; record-level code obtains the
datastore it writes through. The first call configures logging.
"""

from functools import lru_cache

import structlog

from infrastructure.database.datastore import Database
from infrastructure.database.engines import create_engine_from_settings
from infrastructure.logging import configure_logging
from infrastructure.settings import SyncSettings, get_settings, get_sync_settings
from infrastructure.sync.store import SqlAlchemyOutboxStore
from shared_kernel.sync.queue import SyncQueue

logger = structlog.get_logger()


@lru_cache
def get_database() -> Database:
    """Get the application-scoped datastore (singleton).

    Logging is configured from the application settings and the schema is
    created on first use.

    Returns:
        Database bound to the configured SQLite file.
    """
    settings = get_settings()
    configure_logging(debug=settings.debug)
    database = Database(create_engine_from_settings(settings.database))
    database.create_schema()
    logger.info(
        "datastore_started",
        app_name=settings.app_name,
        path=settings.database.path,
    )
    return database


def create_sync_queue(
    database: Database,
    settings: SyncSettings | None = None,
) -> SyncQueue:
    """Build a sync queue over the given datastore.

    Args:
        database: Datastore to capture changes from
        settings: Sync settings (defaults to the cached environment settings)

    Returns:
        SyncQueue, already enabled when settings.enable_on_startup is set
    """
    settings = settings or get_sync_settings()
    queue = SyncQueue(
        database,
        outbox=SqlAlchemyOutboxStore,
        synced_record_types=settings.synced_record_types,
    )
    if settings.enable_on_startup:
        queue.enable()
    return queue


@lru_cache
def get_sync_queue() -> SyncQueue:
    """Get the application-scoped sync queue (singleton)."""
    return create_sync_queue(get_database())
