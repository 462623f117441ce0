"""Infrastructure layer for the sync outbox.

Contains the SQLAlchemy model and the session-bound store implementation
used by the sync queue.
"""

from infrastructure.sync.models import SyncOutModel
from infrastructure.sync.store import SqlAlchemyOutboxStore

__all__ = ["SqlAlchemyOutboxStore", "SyncOutModel"]
