"""Embedded datastore that reports every mutation to registered listeners.

The datastore wraps a SQLAlchemy session factory and hooks two of its
events. ``after_flush`` reports each inserted, updated or deleted ORM
object, including orphans the unit of work deleted, with the flushing
session as transaction context. ``do_orm_execute`` reports the rows hit by
bulk ORM UPDATE and DELETE statements. Objects a listener adds to the
session are written by a follow-up flush before commit, so they commit or
roll back together with the mutation that triggered them.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import ORMExecuteState, Session, sessionmaker

from infrastructure.database.exceptions import TransactionError, UncapturedWriteError
from infrastructure.database.models import Base, record_type_for, record_type_of
from infrastructure.observability.probes import DatabaseProbe, DefaultDatabaseProbe
from shared_kernel.sync.value_objects import ChangeType

if TYPE_CHECKING:
    from sqlalchemy.engine import Result
    from sqlalchemy.orm.unitofwork import UOWTransaction

    from shared_kernel.sync.ports import ChangeListener


class Database:
    """SQLite datastore with synchronous change notification.

    Listeners are called as ``listener(session, change_type, record_type,
    record)`` for each mutated object, in the order CREATE, UPDATE, DELETE
    within one flush. An exception raised by a listener aborts the flush
    and rolls back the whole write transaction.

    Bulk ORM INSERT statements cannot be attributed to records and are
    rejected with UncapturedWriteError while any listener is registered.

    Usage:
        database = Database(engine)
        database.create_schema()
        with database.write() as session:
            session.add(TransactionModel(id="t1"))
    """

    def __init__(
        self,
        engine: Engine,
        probe: DatabaseProbe | None = None,
    ) -> None:
        """Initialize the datastore.

        Args:
            engine: SQLAlchemy engine of the local database
            probe: Optional observability probe
        """
        self._engine = engine
        self._probe = probe or DefaultDatabaseProbe()
        self._sessionmaker = sessionmaker(engine, expire_on_commit=False)
        self._listeners: dict[int, ChangeListener] = {}
        self._listener_ids = itertools.count(1)
        event.listen(self._sessionmaker, "after_flush", self._on_after_flush)
        event.listen(self._sessionmaker, "do_orm_execute", self._on_orm_execute)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create all tables registered on the declarative base."""
        Base.metadata.create_all(self._engine)
        self._probe.schema_created(len(Base.metadata.tables))

    def add_listener(self, listener: ChangeListener) -> int:
        """Register a change listener and return its handle."""
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = listener
        self._probe.listener_added(listener_id)
        return listener_id

    def remove_listener(self, listener_id: int) -> None:
        """Unregister a change listener. Unknown handles are ignored."""
        if self._listeners.pop(listener_id, None) is None:
            self._probe.listener_not_found(listener_id)
            return
        self._probe.listener_removed(listener_id)

    @contextmanager
    def read(self) -> Iterator[Session]:
        """Provide a session for queries.

        Anything left pending in the session is discarded on exit.
        """
        with self._sessionmaker() as session:
            yield session

    @contextmanager
    def write(self) -> Iterator[Session]:
        """Provide a session inside an atomic write transaction.

        The transaction commits at the end of the block. On any error it is
        rolled back; SQLAlchemy errors are re-raised as TransactionError.

        Raises:
            TransactionError: If the database rejects the transaction
        """
        session = self._sessionmaker()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            self._probe.transaction_failed(e)
            raise TransactionError(f"Write transaction failed: {e}") from e
        except Exception as e:
            self._probe.transaction_failed(e)
            raise
        finally:
            session.close()

    def wipe(self) -> None:
        """Delete every row of every table in one transaction.

        Listeners receive one WIPE event per mapped record kind, without a
        record. Pending outbox entries are cleared along with everything else.
        """
        tables = Base.metadata.sorted_tables
        with self.write() as session:
            for table in reversed(tables):
                session.execute(delete(table))
            for mapper in Base.registry.mappers:
                self._notify(
                    session, ChangeType.WIPE, record_type_for(mapper.class_), None
                )
        self._probe.database_wiped(len(tables))

    def _on_after_flush(
        self,
        session: Session,
        flush_context: UOWTransaction,
    ) -> None:
        # new, dirty and deleted still show the pre-flush state here, while
        # the unit of work also knows the orphans it deleted.
        if not self._listeners:
            return

        deleted = list(session.deleted)
        deleted_ids = {id(obj) for obj in deleted}
        for state, (isdelete, listonly) in list(flush_context.states.items()):
            if not isdelete or listonly:
                continue
            obj = state.obj()
            if obj is not None and id(obj) not in deleted_ids:
                deleted.append(obj)
                deleted_ids.add(id(obj))

        created = [obj for obj in session.new if id(obj) not in deleted_ids]
        updated = [
            obj
            for obj in session.dirty
            if id(obj) not in deleted_ids
            and session.is_modified(obj, include_collections=False)
        ]

        for change_type, objects in (
            (ChangeType.CREATE, created),
            (ChangeType.UPDATE, updated),
            (ChangeType.DELETE, deleted),
        ):
            for obj in objects:
                self._notify(session, change_type, record_type_of(obj), obj)

    def _on_orm_execute(self, orm_execute_state: ORMExecuteState) -> Result | None:
        if not self._listeners or not orm_execute_state.is_orm_statement:
            return None
        mapper = orm_execute_state.bind_mapper
        if mapper is None:
            return None
        if orm_execute_state.is_insert:
            raise UncapturedWriteError(
                f"Bulk INSERT into {record_type_for(mapper.class_)} bypasses "
                "change capture; add the objects to the session instead"
            )
        if orm_execute_state.is_update:
            change_type = ChangeType.UPDATE
        elif orm_execute_state.is_delete:
            change_type = ChangeType.DELETE
        else:
            return None

        statement = orm_execute_state.statement
        lookup = select(mapper.class_)
        parameters = orm_execute_state.parameters
        if isinstance(parameters, list):
            # Bulk UPDATE by primary key: one parameter set per row
            primary_key = mapper.primary_key[0]
            key = mapper.get_property_by_column(primary_key).key
            lookup = lookup.where(primary_key.in_([row[key] for row in parameters]))
        elif statement.whereclause is not None:
            lookup = lookup.where(statement.whereclause)

        session = orm_execute_state.session
        affected = list(session.scalars(lookup))
        result = orm_execute_state.invoke_statement()

        record_type = record_type_for(mapper.class_)
        for obj in affected:
            self._notify(session, change_type, record_type, obj)
        return result

    def _notify(
        self,
        session: Session,
        change_type: ChangeType,
        record_type: str,
        record: Any,
    ) -> None:
        for listener in list(self._listeners.values()):
            listener(session, change_type, record_type, record)
