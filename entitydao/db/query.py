from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.engine import Engine

from .mapping import lookup_type
from .metrics import observe_db_query
from .models import DbSqlOperation
from .session import DbSession

logger = logging.getLogger(__name__)


class DbQuery:
    """
    Executes one ``DbSqlOperation`` and maps its results to entities.

    A query lazily opens its own ``DbSession`` on first execution and
    releases it on ``close()``: the transaction commits on a clean close and
    rolls back when the query is left through an exception. When constructed
    with a caller-owned ``session`` the query runs inside that transaction and
    leaves commit/close to the caller.

    Usage:
        with DbQuery(engine, sqlgen.insert(user)) as q:
            q.set_generated_key()
            q.execute_update()
            user.entity_id = q.get_generated_key()

        users = DbQuery(engine, sqlgen.find_all(User)).list_and_close()
    """

    def __init__(
        self,
        engine: Engine,
        operation: DbSqlOperation,
        session: DbSession | None = None,
    ) -> None:
        self.engine = engine
        self.operation = operation
        self._borrowed = session
        self._session: DbSession | None = None
        self._generated_key_requested = False
        self._generated_key: Any = None
        self._closed = False

    def __enter__(self) -> "DbQuery":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._release(exc_type, exc, tb)
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the statement resources, committing an owned session."""
        self._release(None, None, None)

    def _release(self, exc_type, exc, tb) -> None:
        if self._closed:
            return
        self._closed = True
        session, self._session = self._session, None
        if session is not None:
            session.__exit__(exc_type, exc, tb)

    def _active_session(self) -> DbSession:
        if self._closed:
            raise RuntimeError("Query is already closed")
        if self._borrowed is not None:
            return self._borrowed
        if self._session is None:
            session = DbSession(self.engine)
            session.__enter__()
            self._session = session
        return self._session

    @contextmanager
    def _observed(self) -> Iterator[None]:
        op = self.operation
        logger.debug("Executing %s on %s", op.op_type.value, op.table)
        start_time = time.monotonic()
        status = "success"
        try:
            yield
        except Exception:
            status = "error"
            raise
        finally:
            observe_db_query(op.table, op.op_type.value, status, time.monotonic() - start_time)

    # ---------------------------------------------------------------- write

    def set_generated_key(self) -> None:
        """Capture the database-assigned primary key on the next execute_update()."""
        self._generated_key_requested = True

    def get_generated_key(self) -> Any:
        """
        Return the key captured by execute_update().

        Raises:
            RuntimeError: If no key was requested or the driver reported none
        """
        if not self._generated_key_requested:
            raise RuntimeError("Generated key was not requested; call set_generated_key() first")
        if self._generated_key is None:
            raise RuntimeError(f"No generated key available for {self.operation.table}")
        return self._generated_key

    def execute_update(self) -> int:
        """Execute the write statement and return affected row count."""
        session = self._active_session()
        with self._observed():
            result = session.execute_result(self.operation.statement)
            try:
                if self._generated_key_requested:
                    key = result.inserted_primary_key
                    self._generated_key = key[0] if key else None
                if result.rowcount is None:
                    raise RuntimeError(
                        f"execute_update() received None rowcount for {self.operation.op_type.value} "
                        f"on {self.operation.table}"
                    )
                return int(result.rowcount)
            finally:
                result.close()

    def execute_update_and_close(self) -> int:
        with self:
            return self.execute_update()

    # ---------------------------------------------------------------- read

    def find_one(self) -> Any:
        """
        Return the single mapped entity, or None.
        Raises MultipleResultsFound if more than one row matches.
        """
        session = self._active_session()
        with self._observed():
            row = session.fetch_one(self.operation.statement)
        if row is None:
            return None
        return lookup_type(self.operation.entity_type).from_row(row)

    def find_one_and_close(self) -> Any:
        with self:
            return self.find_one()

    def list(self) -> list[Any]:
        """Return all mapped entities in the order the database returned them."""
        session = self._active_session()
        with self._observed():
            rows = session.fetch_all(self.operation.statement)
        ded = lookup_type(self.operation.entity_type)
        return [ded.from_row(row) for row in rows]

    def list_and_close(self) -> list[Any]:
        with self:
            return self.list()

    def execute_count(self) -> int:
        """Return the scalar result as an int; NULL counts as 0."""
        session = self._active_session()
        with self._observed():
            value = session.execute_scalar(self.operation.statement)
        return int(value) if value is not None else 0

    def execute_count_and_close(self) -> int:
        with self:
            return self.execute_count()


class DbQueryFactory:
    """
    Creates ``DbQuery`` instances for an engine.

    Usage:
        factory = DbQueryFactory(engine)
        count = factory.query(sqlgen.count(User)).execute_count_and_close()

        # several DAO calls in one transaction
        with DbSession(engine) as session:
            dao = AppDao(factory.bind(session))
            ...
    """

    def __init__(self, engine: Engine, session: DbSession | None = None) -> None:
        self.engine = engine
        self.session = session

    def query(self, operation: DbSqlOperation) -> DbQuery:
        return DbQuery(self.engine, operation, session=self.session)

    def bind(self, session: DbSession) -> "DbQueryFactory":
        """Return a factory whose queries run inside ``session``."""
        return DbQueryFactory(self.engine, session=session)
