from __future__ import annotations

from typing import Any, Mapping, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.sql import Executable

Statement = Union[str, Executable]


def _statement(sql: Statement) -> Executable:
    return text(sql) if isinstance(sql, str) else sql


class DbSession:
    """
    Transactional wrapper around a SQLAlchemy Engine connection.

    Use as:
        with DbSession(engine) as session:
            session.execute(...)
            row = session.fetch_one(...)

    Statements may be plain SQL strings (bound with ``:name`` parameters),
    ``TextClause`` objects or SQLAlchemy Core constructs.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    self._tx.commit()
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    @property
    def active(self) -> bool:
        return self._conn is not None

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def execute_result(
        self,
        sql: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> CursorResult:
        """
        Execute a statement and return the raw result.
        Callers own the result and must close it.
        """
        conn = self._connection()
        if params:
            return conn.execute(_statement(sql), params)
        return conn.execute(_statement(sql))

    def execute(
        self,
        sql: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> int:
        """
        Execute a non-SELECT statement and return affected row count.
        """
        result = self.execute_result(sql, params)
        try:
            if result.rowcount is None:
                raise RuntimeError(
                    "execute() received None rowcount for statement. "
                    "This may indicate a DDL statement or unsupported operation type."
                )
            return int(result.rowcount)
        finally:
            result.close()

    def execute_scalar(
        self,
        sql: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Execute a statement expected to return a single scalar value.
        """
        result = self.execute_result(sql, params)
        try:
            return result.scalar_one_or_none()
        finally:
            result.close()

    def fetch_one(
        self,
        sql: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Execute a SELECT expected to return 0 or 1 row. Raises if more than one row.
        """
        result = self.execute_result(sql, params)
        try:
            row = result.mappings().one_or_none()
            if row is None:
                return None
            return dict(row)
        finally:
            result.close()

    def fetch_all(
        self,
        sql: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Execute a SELECT expected to return multiple rows.
        """
        result = self.execute_result(sql, params)
        try:
            return [dict(row) for row in result.mappings()]
        finally:
            result.close()
