from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql import ClauseElement


def _as_clause(stmt: str | ClauseElement) -> ClauseElement:
    return text(stmt) if isinstance(stmt, str) else stmt


class DbSession:
    """
    One database transaction, used by SqlPlatform as the unit of atomicity.

    Every operation of an execute_batch() call runs through the same
    DbSession. Leaving the block normally commits them together; leaving it
    with an exception rolls all of them back, which is what makes a batch
    all-or-nothing.

        with DbSession(engine) as session:
            session.execute(insert(table).values(...))
            row = session.fetch_one(select(table.c.attributes).where(...))

    A DbSession is single-use at a time: entering it again while active
    raises RuntimeError.
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
        conn, tx = self._conn, self._tx
        self._conn = None
        self._tx = None
        try:
            if tx is not None:
                if exc_type is None:
                    tx.commit()
                else:
                    tx.rollback()
        finally:
            if conn is not None:
                conn.close()
        return False

    @property
    def active(self) -> bool:
        return self._conn is not None

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def execute(self, stmt: str | ClauseElement, params: Mapping[str, Any] | None = None) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        result = self._connection().execute(_as_clause(stmt), params or {})
        if result.rowcount is None:
            raise RuntimeError("Statement did not report a row count")
        return int(result.rowcount)

    def fetch_one(
        self,
        stmt: str | ClauseElement,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Row as a dict, or None. SqlPlatform loads one record's attribute bag this way."""
        result = self._connection().execute(_as_clause(stmt), params or {})
        row = result.mappings().one_or_none()
        return None if row is None else dict(row)

    def fetch_all(
        self,
        stmt: str | ClauseElement,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        result = self._connection().execute(_as_clause(stmt), params or {})
        return [dict(row) for row in result.mappings()]
