from __future__ import annotations

import logging
import time
from typing import Any, Protocol, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .helpers import bind_positional, classify_storage_error, parse_sql_operation
from .metrics import observe_db_query

logger = logging.getLogger(__name__)


class QueryExecutor(Protocol):
    """
    Anything that runs a ``$n``-parameterized statement and returns its rows.

    Repositories depend on this protocol only; DbSession is the production
    implementation.
    """

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        ...


class DbSession:
    """
    Transactional wrapper around a SQLAlchemy Engine connection.

    Use as:
        with DbSession(engine) as session:
            companies = CompanyRepository(session).find_all({"name": "net"})

    The transaction commits when the block exits normally and rolls back
    when it raises. Every SQLAlchemy failure leaves this class as a
    StorageError (or one of its subclasses) chained to the original error.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        try:
            self._conn = self.engine.connect()
            self._tx = self._conn.begin()
        except SQLAlchemyError as exc:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            raise classify_storage_error(exc) from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    try:
                        self._tx.commit()
                    except SQLAlchemyError as commit_exc:
                        raise classify_storage_error(commit_exc) from commit_exc
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        Execute a ``$n``-parameterized statement and return its rows as dicts.

        Statements that return no rows (UPDATE without RETURNING, DDL) yield [].

        Raises:
            RuntimeError: If the session is not active
            ValueError: If placeholders and params are misaligned
            StorageError: If the database rejects the statement
        """
        conn = self._connection()
        named_sql, bind_params = bind_positional(sql, params)
        table, op_type = parse_sql_operation(sql)

        logger.debug("Executing %s on %s with %d params", op_type, table, len(bind_params))

        start_time = time.monotonic()
        status = "success"
        try:
            result = conn.execute(text(named_sql), bind_params)
            try:
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings()]
            finally:
                result.close()
        except SQLAlchemyError as exc:
            status = "error"
            raise classify_storage_error(exc) from exc
        except BaseException:
            status = "error"
            raise
        finally:
            try:
                observe_db_query(table, op_type, status, time.monotonic() - start_time)
            except Exception:
                # metrics must not mask the query outcome
                logger.debug("Failed to record query metrics", exc_info=True)

    def execute_script(self, statements: Sequence[str]) -> None:
        """
        Run parameterless statements (DDL, TRUNCATE) in order.
        """
        conn = self._connection()
        for sql in statements:
            try:
                conn.exec_driver_sql(sql)
            except SQLAlchemyError as exc:
                raise classify_storage_error(exc) from exc
