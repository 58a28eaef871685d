"""Postgres client for fieldops-api."""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from ...domain.errors import InfrastructureError

logger = logging.getLogger(__name__)


class PostgresTransaction:
    """Statements executed on one open cursor; committed by PostgresClient.transaction()."""

    def __init__(self, cursor):
        self._cursor = cursor

    def fetch_one(self, sql: str, params: Optional[tuple] = None) -> Optional[Dict[str, Any]]:
        self._cursor.execute(sql, params)
        row = self._cursor.fetchone()
        return dict(row) if row else None

    def fetch_all(self, sql: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        self._cursor.execute(sql, params)
        return [dict(row) for row in self._cursor.fetchall()]

    def execute(self, sql: str, params: Optional[tuple] = None) -> int:
        self._cursor.execute(sql, params)
        return self._cursor.rowcount


class PostgresClient:
    """
    Postgres access constructed once per process with an explicit DSN.

    Every public method runs in its own transaction; use transaction() to
    group several statements atomically.
    """

    def __init__(self, dsn: str):
        self._dsn = dsn

    def get_connection(self):
        """Get a Postgres connection."""
        return psycopg2.connect(self._dsn)

    @contextmanager
    def transaction(self) -> Iterator[PostgresTransaction]:
        """Open a connection, yield a transaction, commit on success and roll back on error."""
        try:
            conn = self.get_connection()
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            raise InfrastructureError(f"Database connection failed: {e}")

        try:
            with conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    yield PostgresTransaction(cursor)
        except psycopg2.Error as e:
            logger.error(f"Database transaction failed: {e}")
            raise InfrastructureError(f"Database operation failed: {e}")
        finally:
            conn.close()

    def execute_insert(self, sql: str, params: tuple) -> Optional[Dict[str, Any]]:
        """
        Execute an INSERT statement with a RETURNING clause.

        Returns:
            The returned row, or None when nothing was returned
        """
        with self.transaction() as tx:
            return tx.fetch_one(sql, params)

    def execute_query(self, sql: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """Execute a SELECT statement and return all rows."""
        with self.transaction() as tx:
            return tx.fetch_all(sql, params)

    def execute_update(self, sql: str, params: tuple) -> int:
        """Execute an UPDATE/DELETE statement and return affected rows."""
        with self.transaction() as tx:
            return tx.execute(sql, params)
