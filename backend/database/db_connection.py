"""
PostgreSQL connection handle.

`Database` wraps a psycopg2 connection pool with an explicit lifecycle:
the gateway opens it at startup and closes it at shutdown. Route handlers
reach the handle bound to the running app through `get_db()`.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from flask import current_app
from psycopg2.extensions import connection as PgConnection
from psycopg2.extras import DictCursor
from psycopg2.pool import ThreadedConnectionPool

EXTENSION_KEY = "database"


class Database:
    """
    Thread-safe pool of PostgreSQL connections.

    Usage:
        db = Database(dsn)
        db.open()
        with db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(...)
        db.close()
    """

    def __init__(self, dsn: str, min_connections: int = 1, max_connections: int = 10) -> None:
        self.dsn = dsn
        self.min_connections = min_connections
        self.max_connections = max_connections
        self._pool: Optional[ThreadedConnectionPool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None and not self._pool.closed

    def open(self) -> None:
        """
        Create the pool. Calling `open()` on an open handle is a no-op.

        Raises:
            psycopg2.Error: If the initial connections cannot be made.
        """
        if self.is_open:
            return
        self._pool = ThreadedConnectionPool(self.min_connections, self.max_connections, self.dsn)
        logging.info("[DB] Connection pool opened")

    def close(self) -> None:
        if not self.is_open:
            return
        self._pool.closeall()
        self._pool = None
        logging.info("[DB] Connection pool closed")

    @contextmanager
    def connection(self) -> Iterator[PgConnection]:
        """
        Borrow a connection whose cursors return dictionary-like rows.

        The transaction is committed when the block exits normally and
        rolled back if it raises; the connection always goes back to the pool.

        Raises:
            RuntimeError: If the handle has not been opened.
        """
        if not self.is_open:
            raise RuntimeError("Database handle is not open. Call open() first.")

        conn = self._pool.getconn()
        conn.cursor_factory = DictCursor
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)


def get_db() -> Database:
    """
    Return the `Database` registered on the current Flask app.
    """
    return current_app.extensions[EXTENSION_KEY]
