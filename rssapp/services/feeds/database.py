"""
SQLite connection handle for the feed store.

Each call gets its own connection bounded by a deadline. Work that runs past
the deadline is interrupted by SQLite, and every sqlite3 error surfaces as a
STORAGE_FAILURE FeedError.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from rssapp.errors import storage_failure

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 3.0
DEFAULT_CONNECT_TIMEOUT = 5.0

# SQLite opcodes between deadline checks
PROGRESS_INTERVAL = 1000

SCHEMA = """
CREATE TABLE IF NOT EXISTS feeds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    url TEXT NOT NULL,
    site_url TEXT NOT NULL,
    language TEXT NOT NULL DEFAULT '',
    version INTEGER NOT NULL DEFAULT 1
);
"""


def _casefold(value):
    # Unicode-aware counterpart of SQLite's ASCII-only lower()
    return value.casefold() if isinstance(value, str) else value


class Database:
    """
    Handle to the relational store.

    Safe to share between threads: no connection is held between calls.

    Args:
        path: SQLite database file
        query_timeout: Deadline in seconds for a single row operation
        connect_timeout: Deadline in seconds for the startup connectivity check
    """

    def __init__(self, path: Union[str, Path],
                 query_timeout: float = DEFAULT_QUERY_TIMEOUT,
                 connect_timeout: float = DEFAULT_CONNECT_TIMEOUT):
        self.path = Path(path)
        self.query_timeout = query_timeout
        self.connect_timeout = connect_timeout

    def open(self) -> None:
        """
        Verify the store is reachable.

        Raises:
            FeedError: STORAGE_FAILURE if the check fails or times out
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connection(timeout=self.connect_timeout) as conn:
            conn.execute("SELECT 1").fetchone()
        logger.info(f"Database connection established: {self.path}")

    def create_schema(self) -> None:
        """Create the feeds table if it does not exist."""
        with self.connection(timeout=self.connect_timeout) as conn:
            conn.executescript(SCHEMA)
        logger.info("Database schema ready")

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
        """
        Open a connection for one unit of work.

        The block runs in a transaction that commits on success and rolls
        back on any exception.

        Args:
            timeout: Deadline in seconds, defaults to ``query_timeout``

        Yields:
            sqlite3.Connection: Connection with ``sqlite3.Row`` row factory and
                a Unicode-aware ``casefold`` SQL function

        Raises:
            FeedError: STORAGE_FAILURE wrapping any sqlite3 error
        """
        if timeout is None:
            timeout = self.query_timeout
        deadline = time.monotonic() + timeout

        conn = None
        try:
            conn = sqlite3.connect(str(self.path), timeout=timeout)
            conn.row_factory = sqlite3.Row
            conn.create_function('casefold', 1, _casefold, deterministic=True)
            conn.set_progress_handler(
                lambda: 1 if time.monotonic() > deadline else 0,
                PROGRESS_INTERVAL
            )
            with conn:
                yield conn
        except sqlite3.Error as e:
            if time.monotonic() > deadline:
                logger.warning(f"Database call exceeded {timeout}s deadline: {e}")
            raise storage_failure(f"database error: {e}") from e
        finally:
            if conn is not None:
                conn.close()
