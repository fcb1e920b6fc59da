"""
Feed data access service.

CRUD operations against the feeds table with optimistic concurrency control
on update: every successful update bumps ``version`` and an update presenting
a stale version fails with EDIT_CONFLICT.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from rssapp.errors import edit_conflict, invalid_argument, not_found
from rssapp.services.feeds.database import Database
from rssapp.services.feeds.models import (
    Feed,
    Filters,
    Metadata,
    calculate_metadata,
    validate_filters,
)
from rssapp.validator import Validator

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    # CURRENT_TIMESTAMP is UTC in "YYYY-MM-DD HH:MM:SS" form
    if not value:
        return None
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _row_to_feed(row: sqlite3.Row) -> Feed:
    return Feed(
        id=row['id'],
        title=row['title'],
        description=row['description'],
        url=row['url'],
        site_url=row['site_url'],
        language=row['language'],
        created_at=_parse_timestamp(row['created_at']),
        version=row['version'],
    )


class FeedService:
    """
    Feed store backed by a Database handle.

    Provides create, get, list, update and delete. All failures are raised
    as FeedError.
    """

    def __init__(self, db: Database):
        """
        Initialize feed service.

        Args:
            db: Connection handle used for every call
        """
        self.db = db

    def create(self, feed: Feed) -> None:
        """
        Insert a new feed.

        The store assigns id, created_at and version, which are written back
        onto ``feed``.

        Raises:
            FeedError: STORAGE_FAILURE on any database error
        """
        with self.db.connection() as conn:
            row = conn.execute(
                """
                INSERT INTO feeds (title, description, url, site_url, language)
                VALUES (?, ?, ?, ?, ?)
                RETURNING id, created_at, version
                """,
                (feed.title, feed.description, feed.url, feed.site_url, feed.language)
            ).fetchall()[0]

        feed.id = row['id']
        feed.created_at = _parse_timestamp(row['created_at'])
        feed.version = row['version']
        logger.info(f"Created feed: {feed.id} - {feed.title}")

    def get(self, feed_id: int) -> Feed:
        """
        Fetch a single feed by id.

        Raises:
            FeedError: INVALID_ARGUMENT if feed_id < 1, NOT_FOUND if there is
                no such row, STORAGE_FAILURE on any database error
        """
        if feed_id < 1:
            raise invalid_argument(f"invalid feed id: {feed_id}")

        with self.db.connection() as conn:
            row = conn.execute(
                """
                SELECT id, created_at, title, description, url, site_url, language, version
                FROM feeds
                WHERE id = ?
                """,
                (feed_id,)
            ).fetchone()

        if row is None:
            raise not_found()
        return _row_to_feed(row)

    def list(self, title: str = '', url: str = '',
             filters: Optional[Filters] = None) -> Tuple[List[Feed], Metadata]:
        """
        List feeds with optional filtering, sorting and paging.

        Args:
            title: Case-insensitive substring to match in the title ('' = any)
            url: Case-insensitive substring to match in the feed URL ('' = any)
            filters: Paging and sort options (defaults to first page by id)

        Returns:
            Tuple of (feeds, metadata); feeds is an empty list when nothing matches

        Raises:
            FeedError: INVALID_ARGUMENT for invalid filters, STORAGE_FAILURE
                on any database error
        """
        filters = filters or Filters()
        v = Validator()
        validate_filters(v, filters)
        if not v.valid():
            raise invalid_argument(f"invalid list filters: {v.errors}")

        # Column name comes from the safelist, never from raw input
        query = f"""
            SELECT count(*) OVER() AS total_records,
                   id, created_at, title, description, url, site_url, language, version
            FROM feeds
            WHERE (instr(casefold(title), casefold(?)) > 0 OR ? = '')
              AND (instr(casefold(url), casefold(?)) > 0 OR ? = '')
            ORDER BY {filters.sort_column()} {filters.sort_direction()}, id ASC
            LIMIT ? OFFSET ?
        """

        with self.db.connection() as conn:
            rows = conn.execute(
                query,
                (title, title, url, url, filters.limit(), filters.offset())
            ).fetchall()

        total_records = rows[0]['total_records'] if rows else 0
        feeds = [_row_to_feed(row) for row in rows]
        return feeds, calculate_metadata(total_records, filters.page, filters.page_size)

    def update(self, feed: Feed) -> None:
        """
        Update a feed if its version still matches the stored one.

        ``feed.version`` must be the version the caller last read. On success
        the new version is written back onto ``feed``.

        Raises:
            FeedError: INVALID_ARGUMENT if feed.id < 1, EDIT_CONFLICT if the
                row was modified or deleted since it was read, STORAGE_FAILURE
                on any database error
        """
        if feed.id < 1:
            raise invalid_argument(f"invalid feed id: {feed.id}")

        with self.db.connection() as conn:
            rows = conn.execute(
                """
                UPDATE feeds
                SET title = ?, description = ?, url = ?, site_url = ?, language = ?,
                    version = version + 1
                WHERE id = ? AND version = ?
                RETURNING version
                """,
                (feed.title, feed.description, feed.url, feed.site_url, feed.language,
                 feed.id, feed.version)
            ).fetchall()

        row = rows[0] if rows else None
        if row is None:
            logger.warning(f"Edit conflict on feed {feed.id} at version {feed.version}")
            raise edit_conflict()

        feed.version = row['version']
        logger.info(f"Updated feed: {feed.id} (version {feed.version})")

    def delete(self, feed_id: int) -> None:
        """
        Hard-delete a feed.

        Raises:
            FeedError: INVALID_ARGUMENT if feed_id < 1, NOT_FOUND if no row
                was deleted, STORAGE_FAILURE on any database error
        """
        if feed_id < 1:
            raise invalid_argument(f"invalid feed id: {feed_id}")

        with self.db.connection() as conn:
            cursor = conn.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
            deleted = cursor.rowcount

        if deleted == 0:
            raise not_found()
        logger.info(f"Deleted feed: {feed_id}")
