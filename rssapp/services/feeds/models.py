"""
Data Models for RSS feeds.

Feed entity, its validation rules, and list filtering options.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from rssapp.validator import Validator, permitted_value

MAX_TITLE_BYTES = 500


@dataclass
class Feed:
    """
    An RSS feed's metadata.

    ``created_at`` and ``version`` are assigned by the store. ``version`` is
    an optimistic-concurrency token and is never exposed to clients.
    """

    id: int = 0
    title: str = ''
    description: str = ''
    url: str = ''
    site_url: str = ''
    language: str = ''
    created_at: Optional[datetime] = None
    version: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing representation; empty language is omitted."""
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'url': self.url,
            'site_url': self.site_url,
        }
        if self.language:
            data['language'] = self.language
        return data


def validate_feed(v: Validator, feed: Feed) -> None:
    """Apply the feed business rules to ``feed``, recording failures on ``v``."""
    v.check(feed.title != '', 'title', 'must be provided')
    v.check(len(feed.title.encode('utf-8')) <= MAX_TITLE_BYTES, 'title',
            f'must not be more than {MAX_TITLE_BYTES} bytes long')
    v.check(feed.description != '', 'description', 'must be provided')
    v.check(feed.url != '', 'url', 'must be provided')
    v.check(feed.site_url != '', 'site_url', 'must be provided')


# =========================================================================
# Listing
# =========================================================================

SORT_SAFELIST = ('id', 'title', 'url', '-id', '-title', '-url')


@dataclass
class Filters:
    """Paging and sorting options for listing feeds."""

    page: int = 1
    page_size: int = 20
    sort: str = 'id'
    sort_safelist: Tuple[str, ...] = SORT_SAFELIST

    def sort_column(self) -> str:
        """
        Column to sort by, without the direction prefix.

        Raises:
            ValueError: If sort is not in the safelist. validate_filters
                should have rejected it before any query is built.
        """
        if self.sort not in self.sort_safelist:
            raise ValueError(f'unsafe sort parameter: {self.sort}')
        return self.sort.lstrip('-')

    def sort_direction(self) -> str:
        return 'DESC' if self.sort.startswith('-') else 'ASC'

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    v.check(filters.page > 0, 'page', 'must be greater than zero')
    v.check(filters.page <= 10_000_000, 'page', 'must be a maximum of 10 million')
    v.check(filters.page_size > 0, 'page_size', 'must be greater than zero')
    v.check(filters.page_size <= 100, 'page_size', 'must be a maximum of 100')
    v.check(permitted_value(filters.sort, *filters.sort_safelist), 'sort', 'invalid sort value')


@dataclass
class Metadata:
    """Pagination details for a page of results."""

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    def to_dict(self) -> Dict[str, int]:
        if self.total_records == 0:
            return {}
        return {
            'current_page': self.current_page,
            'page_size': self.page_size,
            'first_page': self.first_page,
            'last_page': self.last_page,
            'total_records': self.total_records,
        }


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


class FeedStore(Protocol):
    """Operations the HTTP layer needs from the feed store."""

    def create(self, feed: Feed) -> None: ...

    def get(self, feed_id: int) -> Feed: ...

    def list(self, title: str = '', url: str = '',
             filters: Optional[Filters] = None) -> Tuple[List[Feed], Metadata]: ...

    def update(self, feed: Feed) -> None: ...

    def delete(self, feed_id: int) -> None: ...
