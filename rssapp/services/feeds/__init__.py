"""
Feed Service Package.

Feed entity, validation rules and the SQLite-backed data access layer.
"""

from .database import Database
from .feed_service import FeedService
from .models import Feed, FeedStore, Filters, Metadata, validate_feed, validate_filters

__all__ = [
    'Database',
    'Feed',
    'FeedService',
    'FeedStore',
    'Filters',
    'Metadata',
    'validate_feed',
    'validate_filters',
]
