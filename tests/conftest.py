"""
Pytest configuration and fixtures for the RSS feed API tests.

Provides a SQLite-backed application, a mock feed store, and test clients.
"""

import pytest
from datetime import datetime, timezone

from rssapp import create_app
from rssapp.errors import FeedError
from rssapp.services.feeds.database import Database
from rssapp.services.feeds.feed_service import FeedService
from rssapp.services.feeds.models import Feed, Metadata


VALID_FEED_BODY = {
    'title': 'Test Site',
    'description': 'Description for a test feed',
    'url': 'https://test.com/rss.xml',
    'site_url': 'https://test.com/',
}


class MockFeedService:
    """
    In-memory stand-in for the feed store.

    Each operation can be replaced by assigning a callable to the matching
    ``*_fn`` attribute. Calls are recorded in ``calls``.
    """

    def __init__(self):
        self.create_fn = None
        self.get_fn = None
        self.list_fn = None
        self.update_fn = None
        self.delete_fn = None
        self.calls = []

    def create(self, feed):
        self.calls.append(('create', feed))
        if self.create_fn:
            return self.create_fn(feed)
        # Simulate a successful insert
        feed.id = 1
        feed.created_at = datetime.now(timezone.utc)
        feed.version = 1

    def get(self, feed_id):
        self.calls.append(('get', feed_id))
        if self.get_fn:
            return self.get_fn(feed_id)
        raise RuntimeError('get not implemented')

    def list(self, title='', url='', filters=None):
        self.calls.append(('list', title, url, filters))
        if self.list_fn:
            return self.list_fn(title, url, filters)
        return [], Metadata()

    def update(self, feed):
        self.calls.append(('update', feed))
        if self.update_fn:
            return self.update_fn(feed)
        raise RuntimeError('update not implemented')

    def delete(self, feed_id):
        self.calls.append(('delete', feed_id))
        if self.delete_fn:
            return self.delete_fn(feed_id)
        raise RuntimeError('delete not implemented')


@pytest.fixture
def database(tmp_path):
    """
    Create a fresh SQLite database with the feeds schema.

    Returns:
        Database: Handle to a file in the test's temp directory
    """
    db = Database(tmp_path / 'feeds.db')
    db.open()
    db.create_schema()
    return db


@pytest.fixture
def feed_service(database):
    return FeedService(database)


@pytest.fixture
def app(tmp_path):
    """
    Create an app backed by a temporary SQLite database.

    Returns:
        Flask: Test Flask application instance
    """
    app = create_app('testing', config_overrides={
        'DATABASE_PATH': tmp_path / 'app.db',
        'LOG_FILE': tmp_path / 'rssapp.log',
    })
    yield app


@pytest.fixture
def client(app):
    """
    Create a test client for the app.

    Returns:
        FlaskClient: Test client for making requests
    """
    return app.test_client()


@pytest.fixture
def runner(app):
    """
    Create a test CLI runner for the app.

    Returns:
        FlaskCliRunner: Test CLI runner
    """
    return app.test_cli_runner()


@pytest.fixture
def mock_feed_service():
    return MockFeedService()


@pytest.fixture
def mock_app(mock_feed_service, tmp_path):
    """App serving from the mock feed store; no database is opened."""
    return create_app('testing', feed_service=mock_feed_service, config_overrides={
        'LOG_FILE': tmp_path / 'rssapp.log',
    })


@pytest.fixture
def mock_client(mock_app):
    return mock_app.test_client()


@pytest.fixture
def sample_feed():
    """
    A valid, unsaved feed.

    Returns:
        Feed: Feed with every required field populated
    """
    return Feed(
        title='Test Feed',
        description='A test description',
        url='https://example.com/feed.xml',
        site_url='https://example.com',
        language='en',
    )


def raise_kind(kind):
    """Build a mock callable that raises a FeedError of ``kind``."""
    def _raise(*args, **kwargs):
        raise FeedError(kind)
    return _raise
