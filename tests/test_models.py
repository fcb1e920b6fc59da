"""
Unit tests for the feed entity, validation rules and list filters.
"""

import pytest

from rssapp.services.feeds.models import (
    Feed,
    Filters,
    calculate_metadata,
    validate_feed,
    validate_filters,
)
from rssapp.validator import Validator


def run_feed_rules(feed):
    v = Validator()
    validate_feed(v, feed)
    return v


class TestValidateFeed:
    """Tests for the feed business rules."""

    def test_valid_feed(self, sample_feed):
        assert run_feed_rules(sample_feed).valid()

    def test_all_required_fields_missing(self):
        v = run_feed_rules(Feed())

        assert v.errors == {
            'title': 'must be provided',
            'description': 'must be provided',
            'url': 'must be provided',
            'site_url': 'must be provided',
        }
        assert list(v.errors) == ['title', 'description', 'url', 'site_url']

    def test_title_limit_is_in_bytes(self, sample_feed):
        sample_feed.title = 'a' * 500
        assert run_feed_rules(sample_feed).valid()

        sample_feed.title = 'a' * 501
        assert run_feed_rules(sample_feed).errors == {
            'title': 'must not be more than 500 bytes long'
        }

        # 250 two-byte characters is exactly 500 bytes; one more goes over
        sample_feed.title = 'é' * 251
        assert 'title' in run_feed_rules(sample_feed).errors

    def test_language_is_optional(self, sample_feed):
        sample_feed.language = ''
        assert run_feed_rules(sample_feed).valid()


class TestFeedSerialization:
    """Tests for the client-facing representation."""

    def test_hides_internal_fields(self, sample_feed):
        sample_feed.id = 7
        sample_feed.version = 3
        data = sample_feed.to_dict()

        assert data == {
            'id': 7,
            'title': 'Test Feed',
            'description': 'A test description',
            'url': 'https://example.com/feed.xml',
            'site_url': 'https://example.com',
            'language': 'en',
        }
        assert 'version' not in data
        assert 'created_at' not in data

    def test_empty_language_omitted(self, sample_feed):
        sample_feed.language = ''
        assert 'language' not in sample_feed.to_dict()


class TestFilters:
    """Tests for list paging and sorting options."""

    def test_defaults_are_valid(self):
        v = Validator()
        validate_filters(v, Filters())
        assert v.valid()

    @pytest.mark.parametrize('filters, field', [
        (Filters(page=0), 'page'),
        (Filters(page=10_000_001), 'page'),
        (Filters(page_size=0), 'page_size'),
        (Filters(page_size=101), 'page_size'),
        (Filters(sort='created_at'), 'sort'),
    ])
    def test_invalid_filters(self, filters, field):
        v = Validator()
        validate_filters(v, filters)
        assert list(v.errors) == [field]

    def test_sort_column_and_direction(self):
        assert Filters(sort='-title').sort_column() == 'title'
        assert Filters(sort='-title').sort_direction() == 'DESC'
        assert Filters(sort='url').sort_direction() == 'ASC'

    def test_unsafe_sort_column_raises(self):
        with pytest.raises(ValueError):
            Filters(sort='id; DROP TABLE feeds').sort_column()

    def test_limit_and_offset(self):
        filters = Filters(page=3, page_size=10)
        assert filters.limit() == 10
        assert filters.offset() == 20

    def test_metadata(self):
        metadata = calculate_metadata(45, 2, 20)
        assert metadata.to_dict() == {
            'current_page': 2,
            'page_size': 20,
            'first_page': 1,
            'last_page': 3,
            'total_records': 45,
        }

    def test_metadata_empty(self):
        assert calculate_metadata(0, 1, 20).to_dict() == {}
