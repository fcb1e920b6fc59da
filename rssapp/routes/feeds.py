"""
Feed Routes.

JSON endpoints for creating, reading, listing, updating and deleting feeds.
Handlers raise FeedError; the application's error handlers turn those into
responses.
"""

import logging
from flask import Blueprint, current_app, request

from rssapp.errors import validation_failed
from rssapp.routes.helpers import (
    FeedEnvelope,
    FeedListEnvelope,
    MessageEnvelope,
    read_id_param,
    read_int,
    read_json,
    read_string,
    write_json,
)
from rssapp.routes.schemas import FeedCreateInput, FeedUpdateInput
from rssapp.services.feeds.models import (
    Feed,
    FeedStore,
    Filters,
    validate_feed,
    validate_filters,
)
from rssapp.validator import Validator

logger = logging.getLogger(__name__)

# Create blueprint
feeds_bp = Blueprint('feeds', __name__, url_prefix='/v1')


def get_feed_service() -> FeedStore:
    """Feed store injected into the application at construction time."""
    return current_app.extensions['feed_service']


@feeds_bp.route('/admin/feeds', methods=['POST'])
def create_feed():
    """
    Create a new feed.

    JSON Body:
        title, description, url, site_url (all required strings)

    Returns:
        201 with the feed envelope and a Location header
    """
    data = read_json(FeedCreateInput)

    feed = Feed(
        title=data.title or '',
        description=data.description or '',
        url=data.url or '',
        site_url=data.site_url or '',
    )

    v = Validator()
    validate_feed(v, feed)
    if not v.valid():
        raise validation_failed(v.errors)

    get_feed_service().create(feed)

    return write_json(
        FeedEnvelope(feed=feed.to_dict()),
        201,
        {'Location': f'/v1/feeds/{feed.id}'}
    )


@feeds_bp.route('/feeds', methods=['GET'])
def list_feeds():
    """
    List feeds.

    Query Parameters:
        title: Substring filter on title
        url: Substring filter on feed URL
        page: Page number (default: 1)
        page_size: Items per page (default: 20, max 100)
        sort: id, title, url; prefix with '-' for descending (default: id)
    """
    v = Validator()
    args = request.args

    title = read_string(args, 'title')
    url = read_string(args, 'url')
    filters = Filters(
        page=read_int(args, 'page', 1, v),
        page_size=read_int(args, 'page_size', 20, v),
        sort=read_string(args, 'sort', 'id'),
    )

    validate_filters(v, filters)
    if not v.valid():
        raise validation_failed(v.errors)

    feeds, metadata = get_feed_service().list(title, url, filters)

    return write_json(FeedListEnvelope(
        feeds=[feed.to_dict() for feed in feeds],
        metadata=metadata.to_dict(),
    ))


@feeds_bp.route('/feeds/<feed_id>', methods=['GET'])
def show_feed(feed_id: str):
    feed = get_feed_service().get(read_id_param(feed_id))
    return write_json(FeedEnvelope(feed=feed.to_dict()))


@feeds_bp.route('/feeds/<feed_id>', methods=['PATCH'])
def update_feed(feed_id: str):
    """
    Partially update a feed.

    Only keys present in the body are changed. The update is applied against
    the version read at the start of the request, so a concurrent change
    yields 409.
    """
    service = get_feed_service()
    feed = service.get(read_id_param(feed_id))

    data = read_json(FeedUpdateInput)
    for name, value in data.present_fields().items():
        setattr(feed, name, value)

    v = Validator()
    validate_feed(v, feed)
    if not v.valid():
        raise validation_failed(v.errors)

    service.update(feed)

    return write_json(FeedEnvelope(feed=feed.to_dict()))


@feeds_bp.route('/feeds/<feed_id>', methods=['DELETE'])
def delete_feed(feed_id: str):
    get_feed_service().delete(read_id_param(feed_id))
    return write_json(MessageEnvelope(message='feed successfully deleted'))
