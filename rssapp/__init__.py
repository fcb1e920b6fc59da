"""
RSS Feed API

Flask application factory for a JSON API managing RSS feed metadata.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from rssapp.errors import FeedError
from rssapp.services.feeds.models import FeedStore

# Application version
__version__ = '0.1.0'


def create_app(config_name: Optional[str] = None,
               feed_service: Optional[FeedStore] = None,
               config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Flask application factory.

    Args:
        config_name: Environment name (development, production, testing)
        feed_service: Feed store to serve from. When omitted, a SQLite-backed
            FeedService is built from the configured database path.
        config_overrides: Values applied on top of the environment config

    Returns:
        Flask: Configured application
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    from rssapp.config import get_config
    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    # Keep envelope and validation error keys in insertion order
    app.json.sort_keys = False

    log_file = Path(app.config['LOG_FILE'])
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Configure logging
    setup_logging(app)

    # Wire the feed store
    init_feed_service(app, feed_service)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    app.logger.info(f"RSS feed API v{__version__} initialized ({app.config['ENV_NAME']})")

    return app


def setup_logging(app: Flask) -> None:
    """Configure application logging."""
    log_level = getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO)
    log_path = str(Path(app.config['LOG_FILE']).resolve())

    # app.logger is shared by every app built in this process
    for handler in app.logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            break
    else:
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s: %(message)s'
        ))
        app.logger.addHandler(file_handler)

    app.logger.setLevel(log_level)


def build_database(app: Flask):
    """Create a Database handle from the app's configuration."""
    from rssapp.services.feeds.database import Database

    return Database(
        app.config['DATABASE_PATH'],
        query_timeout=app.config['DB_QUERY_TIMEOUT'],
        connect_timeout=app.config['DB_CONNECT_TIMEOUT'],
    )


def init_feed_service(app: Flask, feed_service: Optional[FeedStore] = None) -> None:
    """Attach the feed store to the application."""
    if feed_service is None:
        from rssapp.services.feeds.feed_service import FeedService

        db = build_database(app)
        db.open()
        if app.config['DB_AUTO_MIGRATE']:
            db.create_schema()
        app.extensions['database'] = db
        feed_service = FeedService(db)

    app.extensions['feed_service'] = feed_service


def register_blueprints(app: Flask) -> None:
    """Register application blueprints (routes)."""
    from rssapp.routes.healthcheck import healthcheck_bp
    from rssapp.routes.feeds import feeds_bp

    app.register_blueprint(healthcheck_bp)
    app.register_blueprint(feeds_bp)
    app.logger.info("Blueprints registered: healthcheck, feeds")


def register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers."""
    from rssapp.routes.helpers import (
        NOT_FOUND_MESSAGE,
        error_response,
        feed_error_response,
        server_error_response,
    )

    @app.errorhandler(FeedError)
    def feed_error(error):
        return feed_error_response(error)

    @app.errorhandler(404)
    def not_found(error):
        return error_response(404, NOT_FOUND_MESSAGE)

    @app.errorhandler(405)
    def method_not_allowed(error):
        body, status, headers = error_response(
            405, f"the {request.method} method is not supported for this resource"
        )
        if getattr(error, 'valid_methods', None):
            headers['Allow'] = ', '.join(sorted(error.valid_methods))
        return body, status, headers

    @app.errorhandler(Exception)
    def unhandled_exception(error):
        if isinstance(error, HTTPException) and error.code < 500:
            return error_response(error.code, error.description)
        return server_error_response(error)


def register_commands(app: Flask) -> None:
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create the feeds table."""
        db = app.extensions.get('database') or build_database(app)
        db.create_schema()
        click.echo(f"Initialized database at {db.path}")
