"""
Configuration module for the RSS feed API.

Loads configuration from environment variables (and a .env file, if present)
and provides default values per environment.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Type

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Base directory
BASE_DIR = Path(__file__).parent.parent


class Config:
    """Base configuration class with defaults."""

    # =========================================================================
    # Application
    # =========================================================================
    ENV_NAME = 'development'
    DEBUG = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'
    TESTING = False
    PORT = int(os.getenv('PORT', '8080'))

    # Request bodies larger than this are rejected (bytes)
    MAX_BODY_BYTES = int(os.getenv('MAX_BODY_BYTES', str(1024 * 1024)))

    # =========================================================================
    # Database
    # =========================================================================
    DATABASE_PATH = BASE_DIR / os.getenv('RSSAPP_DB_PATH', 'instance/feeds.db')

    # Per-call deadlines (seconds)
    DB_QUERY_TIMEOUT = float(os.getenv('DB_QUERY_TIMEOUT', '3'))
    DB_CONNECT_TIMEOUT = float(os.getenv('DB_CONNECT_TIMEOUT', '5'))

    # Create the feeds table at startup if missing
    DB_AUTO_MIGRATE = os.getenv('DB_AUTO_MIGRATE', 'true').lower() == 'true'

    # =========================================================================
    # Logging
    # =========================================================================
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = BASE_DIR / os.getenv('LOG_FILE', 'logs/rssapp.log')


class DevelopmentConfig(Config):
    """Development-specific configuration."""
    ENV_NAME = 'development'
    DEBUG = True


class ProductionConfig(Config):
    """Production-specific configuration."""
    ENV_NAME = 'production'
    DEBUG = False


class TestingConfig(Config):
    """Testing-specific configuration."""
    ENV_NAME = 'testing'
    DEBUG = True
    TESTING = True
    DB_AUTO_MIGRATE = True
    LOG_FILE = Path(tempfile.gettempdir()) / 'rssapp-test.log'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env: Optional[str] = None) -> Type[Config]:
    """
    Get configuration class based on environment.

    An unknown environment name falls back to development with a warning.

    Args:
        env (str, optional): Environment name. Defaults to RSSAPP_ENV environment variable.

    Returns:
        Config: Configuration class
    """
    if env is None:
        env = os.getenv('RSSAPP_ENV', 'development')

    if env not in config:
        logger.warning(f"Invalid environment value {env!r}, falling back to default 'development'")
        return config['default']

    return config[env]
