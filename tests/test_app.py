"""
Tests for the application factory, configuration and CLI.
"""

import logging

from rssapp import create_app
from rssapp.config import DevelopmentConfig, ProductionConfig, TestingConfig, get_config


class TestConfig:
    """Tests for configuration selection."""

    def test_known_environments(self):
        assert get_config('development') is DevelopmentConfig
        assert get_config('production') is ProductionConfig
        assert get_config('testing') is TestingConfig

    def test_unknown_environment_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING, logger='rssapp.config'):
            assert get_config('staging') is DevelopmentConfig
        assert 'staging' in caplog.text

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv('RSSAPP_ENV', 'production')
        assert get_config() is ProductionConfig

    def test_defaults(self):
        assert TestingConfig.DB_QUERY_TIMEOUT == 3
        assert TestingConfig.DB_CONNECT_TIMEOUT == 5
        assert TestingConfig.MAX_BODY_BYTES == 1024 * 1024


class TestAppFactory:
    """Tests for create_app."""

    def test_injected_service_is_used(self, mock_app, mock_feed_service):
        assert mock_app.extensions['feed_service'] is mock_feed_service
        assert 'database' not in mock_app.extensions

    def test_sqlite_service_is_built(self, app, tmp_path):
        assert app.extensions['database'].path == tmp_path / 'app.db'
        assert (tmp_path / 'app.db').exists()

    def test_config_overrides(self, tmp_path, mock_feed_service):
        app = create_app('testing', feed_service=mock_feed_service, config_overrides={
            'LOG_FILE': tmp_path / 'custom.log',
            'MAX_BODY_BYTES': 10,
        })
        assert app.config['MAX_BODY_BYTES'] == 10
        assert (tmp_path / 'custom.log').exists()


class TestCommands:
    """Tests for Flask CLI commands."""

    def test_init_db(self, runner, app):
        result = runner.invoke(args=['init-db'])

        assert result.exit_code == 0
        assert 'Initialized database' in result.output

    def test_init_db_is_idempotent(self, runner):
        assert runner.invoke(args=['init-db']).exit_code == 0
        assert runner.invoke(args=['init-db']).exit_code == 0
