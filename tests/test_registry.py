"""
Tests for the driver lookup table and its per-app configuration.
"""
import pytest

from notion_auth import create_app
from notion_auth.auth import ally
from notion_auth.auth.providers.notion import NotionConfig, NotionProvider
from notion_auth.config import TestingConfig


class UnconfiguredConfig(TestingConfig):
    NOTION_CLIENT_ID = None


class DerivedCallbackConfig(TestingConfig):
    NOTION_CALLBACK_URL = None
    NOTION_USER_INFO_URL = 'https://notion.example/v1/users/me'


class TestAlly:

    def test_notion_is_registered_and_configured(self, app):
        with app.app_context():
            assert ally.providers() == ['notion']

    def test_use_returns_fresh_driver_per_call(self, app):
        with app.test_request_context('/'):
            first = ally.use('notion')
            second = ally.use('notion')

        assert isinstance(first, NotionProvider)
        assert first is not second
        assert first.config is second.config

    def test_config_is_built_from_app_config(self, app):
        config = app.extensions['ally']['notion']

        assert config == NotionConfig(
            client_id='notion-client-id',
            client_secret='notion-client-secret',
            callback_url='http://localhost/api/auth/notion/callback'
        )
        assert config.driver == 'notion'

    def test_unknown_driver(self, app):
        with app.test_request_context('/'):
            with pytest.raises(KeyError):
                ally.use('github')

    def test_unconfigured_driver(self):
        app = create_app(UnconfiguredConfig)

        with app.test_request_context('/'):
            assert ally.providers() == []
            with pytest.raises(KeyError):
                ally.use('notion')

    def test_callback_url_derived_from_route(self):
        app = create_app(DerivedCallbackConfig)

        with app.test_request_context('/'):
            driver = ally.use('notion')

        assert driver.config.callback_url == 'http://localhost/api/auth/notion/callback'
        assert driver.user_info_url == 'https://notion.example/v1/users/me'
        # The stored config is left untouched
        assert app.extensions['ally']['notion'].callback_url == ''

    def test_extend_with_custom_factory(self, app, mocker):
        mocker.patch.dict(ally._factories)
        built = []

        def factory(ctx, config):
            built.append((ctx, config))
            return 'driver'

        ally.extend('custom', factory)
        ally.configure(app, 'custom', NotionConfig('id', 'secret', 'http://localhost/cb'))

        with app.test_request_context('/?code=abc'):
            assert ally.use('custom') == 'driver'
            ctx, config = built[0]
            assert ctx.input('code') == 'abc'
            assert config.client_id == 'id'
