from dataclasses import replace
from typing import Callable, Dict, List

from flask import current_app, request, url_for

from .context import HttpContext
from .providers.notion import NotionConfig, notion_driver


class Ally:
    """Lookup table of social login drivers, keyed by provider name.

    Factories are process-wide; provider configs live on each app under
    ``app.extensions['ally']``.
    """

    def __init__(self, app=None):
        self._factories: Dict[str, Callable] = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['ally'] = {}

    def extend(self, name: str, factory: Callable):
        """Register ``factory(ctx, config)`` as the driver for ``name``."""
        self._factories[name] = factory

    def configure(self, app, name: str, config):
        app.extensions['ally'][name] = config

    def providers(self) -> List[str]:
        configs = current_app.extensions.get('ally', {})
        return [name for name in self._factories if name in configs]

    def use(self, name: str):
        """Build a fresh driver bound to the current request."""
        if name not in self._factories:
            raise KeyError(f"No social login driver registered for '{name}'")
        configs = current_app.extensions.get('ally', {})
        if name not in configs:
            raise KeyError(f"Social login driver '{name}' is not configured")

        config = configs[name]
        if not config.callback_url:
            config = replace(config, callback_url=url_for(f'auth.{name}_callback', _external=True))

        ctx = HttpContext(request, transport=current_app.config.get('ALLY_HTTP_TRANSPORT'))
        return self._factories[name](ctx, config)


ally = Ally()


def init_ally(app):
    """Register the bundled drivers and their configuration."""
    ally.init_app(app)
    ally.extend('notion', notion_driver)

    if app.config.get('NOTION_CLIENT_ID'):
        ally.configure(app, 'notion', NotionConfig(
            client_id=app.config['NOTION_CLIENT_ID'],
            client_secret=app.config.get('NOTION_CLIENT_SECRET') or '',
            callback_url=app.config.get('NOTION_CALLBACK_URL') or '',
            authorize_url=app.config.get('NOTION_AUTHORIZE_URL'),
            access_token_url=app.config.get('NOTION_ACCESS_TOKEN_URL'),
            user_info_url=app.config.get('NOTION_USER_INFO_URL')
        ))
