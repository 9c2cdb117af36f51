"""
Pytest configuration and fixtures for the notion-auth test suite.
"""
import copy

import httpx
import pytest
from itsdangerous import URLSafeSerializer

from notion_auth import create_app
from notion_auth.auth.context import HttpContext
from notion_auth.config import TestingConfig


PROFILE_FIXTURE = {
    'object': 'user',
    'type': 'bot',
    'bot': {
        'owner': {
            'type': 'user',
            'user': {
                'object': 'user',
                'id': 'u1',
                'name': 'Ada',
                'avatar_url': 'http://x/a.png',
                'type': 'person',
                'person': {'email': 'a@x.com'}
            }
        }
    }
}

TOKEN_FIXTURE = {
    'access_token': 'T',
    'token_type': 'bearer',
    'bot_id': 'b1',
    'workspace_id': 'w1',
    'workspace_name': "Ada's Notion"
}


class FakeNotionAPI:
    """Stands in for api.notion.com behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.token_status = 200
        self.token_body = copy.deepcopy(TOKEN_FIXTURE)
        self.profile_status = 200
        self.profile_body = copy.deepcopy(PROFILE_FIXTURE)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == '/v1/oauth/token':
            return httpx.Response(self.token_status, json=self.token_body)
        if request.url.path == '/v1/users/me':
            return httpx.Response(self.profile_status, json=self.profile_body)
        return httpx.Response(404, json={'object': 'error', 'status': 404})

    def requests_to(self, path):
        return [r for r in self.requests if r.url.path == path]

    @property
    def token_requests(self):
        return self.requests_to('/v1/oauth/token')

    @property
    def profile_requests(self):
        return self.requests_to('/v1/users/me')


@pytest.fixture(scope='function')
def app():
    """Create and configure a test Flask application instance."""
    test_app = create_app(TestingConfig)
    yield test_app


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture(scope='function')
def notion_api(app):
    """Route every outbound driver call to an in-memory Notion API."""
    api = FakeNotionAPI()
    app.config['ALLY_HTTP_TRANSPORT'] = httpx.MockTransport(api.handler)
    return api


@pytest.fixture(scope='function')
def signed_state(app):
    """Return a helper producing a Cookie header carrying a signed state value."""
    def make(value, cookie_name='notion_oauth_state'):
        serializer = URLSafeSerializer(app.secret_key, salt=HttpContext.COOKIE_SALT)
        return {'Cookie': f'{cookie_name}={serializer.dumps(value)}'}
    return make
