"""
Provider-agnostic pieces of the OAuth2 authorization-code flow.

Drivers compose an OAuth2Client and hand it themselves as ``hooks``; the
client calls back into ``configure_redirect_request``,
``configure_access_token_request`` and ``access_denied`` at the points where
providers disagree with the RFC.
"""
import logging
from typing import Callable, Dict, Optional

import httpx
from authlib.common.security import generate_token
from authlib.common.urls import add_params_to_uri, url_decode
from authlib.integrations.base_client import MismatchingStateError, OAuthError

from .providers.base import AccessToken

logger = logging.getLogger(__name__)


class RedirectRequest:
    """Query parameters for the provider's authorize URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.params: Dict[str, str] = {}

    def param(self, name: str, value) -> 'RedirectRequest':
        self.params[name] = value
        return self

    def clear_param(self, name: str) -> 'RedirectRequest':
        self.params.pop(name, None)
        return self

    def make_url(self) -> str:
        return add_params_to_uri(self.base_url, list(self.params.items()))


class ApiRequest:
    """A single outbound HTTP call, built up before being sent."""

    def __init__(self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.transport = transport
        self.headers: Dict[str, str] = {}
        self.fields: Dict[str, str] = {}
        self.params: Dict[str, str] = {}
        self.request_type = 'urlencoded'
        self.response_type = 'text'

    def header(self, name: str, value: str) -> 'ApiRequest':
        self.headers[name] = value
        return self

    def field(self, name: str, value) -> 'ApiRequest':
        self.fields[name] = value
        return self

    def clear_field(self, name: str) -> 'ApiRequest':
        self.fields.pop(name, None)
        return self

    def param(self, name: str, value) -> 'ApiRequest':
        self.params[name] = value
        return self

    def parse_as(self, response_type: str) -> 'ApiRequest':
        self.response_type = response_type
        return self

    async def get(self):
        return await self._send('GET')

    async def post(self):
        return await self._send('POST')

    async def _send(self, method: str):
        kwargs = {'headers': self.headers}
        if self.params:
            kwargs['params'] = self.params
        if method == 'POST':
            if self.request_type == 'json':
                kwargs['json'] = self.fields
            else:
                kwargs['data'] = self.fields

        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.request(method, self.url, **kwargs)

        # Transport and decode errors are left for the caller
        response.raise_for_status()
        if self.response_type == 'json':
            return response.json()
        return response.text


class OAuth2Client:
    """Authorization-code flow engine shared by all drivers."""

    def __init__(self, ctx, config, hooks, authorize_url: str, access_token_url: str,
                 state_cookie_name: str, state_param_name: str = 'state',
                 code_param_name: str = 'code', error_param_name: str = 'error'):
        self.ctx = ctx
        self.config = config
        self.hooks = hooks
        self.authorize_url = authorize_url
        self.access_token_url = access_token_url
        self.state_cookie_name = state_cookie_name
        self.state_param_name = state_param_name
        self.code_param_name = code_param_name
        self.error_param_name = error_param_name
        self.state_cookie_value: Optional[str] = None
        self.is_stateless = False

    def stateless(self) -> 'OAuth2Client':
        self.is_stateless = True
        return self

    def load_state(self):
        """Read the state issued by the redirect and drop its cookie."""
        if self.is_stateless:
            return
        self.state_cookie_value = self.ctx.signed_cookie(self.state_cookie_name)
        self.ctx.clear_cookie(self.state_cookie_name)

    def persist_state(self) -> Optional[str]:
        if self.is_stateless:
            return None
        state = generate_token(32)
        self.ctx.set_signed_cookie(self.state_cookie_name, state)
        self.state_cookie_value = state
        return state

    def redirect_url(self, callback: Optional[Callable[[RedirectRequest], None]] = None) -> str:
        request = RedirectRequest(self.authorize_url)
        request.param('client_id', self.config.client_id)
        request.param('redirect_uri', self.config.callback_url)
        self.hooks.configure_redirect_request(request)
        if callback is not None:
            callback(request)
        return request.make_url()

    def redirect(self, callback: Optional[Callable[[RedirectRequest], None]] = None):
        self.persist_state()
        return self.ctx.redirect(self.redirect_url(callback))

    def get_code(self) -> Optional[str]:
        return self.ctx.input(self.code_param_name)

    def has_code(self) -> bool:
        return bool(self.get_code())

    def get_error(self) -> Optional[str]:
        error = self.ctx.input(self.error_param_name)
        if not error and not self.has_code():
            return 'unknown_error'
        return error

    def has_error(self) -> bool:
        return bool(self.get_error())

    def state_mismatch(self) -> bool:
        if self.is_stateless:
            return False
        if not self.state_cookie_value:
            return True
        return self.state_cookie_value != self.ctx.input(self.state_param_name)

    def http_client(self, url: str) -> ApiRequest:
        return ApiRequest(url, transport=self.ctx.transport)

    async def access_token(self, callback: Optional[Callable[[ApiRequest], None]] = None) -> AccessToken:
        """Exchange the callback's authorization code for an access token."""
        if self.hooks.access_denied():
            raise OAuthError(error='access_denied', description='User denied access')
        if self.state_mismatch():
            raise MismatchingStateError()
        if self.has_error():
            raise OAuthError(error=self.get_error())

        request = self.http_client(self.access_token_url)
        request.field('grant_type', 'authorization_code')
        request.field('redirect_uri', self.config.callback_url)
        request.field('client_id', self.config.client_id)
        request.field('client_secret', self.config.client_secret)
        request.field(self.code_param_name, self.get_code())

        self.hooks.configure_access_token_request(request)
        if callback is not None:
            callback(request)

        logger.debug("Exchanging authorization code at %s", self.access_token_url)
        body = await request.post()
        return self.process_access_token_response(body)

    def process_access_token_response(self, body) -> AccessToken:
        if isinstance(body, str):
            body = dict(url_decode(body))

        token = body.get('access_token')
        if not token:
            raise OAuthError(
                error='invalid_token_response',
                description='No access_token in token response'
            )
        return AccessToken(
            token=token,
            type='bearer',
            original=body
        )
