import base64
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .base import AccessToken, AuthenticatedUser, AuthProvider, UserProfile
from ..engine import ApiRequest, OAuth2Client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotionConfig:
    client_id: str
    client_secret: str
    callback_url: str
    authorize_url: Optional[str] = None
    access_token_url: Optional[str] = None
    user_info_url: Optional[str] = None
    driver: str = 'notion'


class NotionProvider(AuthProvider):
    """Notion OAuth 2.0 authentication provider.

    Notion has no scopes, wants client credentials as HTTP Basic auth on the
    token exchange, and wraps the token owner in a bot record on /users/me.
    """

    AUTHORIZE_URL = 'https://api.notion.com/v1/oauth/authorize'
    ACCESS_TOKEN_URL = 'https://api.notion.com/v1/oauth/token'
    USER_INFO_URL = 'https://api.notion.com/v1/users/me'
    NOTION_VERSION = '2022-02-22'

    def __init__(self, ctx, config: NotionConfig):
        self.ctx = ctx
        self.config = config
        self.user_info_url = config.user_info_url or self.USER_INFO_URL
        self.client = OAuth2Client(
            ctx,
            config,
            hooks=self,
            authorize_url=config.authorize_url or self.AUTHORIZE_URL,
            access_token_url=config.access_token_url or self.ACCESS_TOKEN_URL,
            state_cookie_name='notion_oauth_state',
            state_param_name='state',
            code_param_name='code',
            error_param_name='error'
        )
        # Must run before anything else reads the state, it also clears the cookie
        self.client.load_state()

    @property
    def name(self) -> str:
        return 'notion'

    def configure_redirect_request(self, request) -> None:
        request.param('response_type', 'code')
        request.param('owner', 'user')
        if not self.client.is_stateless:
            request.param(self.client.state_param_name, self.client.state_cookie_value)

    def configure_access_token_request(self, request: ApiRequest) -> None:
        request.request_type = 'json'
        request.parse_as('json')
        request.field(self.client.code_param_name, self.client.get_code())
        request.header('Content-Type', 'application/json')

        credentials = f"{request.fields.get('client_id')}:{request.fields.get('client_secret')}"
        basic_auth = base64.b64encode(credentials.encode('utf-8')).decode('ascii')
        request.header('Authorization', f'Basic {basic_auth}')

        # Notion rejects credentials in the body
        request.clear_field('client_id')
        request.clear_field('client_secret')

    def access_denied(self) -> bool:
        return self.ctx.input('error') == 'access_denied'

    def get_authenticated_request(self, url: str, token: str) -> ApiRequest:
        """Return a GET request for the Notion API authorized with the bearer token."""
        request = self.client.http_client(url)
        request.header('Authorization', f'Bearer {token}')
        request.header('Accept', 'application/json')
        request.header('Notion-Version', self.NOTION_VERSION)
        request.parse_as('json')
        return request

    async def get_user_info(self, token: str, callback: Optional[Callable[[ApiRequest], None]] = None) -> UserProfile:
        """
        Fetch the token owner from /users/me.

        The owner sits under bot.owner.user. Owners that are not people
        (workspace-level bots) have no person.email and raise KeyError.
        """
        request = self.get_authenticated_request(self.user_info_url, token)
        if callback is not None:
            callback(request)

        body = await request.get()
        owner = body['bot']['owner']['user']

        return UserProfile(
            id=owner['id'],
            nick_name=owner['name'],
            name=owner['name'],
            email=owner['person']['email'],
            avatar_url=owner.get('avatar_url') or None,
            email_verification_state='unsupported',
            original=body
        )

    async def user(self, callback: Optional[Callable[[ApiRequest], None]] = None) -> AuthenticatedUser:
        token = await self.client.access_token(callback)
        profile = await self.get_user_info(token.token, callback)
        logger.info("Notion user %s authenticated", profile.id)
        return AuthenticatedUser.from_profile(profile, token)

    async def user_from_token(self, token: str, callback: Optional[Callable[[ApiRequest], None]] = None) -> AuthenticatedUser:
        profile = await self.get_user_info(token, callback)
        return AuthenticatedUser.from_profile(profile, AccessToken(token=token, type='bearer'))


def notion_driver(ctx, config: NotionConfig) -> NotionProvider:
    """Driver factory registered under 'notion'."""
    return NotionProvider(ctx, config)
