from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class AccessToken:
    """Bearer credential returned by the token exchange."""
    token: str
    type: str = 'bearer'
    original: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {'token': self.token, 'type': self.type}


@dataclass
class UserProfile:
    """Provider profile mapped onto the shape shared by every driver."""
    id: str
    nick_name: str
    name: str
    email: Optional[str]
    avatar_url: Optional[str]
    email_verification_state: str
    original: Dict

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'nickName': self.nick_name,
            'name': self.name,
            'email': self.email,
            'avatarUrl': self.avatar_url,
            'emailVerificationState': self.email_verification_state,
            'original': self.original
        }


@dataclass
class AuthenticatedUser(UserProfile):
    token: Optional[AccessToken] = None

    @classmethod
    def from_profile(cls, profile: UserProfile, token: AccessToken) -> 'AuthenticatedUser':
        return cls(
            id=profile.id,
            nick_name=profile.nick_name,
            name=profile.name,
            email=profile.email,
            avatar_url=profile.avatar_url,
            email_verification_state=profile.email_verification_state,
            original=profile.original,
            token=token
        )

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data['token'] = self.token.to_dict() if self.token else None
        return data


class AuthProvider(ABC):
    """Abstract base class for social login drivers.

    Subclasses supply the provider-specific hooks; the flow itself runs in the
    composed ``self.client`` (an ``OAuth2Client``).
    """

    client = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'notion')."""
        pass

    @abstractmethod
    def configure_redirect_request(self, request) -> None:
        """Add provider-specific query parameters to the authorize URL."""
        pass

    @abstractmethod
    def configure_access_token_request(self, request) -> None:
        """Adjust the pre-populated token exchange request before it is sent."""
        pass

    @abstractmethod
    def access_denied(self) -> bool:
        """Return True if the user cancelled the flow at the provider."""
        pass

    @abstractmethod
    async def user(self, callback: Optional[Callable] = None) -> AuthenticatedUser:
        """
        Exchange the callback's code and fetch the user it belongs to.

        Args:
            callback: Optional hook called with each outbound request

        Returns:
            AuthenticatedUser with the access token attached
        """
        pass

    @abstractmethod
    async def user_from_token(self, token: str, callback: Optional[Callable] = None) -> AuthenticatedUser:
        """Fetch the user for an access token obtained earlier."""
        pass

    def stateless(self) -> 'AuthProvider':
        self.client.stateless()
        return self

    def redirect_url(self, callback: Optional[Callable] = None) -> str:
        return self.client.redirect_url(callback)

    def redirect(self, callback: Optional[Callable] = None):
        return self.client.redirect(callback)

    def state_mismatch(self) -> bool:
        return self.client.state_mismatch()

    def has_error(self) -> bool:
        return self.client.has_error()

    def get_error(self) -> Optional[str]:
        return self.client.get_error()

    def get_code(self) -> Optional[str]:
        return self.client.get_code()

    async def access_token(self, callback: Optional[Callable] = None) -> AccessToken:
        return await self.client.access_token(callback)
