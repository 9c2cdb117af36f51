from flask import session
from flask_login import UserMixin

SESSION_PROFILE_KEY = 'social_profile'


class SessionUser(UserMixin):
    """Logged-in user rebuilt from the profile kept in the signed session.

    Nothing is persisted server side and the access token is never stored.
    """

    def __init__(self, profile: dict):
        self.profile = profile

    @property
    def id(self):
        return self.profile['id']

    def get_id(self):
        return str(self.profile['id'])

    @classmethod
    def from_authenticated(cls, provider: str, user) -> 'SessionUser':
        """Build from an AuthenticatedUser and remember it in the session."""
        profile = {
            'id': user.id,
            'provider': provider,
            'name': user.name,
            'email': user.email,
            'avatar_url': user.avatar_url,
            'email_verification_state': user.email_verification_state
        }
        session[SESSION_PROFILE_KEY] = profile
        return cls(profile)

    @classmethod
    def from_session(cls, user_id):
        profile = session.get(SESSION_PROFILE_KEY)
        if not profile or str(profile.get('id')) != str(user_id):
            return None
        return cls(profile)

    @staticmethod
    def forget():
        session.pop(SESSION_PROFILE_KEY, None)

    def to_dict_public(self):
        """Public user info (safe to expose to frontend)"""
        return {
            'id': self.profile['id'],
            'name': self.profile.get('name'),
            'avatar_url': self.profile.get('avatar_url')
        }

    def to_dict_profile(self):
        """Full profile info"""
        return {
            'id': self.profile['id'],
            'email': self.profile.get('email'),
            'name': self.profile.get('name'),
            'avatar_url': self.profile.get('avatar_url'),
            'email_verification_state': self.profile.get('email_verification_state'),
            'providers': [self.profile.get('provider')]
        }
