from dataclasses import dataclass
from typing import Optional
from models.profile import Profile
from utils.errors import AuthorizationError


@dataclass(frozen=True)
class ActingSession:
    """Who is acting for the duration of one request.

    Resolved once by the auth middleware and passed explicitly into every
    service call; nothing downstream re-reads the token.
    """
    user_id: str
    email: Optional[str] = None
    profile: Optional[Profile] = None

    @property
    def has_profile(self) -> bool:
        return self.profile is not None

    @property
    def display_name(self) -> str:
        if self.profile is not None and self.profile.full_name:
            return self.profile.full_name
        if self.email:
            return self.email.split('@')[0]
        return 'Someone'


class IdentityResolver:
    """Maps an authenticated principal onto its profile record"""

    def __init__(self, session):
        self.session = session

    def resolve(self, principal_id, email=None) -> ActingSession:
        user_id = str(principal_id)
        profile = self.session.get(Profile, user_id)
        if email is None and profile is not None:
            email = profile.email
        return ActingSession(user_id=user_id, email=email, profile=profile)

    @staticmethod
    def require_profile(acting: ActingSession) -> Profile:
        if acting.profile is None:
            raise AuthorizationError('Profile setup required')
        return acting.profile
