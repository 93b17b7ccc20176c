"""
Development auth: the bearer token is the user id.
"""

from chatclone.core.exceptions import AuthenticationError
from chatclone.interfaces.auth_provider import IAuthProvider, User

KNOWN_USERS = {
    user.id: user
    for user in (
        User(id="dev_user", email="dev@example.com", display_name="Developer"),
        User(id="test_user", email="test@example.com", display_name="Test User"),
    )
}


class MockAuthProvider(IAuthProvider):
    """
    Accepts any non-empty token and uses it as the user id.

    The chat client sends the signed-in user's id as its token, so memories
    and chat records stay per user without an identity provider.
    """

    def __init__(self, enabled: bool = False):
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        user_id = token.strip()
        if not user_id:
            raise AuthenticationError("Empty bearer token")
        known = KNOWN_USERS.get(user_id)
        if known is not None:
            return known
        return User(id=user_id, email=user_id if "@" in user_id else None, display_name=user_id)

    def is_enabled(self) -> bool:
        return self._enabled
