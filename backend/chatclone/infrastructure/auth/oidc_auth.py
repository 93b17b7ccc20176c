"""
OIDC bearer-token authentication.

Tokens are verified against the issuer's JWKS; the subject claim becomes
the chat user id, so memories and chat records follow the identity
provider's account.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from jose import JWTError, jwt

from chatclone.core.config import Settings
from chatclone.core.exceptions import AuthenticationError
from chatclone.interfaces.auth_provider import IAuthProvider, User


def jwks_url_for(settings: Settings) -> str:
    """Explicit OIDC_JWKS_URL, else the issuer's well-known key set."""
    if settings.OIDC_JWKS_URL:
        return settings.OIDC_JWKS_URL
    return f"{settings.OIDC_ISSUER.rstrip('/')}/.well-known/jwks.json"


class OidcAuthProvider(IAuthProvider):
    """Verifies access tokens signed with a key from the issuer's JWKS."""

    def __init__(self, settings: Settings, jwks_ttl_seconds: int = 3600):
        if not settings.OIDC_ISSUER and not settings.OIDC_JWKS_URL:
            raise ValueError("OIDC_ISSUER or OIDC_JWKS_URL must be set for OIDC auth")
        self._issuer = settings.OIDC_ISSUER or None
        self._audience = settings.OIDC_AUDIENCE or None
        self._email_claim = settings.OIDC_EMAIL_CLAIM or "email"
        self._name_claim = settings.OIDC_NAME_CLAIM or "name"
        self._jwks_url = jwks_url_for(settings)
        self._jwks_ttl_seconds = jwks_ttl_seconds
        self._jwks: Optional[dict[str, Any]] = None
        self._jwks_fetched_at = 0.0

    async def _get_jwks(self) -> dict[str, Any]:
        if self._jwks is not None and time.monotonic() - self._jwks_fetched_at < self._jwks_ttl_seconds:
            return self._jwks
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(self._jwks_url)
            response.raise_for_status()
            self._jwks = response.json()
        self._jwks_fetched_at = time.monotonic()
        return self._jwks

    async def _signing_key(self, kid: Optional[str]) -> dict[str, Any]:
        jwks = await self._get_jwks()
        key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
        if key is None:
            raise JWTError(f"No signing key with kid {kid!r}")
        return key

    async def verify_token(self, token: str) -> User:
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(
                token,
                await self._signing_key(header.get("kid")),
                algorithms=[header.get("alg", "RS256")],
                audience=self._audience,
                issuer=self._issuer,
                options={"verify_aud": self._audience is not None, "verify_iss": self._issuer is not None},
            )
        except (JWTError, httpx.HTTPError) as e:
            raise AuthenticationError(f"Invalid token: {e}")

        if not claims.get("sub"):
            raise AuthenticationError("Token has no subject claim")
        return User(
            id=str(claims["sub"]),
            email=claims.get(self._email_claim),
            display_name=claims.get(self._name_claim) or claims.get("preferred_username"),
        )

    def is_enabled(self) -> bool:
        return True
