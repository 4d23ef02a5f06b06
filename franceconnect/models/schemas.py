"""OAuth / SSO response schemas."""
from __future__ import annotations

from pydantic import BaseModel

from franceconnect.services.oauth.models import CanonicalUser


class OAuthProviderInfo(BaseModel):
    """Information about an OAuth provider."""
    name: str
    display_name: str
    enabled: bool
    supports_refresh: bool
    icon_url: str | None = None


class OAuthProvidersOut(BaseModel):
    """List of available OAuth providers."""
    providers: list[OAuthProviderInfo]


class OAuthCallbackOut(BaseModel):
    """Authenticated user profile returned by the OAuth callback.

    Provider tokens stay server-side and are never echoed to the browser.
    """
    id: str
    given_name: str
    family_name: str
    gender: str
    birthplace: str
    birthcountry: str
    email: str
    preferred_username: str
    expires_in: int | None = None
    provider: str

    @classmethod
    def from_user(cls, user: CanonicalUser, provider: str) -> OAuthCallbackOut:
        return cls(
            id=user.id,
            given_name=user.given_name,
            family_name=user.family_name,
            gender=user.gender,
            birthplace=user.birthplace,
            birthcountry=user.birthcountry,
            email=user.email,
            preferred_username=user.preferred_username,
            expires_in=user.expires_in,
            provider=provider,
        )


class HealthOut(BaseModel):
    status: str
    redis: bool
    providers: list[str]
