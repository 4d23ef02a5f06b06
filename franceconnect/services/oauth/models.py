"""Value objects passed between the steps of the authorization code flow."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

DEFAULT_SCOPES = ("openid", "profile", "email")


class Environment(str, Enum):
    PRODUCTION = "production"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str | None) -> Environment:
        """Map an application environment name (``ENV``) to a provider environment."""
        if name and name.lower() in ("prod", "production"):
            return cls.PRODUCTION
        return cls.OTHER


@dataclass(frozen=True)
class ProviderConfig:
    client_id: str | None
    client_secret: str | None
    redirect_uri: str | None
    environment: Environment = Environment.OTHER
    logout_redirect_uri: str | None = None
    scopes: tuple[str, ...] = DEFAULT_SCOPES
    scope_separator: str = " "

    def __post_init__(self) -> None:
        # Ordered set: keep the first occurrence of each scope
        object.__setattr__(self, "scopes", tuple(dict.fromkeys(self.scopes)))
        object.__setattr__(self, "environment", Environment(self.environment))


@dataclass(frozen=True)
class AuthorizationRequestState:
    state: str
    nonce: str
    extra_params: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    id_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CanonicalUser:
    """User record shared by every provider.

    Built in two steps: the claim mapper fills the identity fields and ``raw``;
    the login flow then adds the token fields from the token response.
    """

    id: str
    given_name: str
    family_name: str
    gender: str
    birthplace: str
    birthcountry: str
    email: str
    preferred_username: str
    raw: Mapping[str, Any] = field(default_factory=dict)
    token: str | None = None
    token_id: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
