"""OAuth 2.0 / OpenID Connect Service Module.

FranceConnect SSO on top of a provider-agnostic authorization code flow.

Layers:
- ProviderSpec: what a provider looks like (endpoints, extra params, claims)
- OAuth2AuthorizationCodeFlow: the HTTP exchange, composed with a spec
- LoginFlow / OAuthService: one login attempt and the logout URL

Providers:
- FranceConnect (OpenID Connect, eIDAS low)
"""
from .client import OAuth2AuthorizationCodeFlow
from .exceptions import (
    ConfigurationError,
    FlowStateError,
    InvalidStateError,
    MissingClaimError,
    OAuthProviderError,
    TokenExchangeError,
    TransportError,
    UserInfoError,
)
from .factory import create_oauth_service, provider_config_from_settings
from .models import (
    AuthorizationRequestState,
    CanonicalUser,
    Environment,
    ProviderConfig,
    TokenResponse,
)
from .providers import (
    FranceConnectProvider,
    ProviderSpec,
)
from .service import LoginFlow, LoginStatus, OAuthService
from .session import InMemorySessionStore, RedisSessionStore, SessionStore

__all__ = [
    # Exceptions
    "OAuthProviderError",
    "ConfigurationError",
    "InvalidStateError",
    "TransportError",
    "TokenExchangeError",
    "UserInfoError",
    "MissingClaimError",
    "FlowStateError",
    # Models
    "Environment",
    "ProviderConfig",
    "AuthorizationRequestState",
    "TokenResponse",
    "CanonicalUser",
    # Providers
    "ProviderSpec",
    "FranceConnectProvider",
    # Engine and service
    "OAuth2AuthorizationCodeFlow",
    "LoginFlow",
    "LoginStatus",
    "OAuthService",
    # Sessions
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    # Factory
    "create_oauth_service",
    "provider_config_from_settings",
]
