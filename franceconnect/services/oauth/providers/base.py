"""Abstract capability set for OpenID Connect providers.

A provider spec only describes a provider: where its endpoints live, what it
adds to the authorization request and how its claims map onto a
``CanonicalUser``. The HTTP exchange itself is done by
``OAuth2AuthorizationCodeFlow``, which is composed with a spec rather than
subclassed.
"""
import secrets
import string
from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..models import CanonicalUser, Environment, ProviderConfig

_NONCE_ALPHABET = string.ascii_letters + string.digits


class ProviderSpec(ABC):
    """
    Abstract base class for provider capability sets.

    Subclasses must implement provider-specific details.
    """

    #: Session key under which the ID token is kept for logout.
    session_token_key: str = "oidc_token_id"
    #: Length of the replay-protection nonce; 0 disables it.
    nonce_length: int = 0

    def __init__(self, config: ProviderConfig):
        """
        Initialize provider spec.

        Args:
            config: Client configuration; the base URL is resolved once here
        """
        self.config = config
        self.base_url = self.resolve_base_url(config.environment)

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Stable provider identifier (e.g., "franceconnect")."""

    @property
    def display_name(self) -> str:
        return self.identifier.title()

    @abstractmethod
    def resolve_base_url(self, environment: Environment) -> str:
        """Provider's API base URL for the given environment."""

    @property
    def authorization_url(self) -> str:
        """Provider's authorization endpoint."""
        return f"{self.base_url}/authorize"

    @property
    def token_url(self) -> str:
        """Provider's token exchange endpoint."""
        return f"{self.base_url}/token"

    @property
    def user_info_url(self) -> str:
        """Provider's user info endpoint."""
        return f"{self.base_url}/userinfo"

    @property
    def logout_url(self) -> str:
        """Provider's session end endpoint."""
        return f"{self.base_url}/session/end"

    def extra_authorization_params(self) -> dict[str, str]:
        """Fixed parameters appended to every authorization request."""
        return {}

    def generate_nonce(self) -> str | None:
        """Random alphanumeric nonce, or None when the provider does not use one."""
        if not self.nonce_length:
            return None
        return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(self.nonce_length))

    @abstractmethod
    def map_claims(self, claims: Mapping[str, Any]) -> CanonicalUser:
        """
        Map raw userinfo claims to a canonical user.

        Args:
            claims: Raw user info from provider

        Returns:
            CanonicalUser without token fields

        Raises:
            MissingClaimError: If a required claim is absent
        """
