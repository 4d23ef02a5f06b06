"""OAuth service exceptions.

Every error raised by the login flow derives from ``OAuthProviderError`` so the
HTTP layer can translate the whole family in one handler. Nothing here is
retried: an error ends the login attempt.
"""
from __future__ import annotations

from typing import Any


class OAuthProviderError(Exception):
    """Raised when the OAuth flow cannot proceed."""

    status_code: int = 400
    code: str = "oauth_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


class ConfigurationError(OAuthProviderError):
    """Raised when required client configuration is missing."""

    status_code = 500
    code = "configuration_error"


class InvalidStateError(OAuthProviderError):
    """Raised when the callback state does not match the issued one."""

    code = "invalid_state"

    def __init__(self, message: str = "Invalid state token. Possible CSRF attack or expired session."):
        super().__init__(message)


class TransportError(OAuthProviderError):
    """Raised when the identity provider cannot be reached."""

    status_code = 502
    code = "transport_error"


class TokenExchangeError(OAuthProviderError):
    """Raised when token exchange fails.

    ``payload`` holds the provider's error body (decoded JSON when possible).
    """

    status_code = 502
    code = "token_exchange_failed"

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message, details={"provider_status": status_code, "provider_error": payload})
        self.provider_status = status_code
        self.payload = payload


class UserInfoError(OAuthProviderError):
    """Raised when fetching user info fails."""

    status_code = 502
    code = "userinfo_failed"

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message, details={"provider_status": status_code, "provider_error": payload})
        self.provider_status = status_code
        self.payload = payload


class MissingClaimError(OAuthProviderError):
    """Raised when the userinfo response lacks a required claim."""

    status_code = 502
    code = "missing_claim"

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing required claims: {', '.join(missing)}",
            details={"missing": list(missing)},
        )
        self.missing = list(missing)


class FlowStateError(OAuthProviderError):
    """Raised when a login flow is driven out of order or after it ended."""

    status_code = 409
    code = "invalid_flow_state"
