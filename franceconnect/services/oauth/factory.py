"""Factory function for creating configured OAuth service."""
import logging

import httpx

from franceconnect.core.config import BaseAppSettings, settings as app_settings

from .client import OAuth2AuthorizationCodeFlow
from .models import Environment, ProviderConfig
from .providers import FranceConnectProvider
from .service import OAuthService

logger = logging.getLogger(__name__)


def provider_config_from_settings(settings: BaseAppSettings) -> ProviderConfig:
    """Build an immutable FranceConnect client configuration from settings."""
    return ProviderConfig(
        client_id=settings.FRANCECONNECT_CLIENT_ID,
        client_secret=settings.FRANCECONNECT_CLIENT_SECRET,
        redirect_uri=settings.FRANCECONNECT_REDIRECT_URI,
        environment=Environment.from_name(settings.ENV),
        logout_redirect_uri=settings.FRANCECONNECT_LOGOUT_REDIRECT,
        scopes=tuple(settings.franceconnect_scopes),
        scope_separator=settings.FRANCECONNECT_SCOPE_SEPARATOR,
    )


def create_oauth_service(
    settings: BaseAppSettings | None = None,
    http_client: httpx.Client | None = None,
) -> OAuthService:
    """
    Factory function to create configured OAuth service.

    Registers FranceConnect when its client credentials are configured.

    Args:
        settings: Settings to read from (defaults to the application settings)
        http_client: Optional shared HTTP client for provider calls

    Returns:
        Configured OAuthService instance
    """
    settings = settings or app_settings
    service = OAuthService()

    if settings.FRANCECONNECT_CLIENT_ID and settings.FRANCECONNECT_CLIENT_SECRET:
        provider = FranceConnectProvider(provider_config_from_settings(settings))
        engine = OAuth2AuthorizationCodeFlow(
            provider,
            http_client=http_client,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        service.register_provider(FranceConnectProvider.IDENTIFIER, engine)
        logger.info(f"FranceConnect OAuth provider enabled ({provider.base_url})")
    else:
        logger.warning("FranceConnect OAuth not configured (missing client ID/secret)")

    return service
