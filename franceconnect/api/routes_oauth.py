"""
OAuth 2.0 / SSO Authentication Routes.

Endpoints:
- GET  /auth/oauth/providers - List available providers
- GET  /auth/oauth/{provider}/login - Initiate OAuth flow
- GET  /auth/oauth/{provider}/callback - Handle OAuth callback
- GET  /auth/oauth/{provider}/logout - Redirect to provider logout

Follows SRP: Only handles HTTP layer for OAuth.
Flow logic delegated to OAuthService / LoginFlow.
"""

import logging
import secrets
from functools import lru_cache
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from franceconnect.core.config import settings
from franceconnect.models.schemas import OAuthCallbackOut, OAuthProviderInfo, OAuthProvidersOut
from franceconnect.services.oauth import (
    AuthorizationRequestState,
    InMemorySessionStore,
    InvalidStateError,
    OAuthService,
    RedisSessionStore,
    SessionStore,
    create_oauth_service,
)
from franceconnect.services.oauth.session import get_redis_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth/oauth", tags=["oauth"])

STATE_KEY = "oauth_state"
NONCE_KEY = "oauth_nonce"

SessionStoreFactory = Callable[[str], SessionStore]


@lru_cache
def get_oauth_service() -> OAuthService:
    return create_oauth_service()


def get_session_store_factory() -> SessionStoreFactory:
    """Session stores are scoped per session id and backed by Redis."""
    return lambda session_id: RedisSessionStore(get_redis_client(), session_id)


def _generate_state() -> str:
    """
    Generate cryptographically secure state token for CSRF protection.

    Returns:
        Random 32-character hex string
    """
    return secrets.token_hex(16)


def _resolve_provider(oauth_service: OAuthService, provider: str):
    try:
        return oauth_service.get_provider(provider)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/providers", response_model=OAuthProvidersOut)
def list_oauth_providers(oauth_service: OAuthService = Depends(get_oauth_service)) -> dict:
    """
    List available OAuth providers.

    Returns:
        {
            "providers": [
                {
                    "name": "franceconnect",
                    "display_name": "FranceConnect",
                    "enabled": true,
                    "supports_refresh": false
                }
            ]
        }
    """
    providers = [
        OAuthProviderInfo(
            name=name,
            display_name=engine.provider.display_name,
            enabled=True,
            supports_refresh=False,
        )
        for name, engine in oauth_service.providers.items()
    ]
    return {"providers": providers}


@router.get("/{provider}/login")
def oauth_login(
    provider: str,
    request: Request,
    oauth_service: OAuthService = Depends(get_oauth_service),
    store_factory: SessionStoreFactory = Depends(get_session_store_factory),
) -> RedirectResponse:
    """
    Initiate OAuth login flow.

    Stores state and nonce server-side, sets the opaque session cookie and
    redirects the user agent to the provider's authorization page.

    Example:
        GET /auth/oauth/franceconnect/login
    """
    _resolve_provider(oauth_service, provider)

    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME) or secrets.token_urlsafe(24)
    session_store = store_factory(session_id)

    flow = oauth_service.begin_login(provider, _generate_state(), session_store)
    session_store.put(STATE_KEY, flow.request.state)
    session_store.put(NONCE_KEY, flow.request.nonce)

    response = RedirectResponse(url=flow.request.url)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/{provider}/callback", response_model=OAuthCallbackOut)
def oauth_callback(
    provider: str,
    request: Request,
    code: str | None = Query(None, description="Authorization code from OAuth provider"),
    state: str | None = Query(None, description="CSRF protection token"),
    error: str | None = Query(None, description="Error returned by the provider"),
    error_description: str | None = Query(None),
    oauth_service: OAuthService = Depends(get_oauth_service),
    store_factory: SessionStoreFactory = Depends(get_session_store_factory),
) -> OAuthCallbackOut:
    """
    Handle OAuth provider callback.

    Completes OAuth flow:
    1. Validates CSRF state against the one stored at login
    2. Exchanges code for tokens
    3. Fetches and maps user info
    4. Keeps the ID token in session for logout

    Example:
        GET /auth/oauth/franceconnect/callback?code=xxx&state=abc123
    """
    _resolve_provider(oauth_service, provider)

    if error:
        logger.warning(f"OAuth provider returned error: {error} ({error_description})")
        raise HTTPException(status_code=400, detail=f"Authorization failed: {error}")
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        logger.warning("OAuth callback without session cookie")
        raise InvalidStateError()

    session_store = store_factory(session_id)
    issued_state = session_store.get(STATE_KEY)
    if issued_state is None:
        logger.warning("No pending OAuth state in session")
        raise InvalidStateError()

    pending = AuthorizationRequestState(state=issued_state, nonce=session_store.get(NONCE_KEY) or "")
    # State is single use, whatever the outcome
    session_store.put(STATE_KEY, None)
    session_store.put(NONCE_KEY, None)

    flow = oauth_service.resume_login(provider, pending, session_store)
    user = flow.handle_callback(code, state)

    logger.info(f"OAuth authentication successful for {provider}")
    return OAuthCallbackOut.from_user(user, provider)


@router.get("/{provider}/logout")
def oauth_logout(
    provider: str,
    request: Request,
    oauth_service: OAuthService = Depends(get_oauth_service),
    store_factory: SessionStoreFactory = Depends(get_session_store_factory),
) -> RedirectResponse:
    """
    Redirect to the provider's session end endpoint.

    Example:
        GET /auth/oauth/franceconnect/logout
    """
    _resolve_provider(oauth_service, provider)

    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    # No session: nothing to hint, and no store entry is created
    session_store = store_factory(session_id) if session_id else InMemorySessionStore()
    logout_url = oauth_service.generate_logout_url(provider, session_store)
    return RedirectResponse(url=logout_url)
