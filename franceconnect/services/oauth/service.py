"""OAuth Service for FranceConnect SSO authentication.

Responsibilities:
- Drive one login attempt through the authorization code flow
- Keep the ID token in the session for logout
- Build the provider logout URL
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from enum import Enum

from .client import OAuth2AuthorizationCodeFlow
from .exceptions import FlowStateError, InvalidStateError
from .models import AuthorizationRequestState, CanonicalUser
from .session import SessionStore

logger = logging.getLogger(__name__)


class LoginStatus(str, Enum):
    INITIATED = "initiated"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"
    FETCHING_USER_INFO = "fetching_user_info"
    COMPLETE = "complete"
    FAILED = "failed"


def _same_state(returned: str | None, issued: str) -> bool:
    if not returned:
        return False
    return secrets.compare_digest(returned.encode("utf-8"), issued.encode("utf-8"))


class LoginFlow:
    """
    One login attempt.

    initiated -> awaiting_callback -> exchanging -> fetching_user_info -> complete,
    or failed from any step after initiated. Not resumable once failed.
    """

    def __init__(self, engine: OAuth2AuthorizationCodeFlow, session_store: SessionStore):
        self.engine = engine
        self.session_store = session_store
        self.status = LoginStatus.INITIATED
        self.request: AuthorizationRequestState | None = None
        self.error: Exception | None = None

    @classmethod
    def resume(
        cls,
        engine: OAuth2AuthorizationCodeFlow,
        session_store: SessionStore,
        request: AuthorizationRequestState,
    ) -> LoginFlow:
        """Rebuild a flow waiting for its callback from a persisted request."""
        flow = cls(engine, session_store)
        flow.request = request
        flow.status = LoginStatus.AWAITING_CALLBACK
        return flow

    def _require(self, expected: LoginStatus) -> None:
        if self.status != expected:
            raise FlowStateError(
                f"Login flow is {self.status.value}, expected {expected.value}",
                details={"status": self.status.value},
            )

    def _fail(self, error: Exception) -> None:
        logger.warning(f"Login flow failed at {self.status.value}: {error}")
        self.status = LoginStatus.FAILED
        self.error = error

    def start(self, state: str) -> str:
        """
        Build the authorization URL the user agent must be redirected to.

        Args:
            state: CSRF token; must come back unchanged on the callback

        Returns:
            Absolute authorization URL
        """
        self._require(LoginStatus.INITIATED)
        self.request = self.engine.build_authorization_request(state)
        self.status = LoginStatus.AWAITING_CALLBACK
        return self.request.url

    def handle_callback(self, code: str, returned_state: str | None) -> CanonicalUser:
        """
        Complete the login with the provider callback parameters.

        Args:
            code: Authorization code from the callback
            returned_state: State echoed by the provider

        Returns:
            CanonicalUser with token fields filled in

        Raises:
            InvalidStateError: If the state does not match (no HTTP call is made)
            OAuthProviderError: If any later step fails
        """
        self._require(LoginStatus.AWAITING_CALLBACK)

        if not _same_state(returned_state, self.request.state):
            error = InvalidStateError()
            self._fail(error)
            raise error

        self.status = LoginStatus.EXCHANGING
        try:
            token = self.engine.exchange_code_for_token(code)
            self.status = LoginStatus.FETCHING_USER_INFO
            claims = self.engine.get_user_info(token.access_token)
            user = self.engine.provider.map_claims(claims)
            # Kept for logout URL generation
            self.session_store.put(self.engine.provider.session_token_key, token.id_token)
        except Exception as e:
            self._fail(e)
            raise

        self.status = LoginStatus.COMPLETE
        logger.info(f"User authenticated via {self.engine.provider.identifier}: sub={user.id}")
        return replace(
            user,
            token=token.access_token,
            token_id=token.id_token,
            refresh_token=token.refresh_token,
            expires_in=token.expires_in,
        )


class OAuthService:
    """
    OAuth service for FranceConnect SSO.

    Holds the configured flow engines and exposes login and logout
    operations bound to a caller-supplied session store.
    """

    def __init__(self):
        self._providers: dict[str, OAuth2AuthorizationCodeFlow] = {}

    def register_provider(self, name: str, engine: OAuth2AuthorizationCodeFlow) -> None:
        """
        Register an OAuth provider.

        Args:
            name: Provider identifier (e.g., "franceconnect")
            engine: Flow engine composed with the provider spec
        """
        self._providers[name] = engine
        logger.info(f"Registered OAuth provider: {name}")

    def get_provider(self, name: str) -> OAuth2AuthorizationCodeFlow:
        """
        Get registered OAuth provider.

        Raises:
            ValueError: If provider not registered
        """
        if name not in self._providers:
            raise ValueError(f"OAuth provider '{name}' not registered")
        return self._providers[name]

    @property
    def providers(self) -> dict[str, OAuth2AuthorizationCodeFlow]:
        return dict(self._providers)

    def begin_login(self, provider_name: str, state: str, session_store: SessionStore) -> LoginFlow:
        """Start a login attempt; the returned flow holds the authorization URL."""
        flow = LoginFlow(self.get_provider(provider_name), session_store)
        flow.start(state)
        logger.info(f"Initiating OAuth login with {provider_name}")
        return flow

    def resume_login(
        self,
        provider_name: str,
        request: AuthorizationRequestState,
        session_store: SessionStore,
    ) -> LoginFlow:
        return LoginFlow.resume(self.get_provider(provider_name), session_store, request)

    def generate_logout_url(self, provider_name: str, session_store: SessionStore) -> str:
        """
        Generate the provider logout URL from the ID token kept at login.

        A missing token is passed through: the hint is simply left out.
        """
        engine = self.get_provider(provider_name)
        id_token = session_store.get(engine.provider.session_token_key)
        if id_token is None:
            logger.warning(f"No ID token in session for {provider_name} logout")
        return engine.build_logout_url(id_token)
