"""Generic OAuth 2.0 authorization code flow engine.

Implements the four HTTP-facing steps of the flow (authorize URL, token
exchange, user info, logout URL) against any ``ProviderSpec``.
"""
import base64
import hashlib
import logging
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import urlencode

import httpx

from .exceptions import ConfigurationError, TokenExchangeError, TransportError, UserInfoError
from .models import AuthorizationRequestState, TokenResponse
from .providers import ProviderSpec

logger = logging.getLogger(__name__)


def _code_hash(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()[:12]


def _error_payload(response: httpx.Response) -> Any:
    """Provider error body, decoded when it is JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


class OAuth2AuthorizationCodeFlow:
    """
    OAuth 2.0 authorization code client composed with a provider spec.

    Calls are synchronous. An ``httpx.Client`` may be injected (and is then
    owned by the caller); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        provider: ProviderSpec,
        http_client: httpx.Client | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the flow engine.

        Args:
            provider: Provider capability set (endpoints, extra params, claim mapping)
            http_client: Optional client used for every outbound call
            timeout: Timeout in seconds for self-managed clients
        """
        self.provider = provider
        self.config = provider.config
        self.timeout = timeout
        self._http_client = http_client

    @contextmanager
    def _http(self) -> Iterator[httpx.Client]:
        if self._http_client is not None:
            yield self._http_client
            return
        with httpx.Client(timeout=self.timeout) as client:
            yield client

    def build_authorization_request(self, state: str) -> AuthorizationRequestState:
        """
        Generate the authorization request for a login attempt.

        Args:
            state: CSRF protection token issued by the caller

        Returns:
            AuthorizationRequestState holding state, nonce and the full URL

        Raises:
            ConfigurationError: If client_id or redirect_uri is unset
        """
        if not state:
            raise ValueError("state must be a non-empty string")
        if not self.config.client_id:
            raise ConfigurationError("client_id is not configured")
        if not self.config.redirect_uri:
            raise ConfigurationError("redirect_uri is not configured")

        nonce = self.provider.generate_nonce()
        extra_params = self.provider.extra_authorization_params()

        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "scope": self.config.scope_separator.join(self.config.scopes),
            "response_type": "code",
            "state": state,
        }
        if nonce:
            params["nonce"] = nonce
        params.update(extra_params)

        url = f"{self.provider.authorization_url}?{urlencode(params)}"
        return AuthorizationRequestState(state=state, nonce=nonce or "", extra_params=extra_params, url=url)

    def get_authorization_url(self, state: str) -> str:
        """Full authorization URL with query parameters."""
        return self.build_authorization_request(state).url

    def _basic_auth_header(self) -> str:
        credentials = f"{self.config.client_id}:{self.config.client_secret}"
        return "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii")

    def exchange_code_for_token(self, code: str, redirect_uri: str | None = None) -> TokenResponse:
        """
        Exchange authorization code for tokens.

        Args:
            code: Authorization code from OAuth callback
            redirect_uri: Redirect URI used in the authorization request

        Returns:
            TokenResponse with access_token, id_token, etc.

        Raises:
            TransportError: If the provider cannot be reached
            TokenExchangeError: If the provider rejects the code or answers garbage
        """
        if not code:
            raise ValueError("code must be a non-empty string")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or self.config.redirect_uri,
        }
        headers = {"Authorization": self._basic_auth_header()}

        code_hash = _code_hash(code)
        logger.info(
            f"Token exchange attempt | "
            f"provider={self.provider.identifier} "
            f"code_hash={code_hash} "
            f"client_id={self.config.client_id}"
        )

        with self._http() as client:
            try:
                response = client.post(self.provider.token_url, data=data, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                payload = _error_payload(e.response)
                logger.error(
                    f"Token exchange failed | "
                    f"code_hash={code_hash} "
                    f"status={e.response.status_code} "
                    f"response={payload}"
                )
                raise TokenExchangeError(
                    f"Token exchange failed: {e.response.status_code}",
                    status_code=e.response.status_code,
                    payload=payload,
                ) from e
            except httpx.RequestError as e:
                logger.error(f"Token exchange request failed: {str(e)}")
                raise TransportError("Failed to connect to OAuth provider") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TokenExchangeError(
                "Token endpoint returned malformed JSON",
                status_code=response.status_code,
                payload=response.text,
            ) from e

        token = self._parse_token_response(body, response.status_code)
        logger.info(f"Token exchange SUCCESS | code_hash={code_hash}")
        return token

    @staticmethod
    def _parse_token_response(body: Any, status_code: int) -> TokenResponse:
        if not isinstance(body, dict):
            raise TokenExchangeError("Token endpoint returned a non-object body", status_code=status_code, payload=body)
        if not body.get("access_token"):
            raise TokenExchangeError("No access token in response", status_code=status_code, payload=body)

        expires_in = body.get("expires_in")
        if expires_in is not None:
            try:
                expires_in = int(expires_in)
            except (TypeError, ValueError) as e:
                raise TokenExchangeError(
                    f"Invalid expires_in value: {expires_in!r}", status_code=status_code, payload=body
                ) from e

        return TokenResponse(
            access_token=body["access_token"],
            id_token=body.get("id_token"),
            refresh_token=body.get("refresh_token"),
            expires_in=expires_in,
            raw=body,
        )

    def get_user_info(self, access_token: str) -> dict[str, Any]:
        """
        Fetch user claims using access token.

        Args:
            access_token: OAuth access token

        Returns:
            Raw userinfo claims

        Raises:
            TransportError: If the provider cannot be reached
            UserInfoError: If fetching user info fails
        """
        if not access_token:
            raise ValueError("access_token must be a non-empty string")

        headers = {"Authorization": f"Bearer {access_token}"}

        with self._http() as client:
            try:
                response = client.get(self.provider.user_info_url, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                payload = _error_payload(e.response)
                logger.error(f"User info fetch failed: status={e.response.status_code} response={payload}")
                raise UserInfoError(
                    f"User info fetch failed: {e.response.status_code}",
                    status_code=e.response.status_code,
                    payload=payload,
                ) from e
            except httpx.RequestError as e:
                logger.error(f"User info request failed: {str(e)}")
                raise TransportError("Failed to connect to OAuth provider") from e

        try:
            claims = response.json()
        except ValueError as e:
            raise UserInfoError(
                "User info endpoint returned malformed JSON",
                status_code=response.status_code,
                payload=response.text,
            ) from e
        if not isinstance(claims, dict):
            raise UserInfoError(
                "User info endpoint returned a non-object body",
                status_code=response.status_code,
                payload=claims,
            )
        return claims

    def build_logout_url(self, id_token: str | None) -> str:
        """
        Generate the provider logout URL.

        Parameters without a value are left out of the query string.
        """
        params = {
            "post_logout_redirect_uri": self.config.logout_redirect_uri,
            "id_token_hint": id_token,
        }
        query = urlencode({key: value for key, value in params.items() if value is not None})
        return f"{self.provider.logout_url}?{query}"
