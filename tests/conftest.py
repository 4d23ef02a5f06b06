from __future__ import annotations

import os

# Select TestSettings before the application package reads its configuration
os.environ.setdefault("APP_ENV", "test")

from typing import Any  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from franceconnect.services.oauth import (  # noqa: E402
    Environment,
    FranceConnectProvider,
    InMemorySessionStore,
    OAuth2AuthorizationCodeFlow,
    OAuthService,
    ProviderConfig,
)

BASE_URL = FranceConnectProvider.TEST_BASE_URL
TOKEN_URL = f"{BASE_URL}/token"
USERINFO_URL = f"{BASE_URL}/userinfo"


def make_response(
    status_code: int,
    url: str,
    json: Any = None,
    text: str | None = None,
    method: str = "GET",
) -> httpx.Response:
    """Build a real httpx response bound to a request so raise_for_status works."""
    request = httpx.Request(method, url)
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


def token_response(status_code: int = 200, json: Any = None, text: str | None = None) -> httpx.Response:
    return make_response(status_code, TOKEN_URL, json=json, text=text, method="POST")


def userinfo_response(status_code: int = 200, json: Any = None, text: str | None = None) -> httpx.Response:
    return make_response(status_code, USERINFO_URL, json=json, text=text)


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        client_id="abc",
        client_secret="s3cret",
        redirect_uri="https://app/cb",
        environment=Environment.OTHER,
        logout_redirect_uri="https://app/logged-out",
    )


@pytest.fixture
def provider(provider_config) -> FranceConnectProvider:
    return FranceConnectProvider(provider_config)


@pytest.fixture
def http_client() -> Mock:
    """Stand-in for httpx.Client; tests set post/get return values."""
    return Mock(spec=httpx.Client)


@pytest.fixture
def engine(provider, http_client) -> OAuth2AuthorizationCodeFlow:
    return OAuth2AuthorizationCodeFlow(provider, http_client=http_client)


@pytest.fixture
def oauth_service(engine) -> OAuthService:
    service = OAuthService()
    service.register_provider(FranceConnectProvider.IDENTIFIER, engine)
    return service


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def userinfo_claims() -> dict[str, Any]:
    return {
        "sub": "b6048e95bb134ec5b1d1e1fa69f287172e91722b9354d637a1bcf2ebb0fd2ef5v1",
        "given_name": "Angela Claire Louise",
        "family_name": "DUBOIS",
        "gender": "female",
        "birthplace": "75107",
        "birthcountry": "99100",
        "email": "wossewodda-3728@yopmail.com",
        "preferred_username": "",
        "birthdate": "1962-08-24",
    }


@pytest.fixture
def token_payload() -> dict[str, Any]:
    return {
        "access_token": "AT-123",
        "id_token": "IDT1",
        "refresh_token": "RT-456",
        "expires_in": 60,
        "token_type": "Bearer",
    }
