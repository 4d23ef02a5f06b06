"""Tests for the login state machine and logout round trip."""
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from conftest import token_response, userinfo_response
from franceconnect.services.oauth import (
    AuthorizationRequestState,
    FlowStateError,
    InMemorySessionStore,
    InvalidStateError,
    LoginFlow,
    LoginStatus,
    MissingClaimError,
    TokenExchangeError,
    TransportError,
)


@pytest.fixture
def flow(engine, session_store) -> LoginFlow:
    return LoginFlow(engine, session_store)


def test_start_moves_to_awaiting_callback(flow):
    assert flow.status == LoginStatus.INITIATED
    url = flow.start("xyz")
    assert flow.status == LoginStatus.AWAITING_CALLBACK
    assert url == flow.request.url
    assert flow.request.state == "xyz"


def test_successful_login(flow, http_client, session_store, token_payload, userinfo_claims):
    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.return_value = userinfo_response(json=userinfo_claims)

    flow.start("xyz")
    user = flow.handle_callback("the-code", "xyz")

    assert flow.status == LoginStatus.COMPLETE
    assert user.id == userinfo_claims["sub"]
    assert user.email == userinfo_claims["email"]
    assert user.token == "AT-123"
    assert user.token_id == "IDT1"
    assert user.refresh_token == "RT-456"
    assert user.expires_in == 60
    assert user.raw == userinfo_claims
    assert session_store.get("fc_token_id") == "IDT1"


def test_state_mismatch_fails_before_any_http_call(flow, http_client, session_store):
    flow.start("xyz")

    with pytest.raises(InvalidStateError):
        flow.handle_callback("the-code", "wrong")

    assert flow.status == LoginStatus.FAILED
    assert isinstance(flow.error, InvalidStateError)
    http_client.post.assert_not_called()
    http_client.get.assert_not_called()
    assert session_store.get("fc_token_id") is None


def test_missing_state_is_a_mismatch(flow, http_client):
    flow.start("xyz")
    with pytest.raises(InvalidStateError):
        flow.handle_callback("the-code", None)
    http_client.post.assert_not_called()


def test_token_error_skips_user_info(flow, http_client):
    http_client.post.return_value = token_response(400, json={"error": "invalid_grant"})

    flow.start("xyz")
    with pytest.raises(TokenExchangeError):
        flow.handle_callback("the-code", "xyz")

    assert flow.status == LoginStatus.FAILED
    http_client.get.assert_not_called()


def test_transport_error_fails_flow(flow, http_client, token_payload):
    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.side_effect = httpx.ConnectError("reset")

    flow.start("xyz")
    with pytest.raises(TransportError):
        flow.handle_callback("the-code", "xyz")
    assert flow.status == LoginStatus.FAILED


def test_session_store_failure_fails_flow(engine, http_client, token_payload, userinfo_claims):
    class BrokenStore(InMemorySessionStore):
        def put(self, key, value):
            raise ConnectionError("redis down")

    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.return_value = userinfo_response(json=userinfo_claims)
    flow = LoginFlow(engine, BrokenStore())

    flow.start("xyz")
    with pytest.raises(ConnectionError):
        flow.handle_callback("the-code", "xyz")
    assert flow.status == LoginStatus.FAILED
    assert isinstance(flow.error, ConnectionError)


def test_missing_claim_stores_nothing(flow, http_client, session_store, token_payload, userinfo_claims):
    del userinfo_claims["email"]
    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.return_value = userinfo_response(json=userinfo_claims)

    flow.start("xyz")
    with pytest.raises(MissingClaimError):
        flow.handle_callback("the-code", "xyz")

    assert flow.status == LoginStatus.FAILED
    assert session_store.get("fc_token_id") is None


def test_failed_flow_is_not_resumable(flow, http_client):
    flow.start("xyz")
    with pytest.raises(InvalidStateError):
        flow.handle_callback("the-code", "wrong")

    with pytest.raises(FlowStateError):
        flow.handle_callback("the-code", "xyz")
    http_client.post.assert_not_called()


def test_completed_flow_rejects_second_callback(flow, http_client, token_payload, userinfo_claims):
    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.return_value = userinfo_response(json=userinfo_claims)
    flow.start("xyz")
    flow.handle_callback("the-code", "xyz")

    with pytest.raises(FlowStateError):
        flow.handle_callback("the-code", "xyz")


def test_callback_before_start(flow):
    with pytest.raises(FlowStateError):
        flow.handle_callback("the-code", "xyz")


def test_start_twice(flow):
    flow.start("xyz")
    with pytest.raises(FlowStateError):
        flow.start("abc")


def test_resumed_flow_completes(engine, http_client, session_store, token_payload, userinfo_claims):
    http_client.post.return_value = token_response(json=token_payload)
    http_client.get.return_value = userinfo_response(json=userinfo_claims)

    flow = LoginFlow.resume(engine, session_store, AuthorizationRequestState(state="persisted", nonce="n" * 22))
    assert flow.status == LoginStatus.AWAITING_CALLBACK

    user = flow.handle_callback("the-code", "persisted")
    assert user.token_id == "IDT1"


class TestOAuthService:
    def test_unknown_provider(self, oauth_service, session_store):
        with pytest.raises(ValueError, match="not registered"):
            oauth_service.begin_login("google", "xyz", session_store)

    def test_login_then_logout_round_trip(
        self, oauth_service, http_client, session_store, userinfo_claims
    ):
        http_client.post.return_value = token_response(json={"access_token": "AT", "id_token": "IDT1"})
        http_client.get.return_value = userinfo_response(json=userinfo_claims)

        flow = oauth_service.begin_login("franceconnect", "xyz", session_store)
        flow.handle_callback("the-code", "xyz")
        assert session_store.get("fc_token_id") == "IDT1"

        logout_url = oauth_service.generate_logout_url("franceconnect", session_store)
        assert "id_token_hint=IDT1" in logout_url
        params = parse_qs(urlparse(logout_url).query)
        assert params["id_token_hint"] == ["IDT1"]

    def test_logout_without_login_omits_hint(self, oauth_service, session_store):
        logout_url = oauth_service.generate_logout_url("franceconnect", session_store)
        assert "id_token_hint" not in logout_url
        assert "post_logout_redirect_uri=" in logout_url
