"""Tests for in-memory and Redis-backed session stores."""
from unittest.mock import Mock

import redis

from franceconnect.services.oauth import InMemorySessionStore, RedisSessionStore


def test_in_memory_put_get():
    store = InMemorySessionStore()
    assert store.get("fc_token_id") is None
    store.put("fc_token_id", "IDT1")
    assert store.get("fc_token_id") == "IDT1"


def test_in_memory_put_none_removes():
    store = InMemorySessionStore({"fc_token_id": "IDT1"})
    store.put("fc_token_id", None)
    assert store.get("fc_token_id") is None


def test_redis_store_namespaces_keys_and_sets_ttl():
    client = Mock(spec=redis.Redis)
    store = RedisSessionStore(client, "sid-1", ttl_seconds=120)

    store.put("fc_token_id", "IDT1")

    client.setex.assert_called_once_with("franceconnect:session:sid-1:fc_token_id", 120, "IDT1")


def test_redis_store_get():
    client = Mock(spec=redis.Redis)
    client.get.return_value = "IDT1"
    store = RedisSessionStore(client, "sid-1")

    assert store.get("fc_token_id") == "IDT1"
    client.get.assert_called_once_with("franceconnect:session:sid-1:fc_token_id")


def test_redis_store_put_none_deletes():
    client = Mock(spec=redis.Redis)
    store = RedisSessionStore(client, "sid-1")

    store.put("oauth_state", None)

    client.delete.assert_called_once_with("franceconnect:session:sid-1:oauth_state")
    client.setex.assert_not_called()


def test_redis_store_default_ttl_from_settings():
    from franceconnect.core.config import settings

    store = RedisSessionStore(Mock(spec=redis.Redis), "sid-1")
    assert store.ttl_seconds == settings.SESSION_TTL_SECONDS
