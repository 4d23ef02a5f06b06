"""Session stores consumed by the login flow.

The flow only needs ``get``/``put`` on a store already scoped to one user
session. Putting ``None`` removes the key.
"""
from __future__ import annotations

import logging
import ssl
from typing import Protocol

import redis

from franceconnect.core.config import settings

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str | None) -> None: ...


class InMemorySessionStore:
    """Dict-backed store for tests and single-process development."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str | None) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value


class RedisSessionStore:
    """Redis-backed store; one key per session entry, shared across workers."""

    def __init__(self, client: redis.Redis, session_id: str, ttl_seconds: int | None = None):
        self.client = client
        self.session_id = session_id
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL_SECONDS

    def _key(self, key: str) -> str:
        return f"franceconnect:session:{self.session_id}:{key}"

    def get(self, key: str) -> str | None:
        return self.client.get(self._key(key))

    def put(self, key: str, value: str | None) -> None:
        if value is None:
            self.client.delete(self._key(key))
            return
        self.client.setex(self._key(key), self.ttl_seconds, value)
        logger.debug(f"Stored session key {key} for session {self.session_id[:8]}")


_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client, with SSL for rediss:// URLs."""
    global _redis_client
    if _redis_client is None:
        ssl_options = {}
        if settings.REDIS_URL.startswith("rediss://"):
            ssl_options["ssl_cert_reqs"] = ssl.CERT_REQUIRED

        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            **ssl_options,
        )
    return _redis_client
