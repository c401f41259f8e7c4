"""
Session Store Implementations.

Provides backends for SessionBackend:
- InMemorySessionBackend: For development/testing
- RedisSessionBackend: For production (distributed, expiring)

Both serialize values to JSON, so callers only ever see copies of
what they stored.
"""

import json
import logging
from typing import Optional, Any, Dict

from storefront_account.ports.session import SessionBackend, SessionStore

logger = logging.getLogger("storefront_account.infrastructure.adapters.session")


# ═══════════════════════════════════════════════════════════════
# IN-MEMORY BACKEND (Development/Testing)
# ═══════════════════════════════════════════════════════════════


class InMemorySessionStore(SessionStore):
    """
    One session's view of an InMemorySessionBackend.

    The backend holds an entry for the session only while it has keys:
    reads never create one, and deleting the last key removes it.
    """

    def __init__(self, sessions: Dict[str, Dict[str, str]], session_id: str):
        self._sessions = sessions
        self._session_id = session_id

    @property
    def session_id(self) -> str:
        return self._session_id

    async def get(self, key: str) -> Optional[Any]:
        raw = self._sessions.get(self._session_id, {}).get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        data = self._sessions.setdefault(self._session_id, {})
        data[key] = json.dumps(value)
        logger.debug(f"Session {self._session_id}: set {key}")

    async def delete(self, key: str) -> None:
        data = self._sessions.get(self._session_id)
        if data is None:
            return
        data.pop(key, None)
        if not data:
            del self._sessions[self._session_id]
        logger.debug(f"Session {self._session_id}: deleted {key}")

    async def clear(self) -> None:
        self._sessions.pop(self._session_id, None)
        logger.debug(f"Session {self._session_id}: cleared")


class InMemorySessionBackend(SessionBackend):
    """
    In-memory implementation of SessionBackend.

    Suitable for development and testing. Sessions are lost on restart
    and not shared between processes. Entries never expire
    (``session.ttl_seconds`` is only honoured by the Redis backend); an
    entry lives until its session logs out or deletes its last key.

    Usage:
        backend = InMemorySessionBackend()
        session = backend.scope("cookie-value")
        await session.set("user", {"id": "u1"})
    """

    def __init__(self):
        self._sessions: Dict[str, Dict[str, str]] = {}

    def scope(self, session_id: str) -> InMemorySessionStore:
        return InMemorySessionStore(self._sessions, session_id)

    @property
    def session_count(self) -> int:
        """Number of sessions currently holding data."""
        return len(self._sessions)

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        self._sessions.clear()


# ═══════════════════════════════════════════════════════════════
# REDIS BACKEND (Production - Distributed)
# ═══════════════════════════════════════════════════════════════


class RedisSessionStore(SessionStore):
    """
    One session stored as a Redis hash.

    Every write refreshes the hash's TTL so an active session does not
    expire mid-flow.
    """

    def __init__(self, redis_client: Any, key: str, session_id: str, ttl_seconds: int):
        self._redis = redis_client
        self._key = key
        self._session_id = session_id
        self._ttl = ttl_seconds

    @property
    def session_id(self) -> str:
        return self._session_id

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._redis.hget(self._key, key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self._redis.hset(self._key, key, json.dumps(value))
        await self._redis.expire(self._key, self._ttl)
        logger.debug(f"Redis session {self._session_id}: set {key}")

    async def delete(self, key: str) -> None:
        await self._redis.hdel(self._key, key)
        logger.debug(f"Redis session {self._session_id}: deleted {key}")

    async def clear(self) -> None:
        await self._redis.delete(self._key)
        logger.debug(f"Redis session {self._session_id}: cleared")


class RedisSessionBackend(SessionBackend):
    """
    Redis implementation of SessionBackend.

    Requires: redis[hiredis]

    Usage:
        import redis.asyncio as redis

        client = redis.Redis.from_url("redis://localhost:6379")
        backend = RedisSessionBackend(client, prefix="storefront:session:")
    """

    def __init__(
        self,
        redis_client: Any,  # redis.asyncio.Redis
        prefix: str = "storefront:session:",
        ttl_seconds: int = 86400,
    ):
        self._redis = redis_client
        self._prefix = prefix
        self._ttl = ttl_seconds

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSessionBackend":
        import redis.asyncio as redis

        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _session_key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def scope(self, session_id: str) -> RedisSessionStore:
        return RedisSessionStore(
            self._redis, self._session_key(session_id), session_id, self._ttl
        )


__all__ = [
    "InMemorySessionStore",
    "InMemorySessionBackend",
    "RedisSessionStore",
    "RedisSessionBackend",
]
