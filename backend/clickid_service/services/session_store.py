"""Browser-session storage backends.

A session is a small JSON-serialisable dict keyed by the id carried in the
session cookie. ``memory`` keeps sessions in-process (single worker, tests);
``redis`` shares them across workers.
"""

import json
import logging
import re
import secrets
import time
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from clickid_service.core.config import Settings

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "clickid:session:"
SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{20,128}$")

# Backend outages: redis errors plus socket-level failures
SESSION_STORE_ERRORS = (RedisError, OSError)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def is_valid_session_id(session_id: str | None) -> bool:
    return bool(session_id) and bool(SESSION_ID_PATTERN.match(session_id))


class SessionStore(Protocol):
    async def load(self, session_id: str) -> dict[str, Any]: ...

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None: ...

    async def delete(self, session_id: str) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class MemorySessionStore:
    """Process-local store with per-session expiry."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[float, dict[str, Any]]] = {}

    async def load(self, session_id: str) -> dict[str, Any]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return {}
        expires_at, data = entry
        if time.time() >= expires_at:
            del self._sessions[session_id]
            return {}
        return dict(data)

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        now = time.time()
        self._purge_expired(now)
        self._sessions[session_id] = (now + ttl, dict(data))

    def _purge_expired(self, now: float) -> None:
        expired = [sid for sid, (expires_at, _) in self._sessions.items() if now >= expires_at]
        for sid in expired:
            del self._sessions[sid]

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._sessions.clear()


class RedisSessionStore:
    """Sessions as JSON strings under ``clickid:session:{id}`` with SET EX."""

    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisSessionStore":
        return cls(aioredis.from_url(url, decode_responses=True))

    async def load(self, session_id: str) -> dict[str, Any]:
        raw = await self._redis.get(SESSION_KEY_PREFIX + session_id)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt session payload for %s", session_id[:8])
            return {}
        return data if isinstance(data, dict) else {}

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        await self._redis.set(SESSION_KEY_PREFIX + session_id, json.dumps(data), ex=ttl)

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(SESSION_KEY_PREFIX + session_id)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self._redis.aclose()


def build_session_store(settings: Settings) -> SessionStore:
    if settings.SESSION_BACKEND == "redis":
        return RedisSessionStore.from_url(settings.REDIS_URL)
    if settings.SESSION_BACKEND != "memory":
        logger.warning("Unknown SESSION_BACKEND %r, using memory", settings.SESSION_BACKEND)
    return MemorySessionStore()
