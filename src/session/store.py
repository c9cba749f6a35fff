"""
Redis-backed primary session store.

Thin keyed-expiry wrapper over ``redis.asyncio``. Every command is bounded
by the configured operation timeout; connection errors, Redis errors and
timeouts all surface as ``SessionStoreUnavailable`` so the session manager
can switch to its in-process fallback.

Usage:
    store = RedisSessionStore.from_config(settings.redis)
    await store.set_session(session, ttl_seconds=3600)
    session = await store.get_session("CA123")
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from src.config import RedisConfig
from src.schemas.session_schema import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_KEY_PREFIX = "session:"


class SessionStoreUnavailable(Exception):
    """The primary store could not complete an operation."""


def session_key(call_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{call_id}"


class RedisSessionStore:
    """Keyed-expiry store for session JSON records."""

    def __init__(self, client: Any, operation_timeout_sec: float = 5.0) -> None:
        self._client = client
        self._timeout = operation_timeout_sec

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisSessionStore":
        """Build a store with its own connection pool. No connection is made yet."""
        logger.info("Creating Redis session store for %s", _redact(config.get_redis_url()))
        client = redis.Redis.from_url(
            config.get_redis_url(),
            socket_timeout=config.socket_timeout_sec,
            socket_connect_timeout=config.connect_timeout_sec,
            decode_responses=True,
        )
        return cls(client, operation_timeout_sec=config.operation_timeout_sec)

    async def _run(self, op: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise SessionStoreUnavailable(f"Redis {op} timed out after {self._timeout}s") from exc
        except (RedisError, OSError) as exc:
            raise SessionStoreUnavailable(f"Redis {op} failed: {exc}") from exc

    # --- Generic keyed-expiry operations ---

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        if ttl_seconds:
            await self._run("SETEX", self._client.setex(key, ttl_seconds, value))
        else:
            await self._run("SET", self._client.set(key, value))

    async def get(self, key: str) -> Optional[str]:
        return await self._run("GET", self._client.get(key))

    async def delete(self, key: str) -> None:
        await self._run("DEL", self._client.delete(key))

    async def expire(self, key: str, ttl_seconds: int) -> None:
        await self._run("EXPIRE", self._client.expire(key, ttl_seconds))

    async def keys(self, prefix: str) -> list[str]:
        """All keys starting with ``prefix``. Uses SCAN so large keyspaces don't block Redis."""

        async def _scan() -> list[str]:
            return [key async for key in self._client.scan_iter(match=f"{prefix}*")]

        return await self._run("SCAN", _scan())

    async def ping(self) -> bool:
        """True when Redis answers PING. Never raises."""
        try:
            return bool(await self._run("PING", self._client.ping()))
        except SessionStoreUnavailable as exc:
            logger.warning("Redis PING failed: %s", exc)
            return False

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as exc:
            logger.error("Error closing Redis client: %s", exc)

    # --- Session records ---

    async def get_session(self, call_id: str) -> Optional[Session]:
        """Stored session, or None on a miss or an unreadable record."""
        raw = await self.get(session_key(call_id))
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Discarding corrupt session record for %s: %s", call_id, exc)
            return None

    async def set_session(self, session: Session, ttl_seconds: int) -> None:
        await self.set(session_key(session.call_id), session.model_dump_json(), ttl_seconds)

    async def delete_session(self, call_id: str) -> None:
        await self.delete(session_key(call_id))

    async def extend_session(self, call_id: str, ttl_seconds: int) -> None:
        await self.expire(session_key(call_id), ttl_seconds)

    async def list_session_ids(self) -> list[str]:
        keys = await self.keys(SESSION_KEY_PREFIX)
        return [key[len(SESSION_KEY_PREFIX):] for key in keys]


def _redact(url: str) -> str:
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"
