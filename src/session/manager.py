"""
Session manager — one interface over the Redis store and the in-process fallback.

Reads go to Redis first and fall back to the cache; writes go to Redis and
land in the cache only when Redis fails. Redis being unreachable is a
degraded mode, never an error the caller sees: every operation has a
defined fallback result.

Usage:
    manager = SessionManager(RedisSessionStore.from_config(settings.redis))
    session = await manager.load("CA123")
    session = await manager.update("CA123", SessionPatch(state=CallState.MAIN_MENU))
"""

from typing import Optional

from src.config import settings
from src.logging_context import get_call_logger
from src.schemas.session_schema import Session, SessionPatch, apply_patch
from src.session.cache import SessionCache
from src.session.store import RedisSessionStore, SessionStoreUnavailable
from src.utils import utcnow

logger = get_call_logger(__name__)


class SessionManager:
    """Read-through, write-through-with-fallback session access."""

    def __init__(
        self,
        store: Optional[RedisSessionStore],
        cache: Optional[SessionCache] = None,
        ttl_seconds: Optional[int] = None,
        default_language: Optional[str] = None,
    ) -> None:
        self._store = store
        self._cache = cache if cache is not None else SessionCache()
        self._ttl = ttl_seconds or settings.session.ttl_seconds
        self._default_language = default_language or settings.session.default_language

    @property
    def cache(self) -> SessionCache:
        return self._cache

    async def load(self, call_id: str) -> Session:
        """Return the call's session, creating and persisting a default one on a miss.

        A fallback entry written during an outage is newer than whatever Redis
        still holds for the call, so the more recently updated copy wins.
        """
        primary: Optional[Session] = None
        if self._store is not None:
            try:
                primary = await self._store.get_session(call_id)
            except SessionStoreUnavailable as exc:
                logger.warning("Redis unavailable on load, using memory fallback: %s", exc)

        fallback = await self._cache.get(call_id)
        if primary is not None and fallback is not None:
            return fallback if fallback.updated_at > primary.updated_at else primary
        if primary is not None:
            return primary
        if fallback is not None:
            return fallback

        logger.info("Creating new session for call %s", call_id)
        return await self.save(call_id, Session.new(call_id, self._default_language))

    async def save(self, call_id: str, session: Session) -> Session:
        """Persist ``session`` with a refreshed ``updated_at`` and return the stored copy."""
        session = session.model_copy(update={"call_id": call_id, "updated_at": utcnow()})

        if self._store is not None:
            try:
                await self._store.set_session(session, self._ttl)
            except SessionStoreUnavailable as exc:
                logger.warning("Redis unavailable on save, using memory fallback: %s", exc)
            else:
                await self._cache.delete(call_id)
                return session

        await self._cache.set(session)
        return session

    async def update(self, call_id: str, patch: SessionPatch) -> Session:
        """Load, merge the patch's set fields, save, and return the merged session."""
        session = await self.load(call_id)
        return await self.save(call_id, apply_patch(session, patch))

    async def delete(self, call_id: str) -> None:
        if self._store is not None:
            try:
                await self._store.delete_session(call_id)
            except SessionStoreUnavailable as exc:
                logger.warning("Redis unavailable for deletion: %s", exc)
        await self._cache.delete(call_id)

    async def extend(self, call_id: str, ttl_seconds: Optional[int] = None) -> None:
        """Refresh the Redis TTL without rewriting the record. Fallback entries need no extension."""
        if self._store is None:
            return
        try:
            await self._store.extend_session(call_id, ttl_seconds or self._ttl)
        except SessionStoreUnavailable as exc:
            logger.warning("Redis unavailable for session extension: %s", exc)

    async def active_session_count(self) -> int:
        return len(await self.list_active_session_ids())

    async def list_active_session_ids(self) -> list[str]:
        if self._store is not None:
            try:
                return await self._store.list_session_ids()
            except SessionStoreUnavailable as exc:
                logger.warning("Redis unavailable for session listing: %s", exc)
        return await self._cache.keys()

    async def is_primary_healthy(self) -> bool:
        if self._store is None:
            return False
        return await self._store.ping()

    async def sweep_expired_fallback(self, max_age_minutes: Optional[int] = None) -> int:
        """Remove fallback sessions idle longer than ``max_age_minutes``."""
        return await self._cache.sweep(max_age_minutes or settings.session.fallback_max_age_minutes)
