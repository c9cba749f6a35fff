"""
In-process fallback session cache.

Used only while Redis is unreachable. Entries never expire on their own;
``sweep`` is the only reclamation path and is driven by the
FallbackSweeper on a timer.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from src.schemas.session_schema import Session
from src.utils import utcnow

logger = logging.getLogger(__name__)


class SessionCache:
    """Lock-guarded mapping of call ID to Session. Each operation is atomic."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def get(self, call_id: str) -> Optional[Session]:
        async with self._lock:
            session = self._sessions.get(call_id)
            return session.model_copy(deep=True) if session is not None else None

    async def set(self, session: Session) -> None:
        async with self._lock:
            self._sessions[session.call_id] = session.model_copy(deep=True)

    async def delete(self, call_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(call_id, None) is not None

    async def keys(self) -> list[str]:
        async with self._lock:
            return list(self._sessions.keys())

    async def count(self) -> int:
        async with self._lock:
            return len(self._sessions)

    async def sweep(self, max_age_minutes: int) -> int:
        """Drop entries not updated within ``max_age_minutes``. Returns how many were removed."""
        cutoff = utcnow() - timedelta(minutes=max_age_minutes)
        async with self._lock:
            expired = [cid for cid, s in self._sessions.items() if s.updated_at < cutoff]
            for call_id in expired:
                del self._sessions[call_id]
        if expired:
            logger.info("Swept %d stale fallback session(s)", len(expired))
        return len(expired)
