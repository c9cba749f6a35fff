"""Background task that periodically reclaims stale fallback sessions."""

import asyncio
import logging
from typing import Optional

from src.config import settings
from src.session.manager import SessionManager

logger = logging.getLogger(__name__)


class FallbackSweeper:
    """Runs ``SessionManager.sweep_expired_fallback`` on a fixed interval."""

    def __init__(
        self,
        manager: SessionManager,
        interval_sec: Optional[float] = None,
        max_age_minutes: Optional[int] = None,
    ) -> None:
        self._manager = manager
        self._interval = interval_sec or settings.session.fallback_sweep_interval_sec
        self._max_age = max_age_minutes or settings.session.fallback_max_age_minutes
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="fallback-session-sweeper")
        logger.info(
            "Fallback sweeper started (every %.0fs, max age %d min)",
            self._interval, self._max_age,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Fallback sweeper stopped")

    async def sweep_once(self) -> int:
        return await self._manager.sweep_expired_fallback(self._max_age)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("Fallback sweep failed; retrying next interval")
