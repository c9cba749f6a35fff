"""Tests for the background fallback sweeper."""

import asyncio

import pytest

from src.session.sweeper import FallbackSweeper
from tests.conftest import make_session, minutes_ago


class TestFallbackSweeper:
    @pytest.mark.asyncio
    async def test_sweep_once(self, session_manager, session_cache):
        await session_cache.set(make_session("old", updated_at=minutes_ago(61)))
        sweeper = FallbackSweeper(session_manager, interval_sec=60, max_age_minutes=60)
        assert await sweeper.sweep_once() == 1
        assert await session_cache.count() == 0

    @pytest.mark.asyncio
    async def test_background_loop_sweeps(self, session_manager, session_cache):
        await session_cache.set(make_session("old", updated_at=minutes_ago(120)))
        sweeper = FallbackSweeper(session_manager, interval_sec=0.01, max_age_minutes=60)
        sweeper.start()
        try:
            for _ in range(100):
                if await session_cache.count() == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()
        assert await session_cache.count() == 0

    @pytest.mark.asyncio
    async def test_start_stop(self, session_manager):
        sweeper = FallbackSweeper(session_manager, interval_sec=60, max_age_minutes=60)
        assert not sweeper.running
        sweeper.start()
        assert sweeper.running
        await sweeper.stop()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self, session_manager):
        sweeper = FallbackSweeper(session_manager, interval_sec=60, max_age_minutes=60)
        sweeper.start()
        first = sweeper._task
        sweeper.start()
        assert sweeper._task is first
        await sweeper.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, session_manager):
        await FallbackSweeper(session_manager, interval_sec=60).stop()  # should not raise

    @pytest.mark.asyncio
    async def test_loop_survives_sweep_errors(self, session_manager):
        calls = []

        async def _failing_sweep(max_age_minutes=None):
            calls.append(max_age_minutes)
            raise RuntimeError("boom")

        session_manager.sweep_expired_fallback = _failing_sweep
        sweeper = FallbackSweeper(session_manager, interval_sec=0.01, max_age_minutes=60)
        sweeper.start()
        try:
            for _ in range(100):
                if len(calls) >= 2:
                    break
                await asyncio.sleep(0.01)
            assert sweeper.running
        finally:
            await sweeper.stop()
        assert len(calls) >= 2
