"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from fnmatch import fnmatch
from typing import Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.conversation.dialog_engine import DialogEngine
from src.conversation.interpreter import InputInterpreter
from src.schemas.session_schema import Session
from src.session.cache import SessionCache
from src.session.manager import SessionManager
from src.session.store import RedisSessionStore
from src.telephony.twiml import TwiMLRenderer
from src.tools.booking import InMemoryBookingRepository
from src.voice_bot import VoiceBot

# A Wednesday.
FIXED_TODAY = date(2026, 10, 21)


class FakeRedisClient:
    """Minimal in-memory stand-in for ``redis.asyncio.Redis``.

    Set ``down = True`` to make every command raise a Redis ConnectionError.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.down = False

    def _check(self) -> None:
        if self.down:
            raise RedisConnectionError("Connection refused")

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def set(self, key: str, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.ttls.pop(key, None)
        return True

    async def get(self, key: str) -> Optional[str]:
        self._check()
        return self.data.get(key)

    async def delete(self, key: str) -> int:
        self._check()
        self.ttls.pop(key, None)
        return 1 if self.data.pop(key, None) is not None else 0

    async def expire(self, key: str, ttl: int) -> bool:
        self._check()
        if key not in self.data:
            return False
        self.ttls[key] = ttl
        return True

    async def scan_iter(self, match: Optional[str] = None):
        self._check()
        for key in list(self.data):
            if match is None or fnmatch(key, match):
                yield key

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        return None


class FakeClassifier:
    """Records calls and returns a canned label (or raises)."""

    def __init__(self, label: str = "unknown", error: Optional[Exception] = None) -> None:
        self.label = label
        self.error = error
        self.calls: list[str] = []

    async def classify(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.label


@pytest.fixture
def fake_redis():
    return FakeRedisClient()


@pytest.fixture
def session_store(fake_redis):
    return RedisSessionStore(fake_redis, operation_timeout_sec=1.0)


@pytest.fixture
def session_cache():
    return SessionCache()


@pytest.fixture
def session_manager(session_store, session_cache):
    return SessionManager(session_store, session_cache, ttl_seconds=3600, default_language="english")


@pytest.fixture
def bookings():
    return InMemoryBookingRepository()


@pytest.fixture
def engine(bookings):
    return DialogEngine(bookings=bookings, retry_threshold=2, today=lambda: FIXED_TODAY)


@pytest.fixture
def interpreter():
    return InputInterpreter()


@pytest.fixture
def bot(session_manager, engine, interpreter):
    return VoiceBot(
        sessions=session_manager,
        interpreter=interpreter,
        engine=engine,
        renderer=TwiMLRenderer(),
    )


def make_session(call_id: str = "CA-TEST-001", **overrides) -> Session:
    """Helper to create a Session with sensible defaults."""
    fields = {"call_id": call_id, "language": "english"}
    fields.update(overrides)
    return Session(**fields)


def minutes_ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)
