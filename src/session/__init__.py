from src.session.cache import SessionCache
from src.session.manager import SessionManager
from src.session.store import RedisSessionStore, SessionStoreUnavailable, session_key
from src.session.sweeper import FallbackSweeper

__all__ = [
    "SessionManager",
    "SessionCache",
    "RedisSessionStore",
    "SessionStoreUnavailable",
    "FallbackSweeper",
    "session_key",
]
