"""Call ID logging context for tracing a single call across turns.

Every webhook turn for a call carries the telephony call identifier. Binding
it here makes every log line emitted while handling that turn carry the
same ID, so a caller's path through the menu can be followed in the logs.

Usage:
    from src.logging_context import call_context, get_call_logger

    logger = get_call_logger(__name__)
    with call_context("CA1234"):
        logger.info("Processing turn")  # record.call_id == "CA1234"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_CALL_ID = "-"

_call_id: ContextVar[str] = ContextVar("call_id", default=NO_CALL_ID)


def get_call_id() -> str:
    """Retrieve the current call ID."""
    return _call_id.get()


@contextmanager
def call_context(call_id: str) -> Iterator[None]:
    """Bind ``call_id`` for the duration of one turn, restoring the previous value."""
    token = _call_id.set(call_id)
    try:
        yield
    finally:
        _call_id.reset(token)


class CallIdFilter(logging.Filter):
    """Injects call_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "call_id"):
            record.call_id = _call_id.get()  # type: ignore[attr-defined]
        return True


def install_call_id_filter() -> None:
    """Attach the filter to the root handlers.

    Handler-level filters also see records propagated from third-party
    loggers (uvicorn, redis), so ``%(call_id)s`` never fails to format.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CallIdFilter) for f in handler.filters):
            handler.addFilter(CallIdFilter())


def get_call_logger(name: str) -> logging.Logger:
    """Return a logger with the CallIdFilter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, CallIdFilter) for f in logger.filters):
        logger.addFilter(CallIdFilter())
    return logger
