"""Tests for the per-call logging context."""

import logging

from src.logging_context import (
    NO_CALL_ID,
    CallIdFilter,
    call_context,
    get_call_id,
    get_call_logger,
)


def _record():
    return logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)


class TestCallContext:
    def test_default_call_id(self):
        assert get_call_id() == NO_CALL_ID

    def test_context_binds_and_restores(self):
        with call_context("CA1"):
            assert get_call_id() == "CA1"
            with call_context("CA2"):
                assert get_call_id() == "CA2"
            assert get_call_id() == "CA1"
        assert get_call_id() == NO_CALL_ID


class TestCallIdFilter:
    def test_filter_stamps_record(self):
        record = _record()
        with call_context("CA1"):
            assert CallIdFilter().filter(record)
        assert record.call_id == "CA1"

    def test_filter_keeps_existing_value(self):
        record = _record()
        record.call_id = "CA-EXPLICIT"
        with call_context("CA1"):
            CallIdFilter().filter(record)
        assert record.call_id == "CA-EXPLICIT"

    def test_call_logger_gets_one_filter(self):
        logger = get_call_logger("tests.call_logger")
        get_call_logger("tests.call_logger")
        assert sum(isinstance(f, CallIdFilter) for f in logger.filters) == 1
