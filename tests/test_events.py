"""Tests for LogEvent and LogLevel."""

import logging

import pytest

from logrelay.events import LogEvent, LogLevel, MAX_LEVEL_NAME_LENGTH


class TestLogLevel:
    def test_symbols(self):
        assert LogLevel.DEBUG.symbol == "#"
        assert LogLevel.INFO.symbol == " "
        assert LogLevel.WARN.symbol == "!"
        assert LogLevel.ERROR.symbol == "-"

    def test_from_logging(self):
        assert LogLevel.from_logging(logging.DEBUG) is LogLevel.DEBUG
        assert LogLevel.from_logging(logging.INFO) is LogLevel.INFO
        assert LogLevel.from_logging(logging.WARNING) is LogLevel.WARN
        assert LogLevel.from_logging(logging.ERROR) is LogLevel.ERROR
        assert LogLevel.from_logging(logging.CRITICAL) is LogLevel.ERROR
        assert LogLevel.from_logging(5) is LogLevel.DEBUG

    def test_parse_aliases(self):
        assert LogLevel.parse("warning") is LogLevel.WARN
        assert LogLevel.parse(" Critical ") is LogLevel.ERROR
        assert LogLevel.parse("debug") is LogLevel.DEBUG

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            LogLevel.parse("verbose")

    def test_max_name_length(self):
        assert MAX_LEVEL_NAME_LENGTH == 5


class TestLogEvent:
    def test_identity_semantics(self, make_event):
        """Two identical-looking lines are still two distinct events."""
        a = make_event("same")
        b = make_event("same")
        assert a != b
        assert len({a, b}) == 2
        assert a == a

    def test_with_message_keeps_everything_else(self, make_event):
        error = RuntimeError("boom")
        event = make_event("original", level=LogLevel.ERROR, error=error)
        copy = event.with_message("changed")

        assert copy is not event
        assert copy.message == "changed"
        assert copy.error is error
        assert copy.level is LogLevel.ERROR
        assert copy.timestamp == event.timestamp
        assert event.message == "original"

    def test_continuation_drops_error(self, make_event):
        event = make_event("head", error=RuntimeError("boom"))
        tail = event.continuation("tail")
        assert tail.error is None
        assert tail.logger == event.logger
        assert tail.timestamp == event.timestamp

    def test_is_empty(self, make_event):
        assert make_event(None).is_empty
        assert make_event("").is_empty
        assert not make_event("x").is_empty
        assert not make_event(None, error="trace").is_empty

    def test_timestamp_defaults_to_now(self):
        event = LogEvent(logger="app", level=LogLevel.INFO, message="x")
        assert event.timestamp > 1_600_000_000_000

    def test_frozen(self, make_event):
        event = make_event()
        with pytest.raises(AttributeError):
            event.message = "mutated"

    def test_repr_truncates(self, make_event):
        text = repr(make_event("x" * 500))
        assert "message[500]" in text
        assert len(text) < 200
        assert "message[]=None" in repr(make_event(None))
