"""Pytest configuration and shared fixtures."""

import pytest

from logrelay.config import RelayConfig
from logrelay.events import LogEvent, LogLevel
from logrelay.sinks import ChannelSink


class RecordingSink(ChannelSink):
    """In-memory channel that records every call.

    Exceptions put in ``failures`` are raised by the next send/edit calls,
    one per call, in order.
    """

    def __init__(self, max_message_length: int = 2000):
        self.max_message_length = max_message_length
        self.calls = []  # (op, handle, body)
        self.messages = {}  # handle -> body
        self.failures = []
        self.link_previews = []
        self._next_id = 1

    async def send(self, body, *, link_previews=True):
        self.calls.append(("send", None, body))
        self.link_previews.append(link_previews)
        if self.failures:
            raise self.failures.pop(0)
        handle = self._next_id
        self._next_id += 1
        self.messages[handle] = body
        return handle

    async def edit(self, handle, body, *, link_previews=True):
        self.calls.append(("edit", handle, body))
        self.link_previews.append(link_previews)
        if self.failures:
            raise self.failures.pop(0)
        self.messages[handle] = body
        return handle

    @property
    def ops(self):
        return [op for op, _, _ in self.calls]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_sink():
    """Factory for recording sinks with a custom message limit."""
    return RecordingSink


@pytest.fixture
def config():
    return RelayConfig()


@pytest.fixture
def make_event():
    """Factory for events with a fixed timestamp."""
    def _make(message="hello", level=LogLevel.INFO, logger="app", error=None, timestamp=1_700_000_000_000):
        return LogEvent(logger=logger, level=level, message=message, error=error, timestamp=timestamp)
    return _make
