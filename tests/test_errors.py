"""Tests for describe_error()."""

import asyncio

import httpx

from logrelay.errors import (
    ClippingExhaustedError,
    ContentBlockedError,
    MessageNotFoundError,
    PackingImpossibleError,
    RelayError,
    SinkError,
    describe_error,
)


# ── Relay exceptions ────────────────────────────────────────

class TestRelayErrors:
    def test_hierarchy(self):
        assert issubclass(MessageNotFoundError, SinkError)
        assert issubclass(ContentBlockedError, SinkError)
        assert issubclass(SinkError, RelayError)
        assert issubclass(ClippingExhaustedError, RelayError)

    def test_clipping(self):
        assert "too long" in describe_error(ClippingExhaustedError("x"))

    def test_packing(self):
        assert "empty message" in describe_error(PackingImpossibleError("x"))

    def test_not_found(self):
        assert "vanished" in describe_error(MessageNotFoundError("x"))

    def test_blocked(self):
        assert "stripping links" in describe_error(ContentBlockedError("x"))

    def test_sink(self):
        assert describe_error(SinkError("HTTP 500")) == "Channel rejected the message: HTTP 500"


# ── Transport errors ────────────────────────────────────────

class TestTransportErrors:
    def test_connect(self):
        request = httpx.Request("POST", "https://discord.com/api/webhooks/1/t")
        assert "connect" in describe_error(httpx.ConnectError("refused", request=request))

    def test_timeout(self):
        assert "timed out" in describe_error(httpx.ReadTimeout("slow"))
        assert "timed out" in describe_error(asyncio.TimeoutError())


# ── Everything else ─────────────────────────────────────────

class TestFallback:
    def test_value_error_passes_message(self):
        assert describe_error(ValueError("No channel configured")) == "No channel configured"

    def test_unknown(self):
        msg = describe_error(KeyError("x"))
        assert "KeyError" in msg
