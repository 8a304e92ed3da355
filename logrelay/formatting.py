"""Turning a LogEvent into the text of one channel line.

The formatted line is ``prefix + message + suffix`` followed by an optional
error dump on the next lines. Clipping only ever cuts the message part, so
everything else counts as fixed overhead (see ``overhead_length``).
"""

import re
import traceback
from datetime import datetime, timezone
from typing import Callable

from .config import RelayConfig
from .events import MAX_LEVEL_NAME_LENGTH, LogEvent

_COLOR_RE = re.compile(r"\x1b\[[\d;]*m")

_FENCE = "```"
# Zero-width spaces keep a literal ``` inside a message from closing the block.
_BROKEN_FENCE = "`\u200b`\u200b`\u200b"


def strip_colors(text: str) -> str:
    """Remove ANSI colour escape codes."""
    return _COLOR_RE.sub("", text)


def format_error(error, limit: int) -> str:
    """Render an exception (with traceback) or error string, capped at ``limit`` chars."""
    if isinstance(error, BaseException):
        text = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    else:
        text = str(error)
    text = text.rstrip("\n")
    if limit > 0 and len(text) > limit:
        text = text[: limit - 1] + "…"
    return text


def _render_message(text: str, config: RelayConfig) -> str:
    if config.use_code_blocks:
        return text.replace(_FENCE, _BROKEN_FENCE)
    if config.markdown_escaper is not None:
        return config.markdown_escaper(text)
    return text


def format_event(event: LogEvent, config: RelayConfig) -> str:
    """Human-readable line for ``event``."""
    parts = []
    if config.prefixer is not None:
        parts.append(config.prefixer(event))
    if event.message is not None:
        parts.append(_render_message(event.message, config))
    if config.suffixer is not None:
        parts.append(config.suffixer(event))
    if event.error is not None:
        parts.append("\n")
        parts.append(_render_message(format_error(event.error, config.trace_limit), config))
    return "".join(parts)


def formatted_length(event: LogEvent, config: RelayConfig) -> int:
    return len(format_event(event, config))


def overhead_length(event: LogEvent, config: RelayConfig) -> int:
    """Formatted length not accounted for by the raw message characters."""
    return formatted_length(event, config) - len(event.message or "")


# ════════════════════════════════════════════════════════
# PREFIX BUILDER
# ════════════════════════════════════════════════════════

def _utc(event: LogEvent) -> datetime:
    return datetime.fromtimestamp(event.timestamp / 1000, tz=timezone.utc)


class PrefixBuilder:
    """Fluent builder for prefixer/suffixer functions.

    Usage:
        config.prefixer = (
            PrefixBuilder(config)
            .date().space().time_12h().space()
            .text("[").level_padded().space().logger().text("] ")
            .build()
        )

    Timestamps are rendered in UTC.
    """

    def __init__(self, config: RelayConfig):
        self._config = config
        self._parts: list[Callable[[LogEvent], str]] = []

    def _add(self, fn: Callable[[LogEvent], str]) -> "PrefixBuilder":
        self._parts.append(fn)
        return self

    def text(self, value: str) -> "PrefixBuilder":
        return self._add(lambda _e: value)

    def space(self) -> "PrefixBuilder":
        return self.text(" ")

    def level(self) -> "PrefixBuilder":
        return self._add(lambda e: e.level.name)

    def level_padded(self) -> "PrefixBuilder":
        return self._add(lambda e: e.level.name.ljust(MAX_LEVEL_NAME_LENGTH))

    def logger(self) -> "PrefixBuilder":
        return self._add(lambda e: self._config.resolve_logger_name(e.logger) or e.logger)

    def logger_padded(self, width: int = 12) -> "PrefixBuilder":
        return self._add(lambda e: (self._config.resolve_logger_name(e.logger) or e.logger).ljust(width))

    def timestamp(self, fmt: str) -> "PrefixBuilder":
        """Event time rendered with a ``strftime`` format."""
        return self._add(lambda e: _utc(e).strftime(fmt))

    def time_12h(self) -> "PrefixBuilder":
        return self._add(lambda e: _utc(e).strftime("%I:%M:%S %p").lstrip("0"))

    def time_24h(self) -> "PrefixBuilder":
        return self._add(lambda e: f"{_utc(e).hour}:{_utc(e):%M:%S}")

    def date(self) -> "PrefixBuilder":
        return self.timestamp("%m/%d")

    def date_with_year(self) -> "PrefixBuilder":
        return self.timestamp("%m/%d/%Y")

    def build(self) -> Callable[[LogEvent], str]:
        parts = tuple(self._parts)

        def render(event: LogEvent) -> str:
            return "".join(part(event) for part in parts)

        return render

