"""Adapters feeding application output into a ChannelRelay.

Usage::

    relay.attach_logging()                      # stdlib logging, root logger
    out = relay.attach_stream(sys.stdout, "stdout")
    with contextlib.redirect_stdout(out):       # host opts in explicitly
        print("relayed and still printed")

Adapters only ever call ``relay.enqueue``, so they are safe from any thread.
"""

import io
import logging
import threading

from .events import LogEvent, LogLevel
from .formatting import strip_colors

# Records from these namespaces never reach the relay: the relay's own
# diagnostics, and the HTTP clients the sinks deliver through (their request
# logs fire on every delivery and carry bot/webhook tokens in the URL).
IGNORED_NAMESPACES = ("logrelay", "httpx", "httpcore", "telegram")


def _is_ignored_record(name: str) -> bool:
    return any(name == ns or name.startswith(ns + ".") for ns in IGNORED_NAMESPACES)


class LoggingAdapter(logging.Handler):
    """``logging.Handler`` turning log records into relay events.

    Records from ``IGNORED_NAMESPACES`` are skipped, so neither a failing
    flush nor the delivery requests themselves feed back into the channel.
    """

    def __init__(self, relay, level: int = logging.NOTSET):
        super().__init__(level=level)
        self._relay = relay

    def to_event(self, record: logging.LogRecord) -> LogEvent:
        error = record.exc_info[1] if record.exc_info else None
        return LogEvent(
            logger=record.name,
            level=LogLevel.from_logging(record.levelno),
            message=strip_colors(record.getMessage()),
            error=error,
            timestamp=int(record.created * 1000),
        )

    def emit(self, record: logging.LogRecord) -> None:
        if _is_ignored_record(record.name):
            return
        try:
            self._relay.enqueue(self.to_event(record))
        except Exception:
            self.handleError(record)


class StreamAdapter(io.TextIOBase):
    """Text stream wrapper relaying each completed line.

    Everything written is passed through to the wrapped stream (if any);
    complete lines are also enqueued with a fixed logger name and level.
    """

    def __init__(self, relay, stream, logger_name: str, level: LogLevel = LogLevel.INFO):
        super().__init__()
        self._relay = relay
        self._stream = stream
        self.logger_name = logger_name
        self.level = level
        self._pending = ""
        self._lock = threading.Lock()
        self._relaying = True

    @property
    def encoding(self):
        return getattr(self._stream, "encoding", "utf-8")

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return self._stream is not None and self._stream.isatty()

    def write(self, s: str) -> int:
        if self._stream is not None:
            self._stream.write(s)
        if not self._relaying:
            return len(s)

        with self._lock:
            *lines, self._pending = (self._pending + s).split("\n")
        for line in lines:
            self._enqueue(line)
        return len(s)

    def _enqueue(self, line: str):
        self._relay.enqueue(LogEvent(
            logger=self.logger_name,
            level=self.level,
            message=strip_colors(line.rstrip("\r")),
        ))

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()

    def release(self):
        """Relay any unterminated line and stop relaying (pass-through continues)."""
        with self._lock:
            pending, self._pending = self._pending, ""
            self._relaying = False
        if pending:
            self._enqueue(pending)
