"""Log event record and level enum."""

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union


class LogLevel(Enum):
    """Relay log levels, each carrying the diff-style line marker."""

    DEBUG = "#"
    INFO = " "
    WARN = "!"
    ERROR = "-"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_logging(cls, levelno: int) -> "LogLevel":
        """Map a stdlib ``logging`` level number onto a relay level."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG

    @classmethod
    def parse(cls, name: str) -> "LogLevel":
        """Parse a level name, accepting ``WARNING`` and ``CRITICAL`` aliases."""
        key = name.strip().upper()
        aliases = {"WARNING": "WARN", "CRITICAL": "ERROR", "FATAL": "ERROR"}
        key = aliases.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None


MAX_LEVEL_NAME_LENGTH = max(len(level.name) for level in LogLevel)


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, eq=False)
class LogEvent:
    """One loggable line from the application.

    Events compare and hash by identity: two lines with identical text are
    still two lines.
    """
    logger: str
    level: LogLevel
    message: Optional[str] = None
    error: Union[BaseException, str, None] = None
    timestamp: int = field(default_factory=_now_millis)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to show (no message and no error)."""
        return not self.message and self.error is None

    def with_message(self, message: Optional[str]) -> "LogEvent":
        """Copy of this event with a different message."""
        return replace(self, message=message)

    def continuation(self, message: str) -> "LogEvent":
        """Overflow piece: same logger/level/timestamp, no error payload."""
        return replace(self, message=message, error=None)

    def __repr__(self) -> str:
        if self.message is None:
            shown = "message[]=None"
        else:
            shown = f"message[{len(self.message)}]={self.message[:100]!r}"
        return f"LogEvent(logger={self.logger!r}, level={self.level.name}, {shown})"
