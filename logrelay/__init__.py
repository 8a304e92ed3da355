"""logrelay — batch application logs into size-limited chat channel messages.

This package is the single source of truth for the relay:
- Events: LogEvent, LogLevel
- Config: RelayConfig, PrefixBuilder, environment settings
- Relay: filtering, clipping, packing, rendering, delivery, scheduling
- Adapters: stdlib logging handler, stream wrapper
- Sinks: Telegram (python-telegram-bot), Discord webhook (httpx)
"""

__version__ = "0.3.0"

from .config import RelayConfig, RelaySettings, load_settings, build_sink
from .errors import (
    RelayError,
    ClippingExhaustedError,
    PackingImpossibleError,
    SinkError,
    MessageNotFoundError,
    ContentBlockedError,
)
from .events import LogEvent, LogLevel
from .formatting import PrefixBuilder
from .relay import ChannelRelay
from .sinks import ChannelSink

__all__ = [
    "__version__",
    # Events
    "LogEvent",
    "LogLevel",
    # Config
    "RelayConfig",
    "RelaySettings",
    "PrefixBuilder",
    "load_settings",
    "build_sink",
    # Relay
    "ChannelRelay",
    "ChannelSink",
    # Errors
    "RelayError",
    "ClippingExhaustedError",
    "PackingImpossibleError",
    "SinkError",
    "MessageNotFoundError",
    "ContentBlockedError",
]
