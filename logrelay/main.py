"""logrelay — standalone entry points (stdin relay, delivery check)."""

import asyncio
import logging
import sys
from typing import Optional

from .config import RelaySettings, build_sink
from .events import LogLevel
from .relay import ChannelRelay

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("logrelay")


def setup_logging(debug: bool = False):
    """Configure stderr logging for the CLI (library users configure their own)."""
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # Request logs include the bot token or webhook secret
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    if debug:
        logging.getLogger("logrelay").setLevel(logging.DEBUG)


async def run_pipe(
    settings: RelaySettings,
    logger_name: str = "stdin",
    level: LogLevel = LogLevel.INFO,
    interval: Optional[float] = None,
    echo: bool = True,
):
    """Relay stdin line by line until EOF, then flush and close.

    Args:
        settings: Loaded settings (sink credentials and rendering options)
        logger_name: Logger name shown for every line
        level: Level assigned to every line
        interval: Flush interval override (seconds)
        echo: Also copy stdin to stdout
    """
    sink = build_sink(settings)
    relay = ChannelRelay(sink, settings.to_config())
    stream = relay.attach_stream(sys.stdout if echo else None, logger_name, level)
    await relay.start(interval or settings.flush_interval)

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            stream.write(line)
    finally:
        try:
            await relay.shutdown()
        finally:
            await sink.close()
    logger.debug("stdin closed, relay shut down")


async def send_test_message(settings: RelaySettings) -> object:
    """Deliver one line through the configured sink; returns the message handle."""
    from . import __version__

    sink = build_sink(settings)
    config = settings.to_config()
    relay = ChannelRelay(sink, config)
    # The check line must pass the level filter
    level = next(
        (l for l in (LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR, LogLevel.DEBUG) if l in config.levels),
        LogLevel.INFO,
    )
    try:
        relay.log(level, "logrelay", f"logrelay {__version__}: delivery check")
        await relay.flush()
        return relay.current_message
    finally:
        await sink.close()
