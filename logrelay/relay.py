"""ChannelRelay — batches log events into as few channel messages as possible.

Flush cycle:
1. Drain the inbound queue (filled by ``enqueue`` from any thread)
2. Filter by level, logger name and message transformers
3. Clip over-long events into continuation pieces
4. Pack pieces into the stack, closing the stack when the next piece
   would overflow the message
5. Render the stack and send/edit it once

Only steps 2-5 touch shared state and they run under one asyncio lock, so
a manual ``flush()`` and the scheduled one never interleave.
"""

import asyncio
import logging
from collections import deque
from typing import Callable, Optional

from .clipping import clip_event, max_continuations
from .config import RelayConfig
from .errors import PackingImpossibleError
from .events import LogEvent, LogLevel
from .formatting import formatted_length
from .lifecycle import MessageLifecycle
from .packing import Stack
from .rendering import render_stack
from .scheduler import DEFAULT_INTERVAL, DEFAULT_STOP_TIMEOUT, FlushScheduler
from .sinks import ChannelSink

logger = logging.getLogger("logrelay.relay")


class ChannelRelay:
    """Relays application log events into one channel.

    Usage:
        relay = ChannelRelay(TelegramSink(token, chat_id), RelayConfig())
        relay.attach_logging()
        await relay.start()
        # ... application runs, logging as usual ...
        await relay.shutdown()

    The inbound queue is unbounded: a sink slower than the log rate grows
    memory rather than blocking producers.
    """

    def __init__(self, sink: ChannelSink, config: Optional[RelayConfig] = None):
        self.sink = sink
        self.config = config or RelayConfig()
        if self.config.markdown_escaper is None and not self.config.frozen:
            self.config.markdown_escaper = sink.escape_markdown

        self._unprocessed: deque[LogEvent] = deque()
        self._outbound: deque[LogEvent] = deque()
        self._stack = Stack(self.config, sink.max_message_length)
        self._lifecycle = MessageLifecycle(sink, link_previews=self.config.allow_link_embeds)
        self._lock = asyncio.Lock()
        self._scheduler: Optional[FlushScheduler] = None
        self._detach_callbacks: list[Callable[[], None]] = []

    # ── budgets ─────────────────────────────────────────────

    @property
    def clip_budget(self) -> int:
        """Largest formatted length a single event may have."""
        return self.sink.max_message_length - self.config.clipping_margin

    @property
    def current_message(self):
        """Handle of the channel message currently being edited, if any."""
        return self._lifecycle.current

    @property
    def pending(self) -> int:
        """Events waiting in either queue."""
        return len(self._unprocessed) + len(self._outbound)

    # ── ingestion ───────────────────────────────────────────

    def enqueue(self, event: LogEvent):
        """Queue an event for the next flush. Safe from any thread; never blocks."""
        self._unprocessed.append(event)

    def log(self, level: LogLevel, logger_name: str, message: Optional[str], error=None):
        """Shortcut for ``enqueue(LogEvent(...))``."""
        self.enqueue(LogEvent(logger=logger_name, level=level, message=message, error=error))

    def _process(self, event: LogEvent) -> list[LogEvent]:
        """Filter and transform one event, returning its clipped pieces (possibly none)."""
        config = self.config
        if event.level not in config.levels:
            return []
        if config.resolve_logger_name(event.logger) is None:
            logger.debug(f"Dropped by logger mapping: {event!r}")
            return []

        # Each predicate sees the message as rewritten by the transformers before it
        for predicate, fn in config.message_transformers:
            if not predicate(event):
                continue
            message = fn(event.message)
            if message is None:
                logger.debug(f"Dropped by message transformer: {event!r}")
                return []
            if message != event.message:
                event = event.with_message(message)

        limit = self.sink.max_message_length
        # A line rendered outside the shared block costs more framing than the margin covers
        budget = min(self.clip_budget, limit - self._stack.framing_cost(event))
        return clip_event(event, config, budget, max_continuations(config, limit))

    # ── flush cycle ─────────────────────────────────────────

    async def flush(self):
        """Run one flush cycle. A flush already in progress is waited for.

        Raises:
            ClippingExhaustedError: an event could not be clipped (it is dropped)
            PackingImpossibleError: an event does not fit an empty stack (it is dropped)
            SinkError: delivery failed; queued events and the stack are kept
        """
        async with self._lock:
            while self._unprocessed:
                event = self._unprocessed.popleft()
                self._outbound.extend(self._process(event))

            while self._outbound:
                event = self._outbound[0]
                if event.is_empty:
                    self._outbound.popleft()
                    continue

                length = formatted_length(event, self.config)
                if length > self.clip_budget:
                    self._outbound.popleft()
                    raise PackingImpossibleError(
                        f"Event formats to {length} characters, over the {self.clip_budget} budget: {event!r}"
                    )

                if not self._stack.can_fit(event):
                    if not self._stack:
                        self._outbound.popleft()
                        raise PackingImpossibleError(f"Event does not fit an empty message: {event!r}")
                    await self._close_stack()

                self._stack.add(event)
                self._outbound.popleft()

            if self._stack.dirty and self._stack:
                await self._lifecycle.deliver(render_stack(self._stack, self.config))
                self._stack.dirty = False

    async def _close_stack(self):
        """Deliver undelivered stack content and start a fresh message."""
        if self._stack and self._stack.dirty:
            await self._lifecycle.deliver(render_stack(self._stack, self.config))
        self._stack.clear()
        self._lifecycle.reset()

    async def dump_stack(self):
        """Close the current message now; the next event starts a new one."""
        async with self._lock:
            await self._close_stack()

    # ── scheduling ──────────────────────────────────────────

    async def start(self, interval: float = DEFAULT_INTERVAL):
        """Start flushing every ``interval`` seconds. Freezes the config."""
        self.config.freeze()
        if self._scheduler is not None:
            await self._scheduler.stop()
        self._scheduler = FlushScheduler(on_tick=self.flush, interval=interval)
        await self._scheduler.start()
        logger.info(f"Relaying logs every {interval}s")

    async def stop(self, timeout: float = DEFAULT_STOP_TIMEOUT):
        """Stop the scheduled flushes (an in-flight flush may finish)."""
        if self._scheduler is not None:
            await self._scheduler.stop(timeout)
            self._scheduler = None

    async def shutdown(self, timeout: float = DEFAULT_STOP_TIMEOUT):
        """Detach adapters, stop the scheduler and run one last flush."""
        self.detach()
        await self.stop(timeout)
        await self.flush()

    # ── adapters ────────────────────────────────────────────

    def add_detach_callback(self, callback: Callable[[], None]):
        self._detach_callbacks.append(callback)

    def attach_logging(self, target: Optional[logging.Logger] = None, level: int = logging.NOTSET):
        """Relay records of ``target`` (root logger by default).

        Returns:
            The installed LoggingAdapter
        """
        from .adapters import LoggingAdapter

        target = target if target is not None else logging.getLogger()
        adapter = LoggingAdapter(self, level=level)
        target.addHandler(adapter)
        self.add_detach_callback(lambda: target.removeHandler(adapter))
        return adapter

    def attach_stream(self, stream, logger_name: str, level: LogLevel = LogLevel.INFO):
        """Wrap ``stream`` so every line written through the wrapper is relayed.

        The caller installs the returned wrapper where it wants it (for
        example with ``contextlib.redirect_stdout``).
        """
        from .adapters import StreamAdapter

        adapter = StreamAdapter(self, stream, logger_name, level)
        self.add_detach_callback(adapter.release)
        return adapter

    def detach(self):
        """Run and forget every registered detach callback."""
        while self._detach_callbacks:
            callback = self._detach_callbacks.pop()
            callback()
