"""Tracking the open channel message and delivering bodies into it."""

import asyncio
import logging
from typing import Any, Optional

from .errors import ContentBlockedError, MessageNotFoundError, SinkError
from .rendering import strip_urls
from .sinks import ChannelSink

logger = logging.getLogger("logrelay.lifecycle")


class MessageLifecycle:
    """Decides between editing the open message and sending a new one.

    ``current`` is None at startup, set after every successful delivery and
    cleared by ``reset()`` (stack dump) or when the channel reports the
    message gone.
    """

    def __init__(self, sink: ChannelSink, *, link_previews: bool = True):
        self._sink = sink
        self._link_previews = link_previews
        self.current: Optional[Any] = None

    def reset(self):
        """Forget the open message; the next delivery starts a new one."""
        self.current = None

    async def _send_or_edit(self, body: str, handle: Any) -> Any:
        try:
            if handle is None:
                handle = await self._sink.send(body, link_previews=self._link_previews)
            else:
                handle = await self._sink.edit(handle, body, link_previews=self._link_previews)
        except asyncio.CancelledError:
            # Whatever the sink did is discarded; the open message stays as it was.
            logger.debug(f"Delivery interrupted, keeping message handle {self.current!r}")
            raise
        self.current = handle
        return handle

    async def deliver(self, body: str) -> Any:
        """Send or edit ``body``, retrying once on recoverable channel errors.

        Returns:
            Handle of the message now holding ``body``

        Raises:
            SinkError: second failure of the retry, or any unrecoverable sink error
        """
        try:
            return await self._send_or_edit(body, self.current)
        except MessageNotFoundError:
            logger.info(f"Message {self.current!r} no longer exists, starting a new one")
            try:
                return await self._send_or_edit(body, None)
            except SinkError:
                self.current = None
                raise
        except ContentBlockedError:
            logger.warning("Channel blocked the message, retrying with links stripped")
            return await self._send_or_edit(strip_urls(body), self.current)
