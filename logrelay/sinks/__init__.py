"""Channel sinks — where rendered message bodies are delivered.

The relay only needs send/edit and the channel's message length limit.
Sinks translate transport failures into the relay's error types:
``MessageNotFoundError`` and ``ContentBlockedError`` are retried once by
the relay; any other ``SinkError`` fails the flush cycle.
"""

from abc import ABC, abstractmethod
from typing import Any


class ChannelSink(ABC):
    """Abstract channel the relay writes into."""

    #: Channel-imposed character ceiling per message.
    max_message_length: int = 2000

    @abstractmethod
    async def send(self, body: str, *, link_previews: bool = True) -> Any:
        """Post a new message and return its handle."""
        ...

    @abstractmethod
    async def edit(self, handle: Any, body: str, *, link_previews: bool = True) -> Any:
        """Replace the content of the message behind ``handle``; return the (possibly new) handle."""
        ...

    def escape_markdown(self, text: str) -> str:
        """Escape channel markup in text rendered outside code blocks."""
        return text

    async def close(self):
        """Release transport resources."""
        pass


__all__ = ["ChannelSink"]
