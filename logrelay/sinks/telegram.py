"""Telegram sink — logs into a chat through the Bot API."""

import logging
from typing import Union

from telegram import Bot, LinkPreviewOptions
from telegram.constants import MessageLimit, ParseMode
from telegram.error import BadRequest, TelegramError
from telegram.helpers import escape_markdown

from ..errors import MessageNotFoundError, SinkError
from . import ChannelSink

logger = logging.getLogger("logrelay.sinks.telegram")

# BadRequest texts the Bot API uses for a deleted target message
_NOT_FOUND_MARKERS = ("message to edit not found", "message not found")


def _translate(e: TelegramError) -> SinkError:
    """Map a python-telegram-bot error onto the relay's error types."""
    text = e.message
    if isinstance(e, BadRequest) and any(m in text.lower() for m in _NOT_FOUND_MARKERS):
        return MessageNotFoundError(text)
    return SinkError(f"Telegram: {text}")


class TelegramSink(ChannelSink):
    """Delivers message bodies to one Telegram chat.

    Bodies are sent with legacy Markdown parse mode, which understands the
    relay's ``` code blocks (including the language tag).
    """

    max_message_length = int(MessageLimit.MAX_TEXT_LENGTH)

    def __init__(self, bot: Union[str, Bot], chat_id: Union[int, str]):
        """
        Args:
            bot: Bot token or an existing ``telegram.Bot``
            chat_id: Numeric chat id or ``@channelusername``
        """
        self._bot = Bot(bot) if isinstance(bot, str) else bot
        self._chat_id = chat_id
        self._initialized = False

    async def _ensure_bot(self):
        if not self._initialized:
            await self._bot.initialize()
            self._initialized = True

    @staticmethod
    def _previews(link_previews: bool) -> LinkPreviewOptions:
        return LinkPreviewOptions(is_disabled=not link_previews)

    async def send(self, body: str, *, link_previews: bool = True) -> int:
        await self._ensure_bot()
        try:
            message = await self._bot.send_message(
                chat_id=self._chat_id,
                text=body,
                parse_mode=ParseMode.MARKDOWN,
                link_preview_options=self._previews(link_previews),
            )
        except TelegramError as e:
            raise _translate(e) from e
        return message.message_id

    async def edit(self, handle: int, body: str, *, link_previews: bool = True) -> int:
        await self._ensure_bot()
        try:
            await self._bot.edit_message_text(
                text=body,
                chat_id=self._chat_id,
                message_id=handle,
                parse_mode=ParseMode.MARKDOWN,
                link_preview_options=self._previews(link_previews),
            )
        except BadRequest as e:
            # Re-sending identical content is not a failure for us
            if "message is not modified" in e.message.lower():
                logger.debug(f"Message {handle} unchanged")
                return handle
            raise _translate(e) from e
        except TelegramError as e:
            raise _translate(e) from e
        return handle

    def escape_markdown(self, text: str) -> str:
        return escape_markdown(text, version=1)

    async def close(self):
        if self._initialized:
            await self._bot.shutdown()
            self._initialized = False
