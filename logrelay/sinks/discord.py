"""Discord sink — logs into a channel through an incoming webhook."""

import logging
import re
from typing import Optional

import httpx

from ..errors import ContentBlockedError, MessageNotFoundError, SinkError
from . import ChannelSink

logger = logging.getLogger("logrelay.sinks.discord")

# Discord JSON error codes
UNKNOWN_MESSAGE = 10008
HARMFUL_LINK_BLOCKED = 240000

# Message flag: do not render link embeds
SUPPRESS_EMBEDS = 1 << 2

_MARKDOWN_RE = re.compile(r"([\\*_~`|>])")


class DiscordWebhookSink(ChannelSink):
    """Delivers message bodies through a Discord webhook.

    Messages are created with ``?wait=true`` so the response carries the
    message id, which is the handle used for later edits.
    """

    max_message_length = 2000

    def __init__(self, webhook_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._url = webhook_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @staticmethod
    def _payload(body: str, link_previews: bool) -> dict:
        payload = {"content": body, "allowed_mentions": {"parse": []}}
        if not link_previews:
            payload["flags"] = SUPPRESS_EMBEDS
        return payload

    @staticmethod
    def _check(resp: httpx.Response):
        """Raise the matching relay error for a failed webhook call."""
        if resp.is_success:
            return

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        code = data.get("code")
        detail = data.get("message") or resp.text[:200]
        if code == UNKNOWN_MESSAGE:
            raise MessageNotFoundError(detail)
        if code == HARMFUL_LINK_BLOCKED:
            raise ContentBlockedError(detail)
        raise SinkError(f"Discord returned HTTP {resp.status_code}: {detail}")

    async def send(self, body: str, *, link_previews: bool = True) -> str:
        try:
            resp = await self._client.post(
                self._url, params={"wait": "true"}, json=self._payload(body, link_previews),
            )
        except httpx.HTTPError as e:
            raise SinkError(f"Discord webhook request failed: {e}") from e
        self._check(resp)
        return resp.json()["id"]

    async def edit(self, handle: str, body: str, *, link_previews: bool = True) -> str:
        try:
            resp = await self._client.patch(
                f"{self._url}/messages/{handle}", json=self._payload(body, link_previews),
            )
        except httpx.HTTPError as e:
            raise SinkError(f"Discord webhook request failed: {e}") from e
        self._check(resp)
        return resp.json().get("id", handle)

    def escape_markdown(self, text: str) -> str:
        return _MARKDOWN_RE.sub(r"\\\1", text)

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
