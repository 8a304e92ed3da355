"""Rendering a stack of events into one channel message body.

Handles:
- Shared code block around all lines (tagged for channel-side colouring)
- Per-level line markers when coloured
- Link isolation: lines with a URL rendered outside the shared block
- Empty code block and blank line cleanup
- URL stripping when the channel's link filter rejects a message

These operations are channel-agnostic. Sinks deliver the body as-is.
"""

import re
from typing import Iterable

from .config import RelayConfig
from .events import LogEvent
from .formatting import format_event


# ============================================================
# LINKS
# ============================================================
# Group 1 is the URL without its scheme; stripping keeps the host and
# path readable while the channel no longer treats it as a link.

URL_RE = re.compile(
    r"https?://("
    r"(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]"
    r":?\d*/?[a-zA-Z0-9_/\-#.]*"
    r"\??[a-zA-Z0-9\-_~:/?#\[\]@!$&'()*+,;=%.]*)"
)

FENCE = "```"

_BLANK_LINES_RE = re.compile(r"\n{2,}")


def contains_url(text: str) -> bool:
    return bool(text) and URL_RE.search(text) is not None


def strip_urls(text: str) -> str:
    """Defang every URL in ``text`` by dropping its scheme."""
    return URL_RE.sub(r"\1", text)


def requires_isolation(event: LogEvent, config: RelayConfig) -> bool:
    """Whether ``event`` is rendered outside the shared code block."""
    return (
        config.use_code_blocks
        and config.split_block_for_links
        and contains_url(event.message or "")
    )


def uses_markers(config: RelayConfig) -> bool:
    """Level markers only mean something inside a coloured code block."""
    return config.use_code_blocks and config.colored


# ============================================================
# RENDERING
# ============================================================

def render_line(event: LogEvent, config: RelayConfig) -> str:
    """One event as it appears inside the joined body."""
    formatted = format_event(event, config)
    if requires_isolation(event, config):
        # Close the shared block, show the line as plain text, reopen.
        return f"{FENCE}\n{formatted}\n{FENCE}{config.fence_tag}"
    if uses_markers(config):
        return f"{event.level.symbol} {formatted}"
    return formatted


def cleanup(text: str, config: RelayConfig) -> str:
    """Drop empty code blocks and blank lines."""
    if config.use_code_blocks:
        tag = config.fence_tag
        text = text.replace(f"{FENCE}{tag}{FENCE}", "")
        text = text.replace(f"{FENCE}{tag}\n{FENCE}", "")
    text = _BLANK_LINES_RE.sub("\n", text)
    return text.strip("\n")


def render_stack(events: Iterable[LogEvent], config: RelayConfig) -> str:
    """Render events (in order) into one message body.

    Raises:
        ValueError: no events given; an empty stack is never delivered.
    """
    lines = [render_line(event, config) for event in events]
    if not lines:
        raise ValueError("No events on stack")

    body = "\n".join(lines)
    if config.use_code_blocks:
        body = f"{FENCE}{config.fence_tag}\n{body}{FENCE}"
    return cleanup(body, config)
