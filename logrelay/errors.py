"""Relay exception hierarchy and operator-facing error summaries."""

import asyncio

import httpx


# ════════════════════════════════════════════════════════
# Relay Exception Hierarchy. Classify failures by type,
# not by string matching.  relay.py and the sinks raise these.
# ════════════════════════════════════════════════════════

class RelayError(Exception):
    """Base class for all relay errors."""
    pass

class ClippingExhaustedError(RelayError):
    """An event could not be split under the message budget."""
    pass

class PackingImpossibleError(RelayError):
    """A clipped event does not fit even an empty stack."""
    pass

class SinkError(RelayError):
    """Delivery failed for a reason the relay does not recover from."""
    pass

class MessageNotFoundError(SinkError):
    """The message being edited no longer exists on the channel."""
    pass

class ContentBlockedError(SinkError):
    """The channel rejected the payload (spam / harmful link filter)."""
    pass


def describe_error(e: Exception) -> str:
    """Classify any exception raised by a flush into a one-line summary.

    Used by the CLI to report failures without dumping a traceback.
    """
    if isinstance(e, ClippingExhaustedError):
        return f"Log line too long to split under the message budget: {e}"
    if isinstance(e, PackingImpossibleError):
        return f"Log line does not fit an empty message: {e}"
    if isinstance(e, MessageNotFoundError):
        return "Log message vanished from the channel twice in a row."
    if isinstance(e, ContentBlockedError):
        return "Channel blocked the message even after stripping links."
    if isinstance(e, SinkError):
        return f"Channel rejected the message: {e}"

    if isinstance(e, httpx.ConnectError):
        return "Cannot connect to the channel. Please check connectivity."
    if isinstance(e, (httpx.ReadTimeout, httpx.WriteTimeout, httpx.PoolTimeout, httpx.ConnectTimeout)):
        return "Request to the channel timed out."
    if isinstance(e, asyncio.TimeoutError):
        return "Request to the channel timed out."

    # Configuration problems carry their own explanation
    if isinstance(e, ValueError):
        return str(e)

    # Fallback: include type name for debugging
    type_name = type(e).__name__
    return f"Something went wrong ({type_name}). Check logs for details."
