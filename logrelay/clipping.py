"""Splitting over-long events into message-sized pieces."""

import logging
import math

from .config import RelayConfig
from .errors import ClippingExhaustedError
from .events import LogEvent
from .formatting import formatted_length, overhead_length

logger = logging.getLogger("logrelay.clipping")


def max_continuations(config: RelayConfig, message_limit: int) -> int:
    """Continuation cap: enough pieces to carry one ``max_burst_length`` burst."""
    return max(0, math.ceil((config.max_burst_length - message_limit) / message_limit))


def clip_event(
    event: LogEvent,
    config: RelayConfig,
    budget: int,
    max_pieces: int,
) -> list[LogEvent]:
    """Split ``event`` so each piece formats to at most ``budget`` characters.

    Returns the head followed by up to ``max_pieces`` continuation events,
    in order. Concatenating their messages reproduces the original message
    unless ``config.truncate_oversize`` cut the overflow off. The error
    payload stays on the head only.

    Args:
        event: Event to split (left untouched)
        config: Relay config used for formatting
        budget: Clip budget, i.e. message limit minus the clipping margin
        max_pieces: Maximum number of continuation events

    Raises:
        ClippingExhaustedError: overhead alone reaches the budget, or more
            than ``max_pieces`` continuations would be needed and truncation
            is disabled.
    """
    pieces = []
    current = event
    continuations = 0

    while True:
        message = current.message or ""
        if formatted_length(current, config) <= budget:
            pieces.append(current)
            break

        overhead = overhead_length(current.with_message(""), config)
        cutoff = budget - overhead
        # Escaping can make the head render longer than its raw length.
        excess = formatted_length(current.with_message(message[:cutoff]), config) - budget
        while cutoff > 0 and excess > 0:
            cutoff -= excess
            excess = formatted_length(current.with_message(message[:cutoff]), config) - budget
        if cutoff <= 0:
            raise ClippingExhaustedError(
                f"Formatting overhead ({overhead}) leaves no room for text under budget {budget}: {current!r}"
            )

        head, tail = message[:cutoff], message[cutoff:]
        pieces.append(current.with_message(head))

        if continuations >= max_pieces:
            if not config.truncate_oversize:
                raise ClippingExhaustedError(
                    f"{event!r} needs more than {max_pieces} continuations under budget {budget}"
                )
            logger.warning(f"Truncated {len(tail)} characters from {event!r}")
            break

        current = current.continuation(tail)
        continuations += 1

    return pieces
