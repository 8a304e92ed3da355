"""The stack: events packed into the message currently being assembled."""

from typing import Iterator, Optional

from .config import RelayConfig
from .events import LogEvent
from .formatting import formatted_length
from .rendering import FENCE, requires_isolation, uses_markers

_MARKER_LENGTH = len("- ")


class Stack:
    """Ordered set of events destined for one outbound message.

    Insertion order is rendering order; adding an event already on the
    stack is a no-op. ``dirty`` records additions not yet delivered.
    """

    def __init__(self, config: RelayConfig, message_limit: int):
        self._config = config
        self._limit = message_limit
        self._items: dict[LogEvent, int] = {}  # event -> line cost
        self.dirty = False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(self._items)

    def __contains__(self, event: LogEvent) -> bool:
        return event in self._items

    def add(self, event: LogEvent):
        if event not in self._items:
            self._items[event] = self.line_cost(event)
            self.dirty = True

    def clear(self):
        self._items.clear()
        self.dirty = False

    def line_cost(self, event: LogEvent) -> int:
        """Characters one event adds to the body, excluding the joining newline."""
        cost = formatted_length(event, self._config)
        if requires_isolation(event, self._config):
            # closing fence + newline, newline + reopening fence + tag
            cost += len(FENCE) * 2 + 2 + len(self._config.fence_tag)
        elif uses_markers(self._config):
            cost += _MARKER_LENGTH
        return cost

    def _structure_cost(self, count: int) -> int:
        if self._config.use_code_blocks:
            # opening fence + tag + newline, closing fence, one newline per extra line
            return len(FENCE) * 2 + len(self._config.fence_tag) + count
        return max(count - 1, 0)

    def framing_cost(self, event: LogEvent) -> int:
        """Characters an empty stack adds around ``event`` beyond its formatted length."""
        extra = self.line_cost(event) - formatted_length(event, self._config)
        return extra + self._structure_cost(1) + self._config.safety_margin

    def length_bound(self, candidate: Optional[LogEvent] = None) -> int:
        """Upper bound on the rendered body, optionally with ``candidate`` added.

        Includes the safety margin reserved for channel framing.
        """
        total = sum(self._items.values())
        count = len(self._items)
        if candidate is not None and candidate not in self._items:
            total += self.line_cost(candidate)
            count += 1
        return total + self._structure_cost(count) + self._config.safety_margin

    def can_fit(self, event: LogEvent) -> bool:
        """Whether ``event`` can join this stack without overflowing the message."""
        return self.length_bound(event) <= self._limit
