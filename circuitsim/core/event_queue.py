"""Time-ordered event queue used by the simulator."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Iterator, Optional

from circuitsim.interfaces.element import EventTarget


@dataclass(order=True)
class Event:
    """A pending run_event() call.

    Ordering is (time, seq): earlier events first, simultaneous events in
    insertion order.
    """

    time: int
    seq: int
    target: EventTarget = field(compare=False)


class EventQueue:
    """Binary heap of pending events ordered by (time, seq)."""

    def __init__(self):
        self._events: list[Event] = []
        self._seq = itertools.count()

    def push(self, time: int, target: EventTarget) -> Event:
        event = Event(time=int(time), seq=next(self._seq), target=target)
        heapq.heappush(self._events, event)
        return event

    def peek_time(self) -> Optional[int]:
        """Fire time of the next event, or None when the queue is empty."""
        if not self._events:
            return None
        return self._events[0].time

    def pop_due(self, limit: int) -> Optional[Event]:
        """Pop the next event due at or before limit."""
        if self._events and self._events[0].time <= limit:
            return heapq.heappop(self._events)
        return None

    def cancel(self, target: EventTarget) -> int:
        """Remove every event of target and return how many were removed."""
        kept = [event for event in self._events if event.target is not target]
        removed = len(self._events) - len(kept)
        if removed:
            heapq.heapify(kept)
            self._events = kept
        return removed

    def pending_for(self, target: EventTarget) -> list[Event]:
        return sorted(event for event in self._events if event.target is target)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(sorted(self._events))
