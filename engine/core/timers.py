"""
Timed event queue.

Replaces fire-and-forget timeouts with callbacks that are checked
against the injected clock once per frame.

Usage:
    timers = TimerQueue(clock)
    handle = timers.schedule(2000, start_battle)

    # Each frame
    timers.update()

    # Changed our mind
    timers.cancel(handle)
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

from engine.core.clock import Clock

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledEvent:
    """A callback due at a given time."""
    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    name: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)


class TimerQueue:
    """
    Min-heap of scheduled callbacks.

    Events due at the same time fire in the order they were scheduled.
    Callbacks may schedule further events; those fire on a later
    update() even if already due.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self._heap: list[ScheduledEvent] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return sum(1 for event in self._heap if not event.cancelled)

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> ScheduledEvent:
        """
        Schedule a callback delay milliseconds from now.

        Returns:
            Handle that can be passed to cancel()
        """
        event = ScheduledEvent(
            due=self.clock.now() + max(0.0, delay),
            sequence=next(self._counter),
            callback=callback,
            name=name,
        )
        heapq.heappush(self._heap, event)
        return event

    def cancel(self, event: ScheduledEvent | None) -> None:
        """Cancel a scheduled event. Safe to call with None or a fired event."""
        if event is not None:
            event.cancelled = True

    def clear(self) -> None:
        """Drop every pending event."""
        self._heap.clear()

    def update(self) -> int:
        """
        Fire every event that is due.

        Returns:
            Number of callbacks fired
        """
        now = self.clock.now()
        due: list[ScheduledEvent] = []
        while self._heap and self._heap[0].due <= now:
            due.append(heapq.heappop(self._heap))

        fired = 0
        for event in due:
            if event.cancelled:
                continue
            event.cancelled = True
            try:
                event.callback()
            except Exception:
                logger.exception(f"Timed event '{event.name}' failed")
            fired += 1
        return fired
