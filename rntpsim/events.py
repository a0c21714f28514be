"""A small discrete-event scheduler driving simulated applications."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass(eq=False)
class Event:
    """A callback due at a point in simulated time."""

    time: float
    callback: Callable[..., Any]
    args: tuple = ()
    _cancelled: bool = field(default=False, repr=False)
    _done: bool = field(default=False, repr=False)

    def cancel(self) -> None:
        """Stop the event from firing; harmless if it already fired."""
        self._cancelled = True

    def is_running(self) -> bool:
        """Tell whether the event is still waiting to fire."""
        return not (self._cancelled or self._done)


class Scheduler:
    """Runs events in order of simulated time, first scheduled first on ties."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)
        self._queue: list[tuple[float, int, Event]] = []
        self._order = itertools.count()

    def __len__(self) -> int:
        return sum(1 for _, _, event in self._queue if event.is_running())

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> Event:
        """Schedule ``callback(*args)`` to run ``delay`` seconds from now."""
        if delay < 0:
            raise ValueError(f"cannot schedule an event {delay} seconds in the past")
        event = Event(self.now + delay, callback, args)
        heapq.heappush(self._queue, (event.time, next(self._order), event))
        return event

    def cancel(self, event: Event) -> None:
        """Cancel a scheduled event."""
        event.cancel()

    def run(self, until: Optional[float] = None) -> int:
        """Run due events up to and including ``until`` (all if None); return how many ran."""
        executed = 0
        while self._queue and (until is None or self._queue[0][0] <= until):
            time, _, event = heapq.heappop(self._queue)
            if not event.is_running():
                continue
            self.now = time
            event._done = True
            event.callback(*event.args)
            executed += 1
        if until is not None and until > self.now:
            self.now = float(until)
        return executed