"""Timer scheduling and debouncing.

``LoopScheduler`` runs timers on the asyncio event loop. ``ManualScheduler``
keeps a virtual clock that only moves when ``advance`` is called, so debounce
windows can be exercised without waiting on the wall clock.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class LoopScheduler:
    """Scheduler backed by the running asyncio loop."""

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ManualTimer:
    def __init__(self, deadline: float, callback: Callback) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.deadline, next(self._sequence), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in deadline order."""

        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = deadline
            timer.callback()
            fired += 1
        self.now = target
        return fired


class Debouncer:
    """Runs ``action`` once ``delay`` seconds pass without another trigger."""

    def __init__(self, delay: float, action: Callback, scheduler: Scheduler) -> None:
        self.delay = delay
        self._action = action
        self._scheduler = scheduler
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> bool:
        """Run a pending action immediately; returns whether one was pending."""

        if self._handle is None:
            return False
        self.cancel()
        self._action()
        return True

    def _fire(self) -> None:
        self._handle = None
        self._action()


__all__ = [
    "Debouncer",
    "LoopScheduler",
    "ManualScheduler",
    "ManualTimer",
    "Scheduler",
    "TimerHandle",
]
