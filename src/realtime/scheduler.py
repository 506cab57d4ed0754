"""
Stable Stakes - Timer Scheduling

Delayed callbacks for the session: AI rolls, the roll lock, market
countdown and AI purchase ticks. Two implementations share one
interface:

    ThreadingScheduler  daemon threading.Timer per callback, wall clock
    ManualScheduler     virtual clock advanced explicitly (tests, headless runs)
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(ABC):
    """Runs callbacks after a delay."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Cancel every pending callback."""


class ThreadingScheduler(Scheduler):
    """Wall-clock scheduler backed by daemon timer threads."""

    def __init__(self) -> None:
        self._timers: dict[TimerHandle, threading.Timer] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now() + delay, callback)
        timer = threading.Timer(max(0.0, delay), self._fire, args=(handle,))
        timer.daemon = True
        with self._lock:
            self._timers[handle] = timer
        timer.start()
        return handle

    def _fire(self, handle: TimerHandle) -> None:
        with self._lock:
            self._timers.pop(handle, None)
        if handle.cancelled:
            return
        try:
            handle.callback()
        except Exception:
            logger.exception("Scheduled callback failed")

    def cancel_all(self) -> None:
        with self._lock:
            pending = list(self._timers.items())
            self._timers.clear()
        for handle, timer in pending:
            handle.cancel()
            timer.cancel()

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for h in self._timers if not h.cancelled)


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler.

    Nothing fires until advance() moves the clock. Callbacks due at the
    same instant run in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def cancel_all(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running everything that comes due.

        Returns:
            Number of callbacks run.
        """
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        self._now = target
        return fired

    def run_until(
        self,
        predicate: Callable[[], bool],
        max_seconds: float = 3600.0,
        step: float = 0.1,
    ) -> bool:
        """Advance in small steps until predicate holds or time runs out."""
        elapsed = 0.0
        while not predicate():
            if elapsed >= max_seconds:
                return False
            self.advance(step)
            elapsed += step
        return True

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    @property
    def next_due(self) -> float | None:
        live = [due for due, _, h in self._queue if not h.cancelled]
        return min(live) if live else None
