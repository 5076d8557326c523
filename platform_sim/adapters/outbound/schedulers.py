"""
Scheduler Adapters

Two implementations of IScheduler:

    ManualScheduler   virtual clock advanced explicitly; used by tests and
                      the CLI to play delayed completions deterministically
    AsyncioScheduler  real delays on a running asyncio event loop
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Tuple

from platform_sim.application.ports.outbound.scheduler import IScheduler, ScheduledTask


class ManualTask(ScheduledTask):

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False
        self.done = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(IScheduler):
    """
    Virtual-time scheduler.

    Tasks fire in due-time order; tasks due at the same instant fire in the
    order they were scheduled. A callback may schedule further tasks, which
    fire within the same ``advance`` call if they fall due in time.
    """

    def __init__(self):
        self.now = 0.0
        self.logger = logging.getLogger(__name__)
        self._queue: List[Tuple[float, int, ManualTask]] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    @property
    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every task that falls due.

        Returns:
            Number of callbacks that ran
        """
        deadline = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, task = heapq.heappop(self._queue)
            self.now = due
            if task.cancelled:
                continue
            task.done = True
            task.callback()
            fired += 1
        self.now = deadline
        return fired

    def run_all(self) -> int:
        """Fire everything still queued, however far in the future."""
        fired = 0
        while self._queue:
            fired += self.advance(self._queue[0][0] - self.now)
        return fired


class AsyncioTask(ScheduledTask):

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(IScheduler):
    """Schedules callbacks with ``loop.call_later`` on a single event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> AsyncioTask:
        return AsyncioTask(self.loop.call_later(max(0.0, delay), callback))
