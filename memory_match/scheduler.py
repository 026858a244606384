"""
Scheduled task support for Memory Match.

Game sessions schedule delayed card resolutions and the once-per-second
timer tick through a Scheduler. Every scheduled task can be cancelled.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a scheduled one-shot or repeating callback."""

    def __init__(self, callback: Callable[[], None], interval: Optional[float] = None):
        """
        Initialize task.

        Args:
            callback: Function to call when the task fires
            interval: Repeat interval in seconds, None for one-shot tasks
        """
        self.callback = callback
        self.interval = interval
        self.cancelled = False
        self.fired = 0
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    @property
    def active(self) -> bool:
        """True while the task may still fire."""
        if self.cancelled:
            return False
        return self.repeating or self.fired == 0

    def cancel(self) -> None:
        """Cancel the task. Safe to call more than once."""
        if self.cancelled:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _run(self) -> None:
        self.fired += 1
        self.callback()

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.repeating else "once"
        return f"ScheduledTask({kind}, fired={self.fired}, cancelled={self.cancelled})"


class Scheduler(ABC):
    """Abstract scheduler for delayed and repeating callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run callback once after delay seconds.

        Returns:
            Cancellable task handle
        """
        pass

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run callback every interval seconds until cancelled.

        The first call happens one interval from now.

        Returns:
            Cancellable task handle
        """
        pass


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize scheduler.

        Args:
            loop: Event loop to schedule on (default: the running loop at call time)
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback)
        task._handle = self.loop.call_later(delay, self._fire, task)
        return task

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("Repeat interval must be positive")
        task = ScheduledTask(callback, interval=interval)
        task._handle = self.loop.call_later(interval, self._fire, task)
        return task

    def _fire(self, task: ScheduledTask) -> None:
        if task.cancelled:
            return

        if task.repeating:
            # Re-arm before running so the callback can cancel its own task
            task._handle = self.loop.call_later(task.interval, self._fire, task)
        else:
            task._handle = None

        try:
            task._run()
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}", exc_info=True)


class ManualScheduler(Scheduler):
    """
    Scheduler driven by an explicit clock.

    Time only moves when advance() is called, which makes delayed game
    behaviour deterministic in tests and scripted play.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback)
        self._push(self.now + max(0.0, delay), task)
        return task

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("Repeat interval must be positive")
        task = ScheduledTask(callback, interval=interval)
        self._push(self.now + interval, task)
        return task

    def _push(self, due: float, task: ScheduledTask) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), task))

    def pending(self) -> List[ScheduledTask]:
        """Tasks that are still waiting to fire."""
        return [task for _due, _seq, task in sorted(self._queue) if not task.cancelled]

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every task that falls due.

        Args:
            seconds: Amount of time to move forward

        Returns:
            Number of callbacks that ran
        """
        target = self.now + seconds
        ran = 0

        while self._queue and self._queue[0][0] <= target:
            due, _seq, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue

            self.now = due
            if task.repeating:
                self._push(due + task.interval, task)
            task._run()
            ran += 1

        self.now = target
        return ran
