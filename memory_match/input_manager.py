"""
Input management system for Memory Match.

Front ends (web handlers, console reader) run on their own threads and
post input events here; the runtime loop polls them one at a time.
"""

import queue
import threading
import time
import asyncio
from typing import Any, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


# Actions understood by the runtime
ACTIONS = (
    'select_difficulty',
    'start_game',
    'play_again',
    'click_card',
    'reset_game',
    'return_to_menu',
    'tick',
)


@dataclass
class InputEvent:
    """Represents a single input event."""

    action: str
    value: Any = None
    source: str = "unknown"
    timestamp: float = field(default_factory=time.time)

    def __repr__(self) -> str:
        arg = "" if self.value is None else f", value={self.value!r}"
        return f"InputEvent(action={self.action}{arg}, source={self.source}, time={self.timestamp:.3f})"


class InputManager:
    """
    Manages input event queue with thread-safe operations.

    Provides both synchronous and asynchronous event polling.
    """

    def __init__(self, max_queue_size: int = 0):
        """
        Initialize the input manager.

        Args:
            max_queue_size: Maximum pending events, 0 for unbounded
        """
        self._queue: queue.Queue[InputEvent] = queue.Queue(maxsize=max_queue_size)
        self._lock = threading.Lock()
        self._dropped = 0

    def post(self, action: str, value: Any = None, source: str = "unknown") -> bool:
        """
        Queue an input event.

        This method is thread-safe and can be called from front end threads.

        Args:
            action: One of ACTIONS
            value: Optional argument (card index, difficulty name)
            source: Name of the posting front end

        Returns:
            True if queued, False if the action is unknown or the queue is full
        """
        if action not in ACTIONS:
            logger.warning(f"Rejected unknown input action '{action}' from {source}")
            return False

        event = InputEvent(action, value, source)
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning(f"Input queue full, dropped {event}")
            return False

        logger.debug(f"Queued {event}")
        return True

    def poll_event(self, timeout: float = 0.1) -> Optional[InputEvent]:
        """
        Non-blocking poll for next event.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            InputEvent or None if timeout
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    async def async_poll_event(self, timeout: float = 10.0) -> Optional[InputEvent]:
        """
        Async version for asyncio event loops.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            InputEvent or None if timeout
        """
        loop = asyncio.get_running_loop()
        end_time = loop.time() + timeout

        while loop.time() < end_time:
            try:
                # Short executor timeout so waiting threads don't outlive the poll
                event = await loop.run_in_executor(
                    None,
                    lambda: self._queue.get(block=True, timeout=0.1)
                )
                logger.debug(f"async_poll_event got event: {event}")
                return event
            except queue.Empty:
                # No event yet, keep trying until overall timeout
                continue

        return None

    def clear_queue(self) -> None:
        """Clear all pending events from the queue."""
        with self._lock:
            while not self._queue.empty():
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            logger.debug("Event queue cleared")

    def queue_size(self) -> int:
        """
        Get number of pending events in queue.

        Returns:
            Number of events waiting to be processed
        """
        return self._queue.qsize()

    @property
    def dropped_events(self) -> int:
        with self._lock:
            return self._dropped
