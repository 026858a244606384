"""
Abstract base class for Memory Match front ends.

A front end turns player actions into input events and shows session
snapshots. It never touches the session directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)


class FrontEnd(ABC):
    """Abstract base class for all front ends."""

    # Name reported as the source of posted input events
    name: str = "frontend"

    def __init__(self):
        """Initialize the front end."""
        self._input_callback: Optional[Callable[..., bool]] = None
        self._initialized = False
        self.last_state: Optional[dict] = None

    @abstractmethod
    def initialize(self) -> None:
        """
        Start the front end (threads, servers).

        Raises:
            RuntimeError: If the front end cannot be started
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop the front end and release its resources."""
        pass

    def show_state(self, snapshot: dict) -> None:
        """
        Receive the latest session snapshot.

        Subclasses extend this to present it.

        Args:
            snapshot: Dictionary from GameSession.snapshot()
        """
        self.last_state = snapshot

    def register_input_callback(self, callback: Callable[..., bool]) -> None:
        """
        Register the function that receives player input.

        Signature: callback(action: str, value: Any = None, source: str = ...) -> bool

        Args:
            callback: Usually InputManager.post
        """
        self._input_callback = callback

    def _post(self, action: str, value: Any = None) -> bool:
        """Forward a player action to the registered callback."""
        if self._input_callback is None:
            logger.warning(f"[{self.name}] No input callback registered, dropping '{action}'")
            return False
        return self._input_callback(action, value, source=self.name)

    @property
    def initialized(self) -> bool:
        return self._initialized
