"""
Memory Match Runtime Manager.

Central coordinator for the game process.
Manages settings, the game session, front ends and system lifecycle.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Union
import logging

from .best_scores import KeyValueBestScoreStore
from .deck import Difficulty
from .frontend.base import FrontEnd
from .frontend.console_frontend import ConsoleFrontEnd
from .frontend.web_frontend import WebFrontEnd
from .input_manager import InputEvent, InputManager
from .scheduler import AsyncioScheduler, Scheduler
from .session import GameSession
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)


class MemoryMatchRuntime:
    """
    Central runtime manager for Memory Match.

    Handles:
    - Settings and best score persistence
    - Front end initialization (web and/or console)
    - Input event dispatch to the game session
    - System shutdown
    """

    def __init__(
        self,
        enable_web: bool = True,
        enable_console: bool = True,
        web_host: str = '0.0.0.0',
        web_port: int = 5000,
        settings_file: Optional[Path] = None,
        difficulty: Optional[Union[Difficulty, str]] = None,
        scheduler: Optional[Scheduler] = None,
        rng=None,
    ):
        """
        Initialize runtime.

        Args:
            enable_web: Enable browser front end
            enable_console: Enable terminal front end
            web_host: Host for web server
            web_port: Port for web server (default: 5000)
            settings_file: Settings YAML path (default: data/.settings.yml)
            difficulty: Starting difficulty (default: last used)
            scheduler: Scheduler for the session (default: asyncio based)
            rng: Random source for shuffling
        """
        self.enable_web = enable_web
        self.enable_console = enable_console
        self.web_host = web_host
        self.web_port = web_port

        self.settings = SettingsManager(settings_file)
        self.input_manager = InputManager()
        self.frontends: List[FrontEnd] = []

        if difficulty is not None:
            self.settings.set_difficulty(difficulty)

        self.session = GameSession(
            store=KeyValueBestScoreStore(self.settings),
            scheduler=scheduler or AsyncioScheduler(),
            difficulty=self.settings.get_difficulty(),
            rng=rng,
            match_delay=self.settings.get_match_delay(),
            mismatch_delay=self.settings.get_mismatch_delay(),
        )
        self.session.add_listener(self._on_session_change)

        self.latest_state: dict = self.session.snapshot()
        self._running = False

    def initialize(self) -> None:
        """
        Initialize front ends.

        Raises:
            RuntimeError: If no front end is available
        """
        logger.info("Initializing Memory Match Runtime")
        logger.info(f"Web enabled: {self.enable_web}, Console enabled: {self.enable_console}")

        if not self.enable_web and not self.enable_console:
            raise RuntimeError("No front ends enabled! Enable web or console.")

        if self.enable_web:
            try:
                logger.info("Initializing web front end...")
                self.add_frontend(WebFrontEnd(host=self.web_host, port=self.web_port))
                logger.info(f"Web front end initialized at http://{self.web_host}:{self.web_port}")
            except Exception as e:
                logger.error(f"Failed to initialize web front end: {e}", exc_info=True)
                if not self.enable_console:
                    raise RuntimeError(f"Web initialization failed and console disabled: {e}")

        if self.enable_console:
            self.add_frontend(ConsoleFrontEnd(on_quit=self.request_shutdown))

        if not self.frontends:
            raise RuntimeError("No front ends available!")

        logger.info("Memory Match Runtime initialized successfully")

    def add_frontend(self, frontend: FrontEnd) -> None:
        """
        Start a front end and connect it to input and state updates.

        Args:
            frontend: Front end to attach
        """
        frontend.register_input_callback(self.input_manager.post)
        frontend.initialize()
        self.frontends.append(frontend)
        frontend.show_state(self.latest_state)

    def _on_session_change(self, session: GameSession) -> None:
        """Push the new snapshot to every front end."""
        self.latest_state = session.snapshot()

        for frontend in self.frontends:
            try:
                frontend.show_state(self.latest_state)
            except Exception as e:
                logger.error(f"Failed to update {type(frontend).__name__}: {e}", exc_info=True)

    def dispatch(self, event: InputEvent) -> bool:
        """
        Apply one input event to the session.

        Args:
            event: Event from the input queue

        Returns:
            True if the event was understood
        """
        logger.debug(f"Dispatching {event}")
        session = self.session

        if event.action == 'click_card':
            index = self._card_index(event.value)
            if index is None:
                logger.warning(f"Invalid card index from {event.source}: {event.value!r}")
                return False
            session.click_card(index)

        elif event.action == 'select_difficulty':
            value = str(event.value).strip().lower()
            if value not in {d.value for d in Difficulty}:
                logger.warning(f"Invalid difficulty from {event.source}: {event.value!r}")
                return False
            session.select_difficulty(value)
            self.settings.set_difficulty(session.difficulty)

        elif event.action == 'start_game':
            session.start_game()

        elif event.action == 'play_again':
            session.play_again()

        elif event.action == 'reset_game':
            session.reset_game()

        elif event.action == 'return_to_menu':
            session.return_to_menu()

        elif event.action == 'tick':
            session.tick()

        else:
            logger.warning(f"Unknown action from {event.source}: {event.action}")
            return False

        return True

    @staticmethod
    def _card_index(value) -> Optional[int]:
        """Card index from an int or a digit string; None for anything else."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdecimal():
            return int(value.strip())
        return None

    def request_shutdown(self) -> None:
        """Ask the runtime loop to stop. Safe to call from any thread."""
        logger.info("Shutdown requested")
        self._running = False

    async def run(self) -> None:
        """
        Main runtime loop (async).

        Runs until shutdown is requested.
        """
        logger.info("Starting Memory Match Runtime")
        self._running = True

        try:
            while self._running:
                event = await self.input_manager.async_poll_event(timeout=0.5)
                if event is None:
                    continue
                try:
                    self.dispatch(event)
                except Exception as e:
                    logger.error(f"Error handling {event}: {e}", exc_info=True)
        except asyncio.CancelledError:
            logger.info("Runtime loop cancelled")

        logger.info("Runtime loop ended")

    def start(self) -> None:
        """
        Start the runtime (blocking).

        This is the main entry point for the application.
        """
        try:
            # Initialize system
            self.initialize()

            logger.info("Initialization complete, starting async runtime...")

            # Run async event loop
            asyncio.run(self.run())

        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        except Exception as e:
            logger.error(f"Runtime error: {e}", exc_info=True)
            raise
        finally:
            # Cleanup
            self.shutdown()

    def shutdown(self) -> None:
        """Graceful shutdown of the system."""
        logger.info("Shutting down Memory Match Runtime")

        # Stop running
        self._running = False

        # Stop timers of a game in progress
        self.session.remove_listener(self._on_session_change)
        self.session.return_to_menu()

        # Close all front ends
        for frontend in self.frontends:
            try:
                logger.debug(f"Closing front end: {type(frontend).__name__}")
                frontend.close()
            except Exception as e:
                logger.error(f"Error closing front end: {e}", exc_info=True)

        logger.info("Memory Match Runtime shutdown complete")
