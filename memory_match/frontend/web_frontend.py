"""
Browser front end for Memory Match.

Runs the Flask + Socket.IO server in a background thread, forwards client
actions as input events and pushes session snapshots to browsers.
"""

import threading
import time
from typing import Any, Optional
import logging

from .base import FrontEnd

logger = logging.getLogger(__name__)


class WebFrontEnd(FrontEnd):
    """Browser front end served over HTTP and WebSocket."""

    name = "web"

    def __init__(self, host: str = '0.0.0.0', port: int = 5000):
        """
        Initialize web front end.

        Args:
            host: Host address to bind
            port: Port for web server
        """
        super().__init__()
        self.host = host
        self.port = port
        self._server_thread: Optional[threading.Thread] = None

    def initialize(self) -> None:
        """Initialize web server in background thread."""
        try:
            logger.info(f"Initializing WebFrontEnd on {self.host}:{self.port}")

            from ..web import server

            # Set reference to this front end
            server.set_web_frontend(self)

            # Start server in background thread
            self._server_thread = threading.Thread(
                target=server.run_server,
                args=(self.host, self.port),
                daemon=True
            )
            self._server_thread.start()

            # Give server time to start
            time.sleep(1)

            self._initialized = True
            logger.info(f"WebFrontEnd initialized successfully at http://{self.host}:{self.port}")

        except Exception as e:
            logger.error(f"Failed to initialize WebFrontEnd: {e}", exc_info=True)
            raise RuntimeError(f"WebFrontEnd initialization failed: {e}")

    def close(self) -> None:
        """Detach from the server."""
        logger.info("Closing WebFrontEnd")

        from ..web import server

        server.set_web_frontend(None)

        # Server thread will continue running (daemon)
        self._initialized = False
        logger.info("WebFrontEnd closed")

    def show_state(self, snapshot: dict) -> None:
        """Push snapshot to every connected browser."""
        super().show_state(snapshot)

        from ..web import server

        server.emit_state_update(snapshot)

    def _on_client_event(self, action: str, value: Any = None) -> bool:
        """
        Called by web server when a client action is received.

        Args:
            action: Action name
            value: Optional argument

        Returns:
            True if the action was queued
        """
        logger.info(f"[CLIENT EVENT] {action} {'' if value is None else value}".rstrip())
        return self._post(action, value)

    def on_client_connected(self) -> None:
        """Send the current state to a newly connected client."""
        if self.last_state is None:
            logger.warning("[CLIENT CONNECT] No state yet, nothing to send")
            return

        from ..web import server

        logger.info("[CLIENT CONNECT] Sending current state to new client")
        server.emit_state_update(self.last_state)
