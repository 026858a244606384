"""Web front end components."""

from .server import run_server, set_web_frontend, emit_state_update

__all__ = ['run_server', 'set_web_frontend', 'emit_state_update']
