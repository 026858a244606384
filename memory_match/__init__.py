"""
Memory Match - A card matching game.

This library provides the game session controller (deck building, turn
rules, best scores and the start/playing/complete state machine) and a
runtime serving it to browser and terminal front ends.
"""

__version__ = "1.0.0"
__author__ = "Memory Match Team"

from .runtime import MemoryMatchRuntime
from .session import GameSession, GameState

__all__ = ['MemoryMatchRuntime', 'GameSession', 'GameState']
