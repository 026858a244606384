"""
Settings manager for persistent game configuration.

Handles reading and writing settings to data/.settings.yml. The same file
holds the serialized best scores.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .best_scores import BEST_SCORES_KEY
from .deck import Difficulty


logger = logging.getLogger(__name__)


def _get_default_settings_path() -> Path:
    """Get the default settings file path relative to project root."""
    # Get project root (parent of memory_match directory)
    project_root = Path(__file__).parent.parent
    return project_root / "data" / ".settings.yml"


class SettingsManager:
    """Manages persistent game settings stored in YAML format."""

    # Default settings
    DEFAULT_SETTINGS = {
        'difficulty': Difficulty.MEDIUM.value,
        'match_delay': 0.5,  # Seconds a matched pair stays in the flip buffer
        'mismatch_delay': 1.0,  # Seconds before a wrong pair flips back
    }

    # Longest allowed resolution delay
    MAX_DELAY = 5.0

    def __init__(self, settings_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            settings_file: Path to the settings YAML file (default: {project_root}/data/.settings.yml)
        """
        self._settings_file = Path(settings_file) if settings_file else _get_default_settings_path()
        self._lock = threading.Lock()
        self._settings: Dict[str, Any] = {}
        logger.info(f"SettingsManager using path: {self._settings_file}")
        self._load_settings()

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _load_settings(self) -> None:
        """Load settings from file, applying defaults and limits."""
        with self._lock:
            try:
                if self._settings_file.exists():
                    with open(self._settings_file, 'r') as f:
                        loaded_settings = yaml.safe_load(f) or {}
                    if not isinstance(loaded_settings, dict):
                        raise ValueError(f"Settings file must hold a mapping, got {type(loaded_settings).__name__}")
                    logger.info(f"Loaded settings from {self._settings_file}")
                else:
                    loaded_settings = {}
                    logger.info(f"No settings file found, using defaults")

                # Start with defaults and update with loaded values
                self._settings = self.DEFAULT_SETTINGS.copy()
                self._settings.update(loaded_settings)

                # Keep delays and difficulty within valid values
                for key in ('match_delay', 'mismatch_delay'):
                    original = self._settings[key]
                    self._settings[key] = self._clamp_delay(original, self.DEFAULT_SETTINGS[key])
                    if self._settings[key] != original:
                        logger.info(f"Setting '{key}' adjusted from {original!r} to {self._settings[key]}")

                self._settings['difficulty'] = Difficulty.parse(self._settings['difficulty']).value

                logger.debug(f"Current settings: {self._settings}")

            except Exception as e:
                logger.error(f"Failed to load settings: {e}", exc_info=True)
                self._settings = self.DEFAULT_SETTINGS.copy()

    def _save_settings(self) -> bool:
        """
        Save current settings to file.

        Returns:
            True if successful, False otherwise
        """
        try:
            # Ensure directory exists
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)

            # Write settings to YAML
            with open(self._settings_file, 'w') as f:
                yaml.dump(self._settings, f, default_flow_style=False)

            logger.debug(f"Settings saved to {self._settings_file}")
            return True

        except Exception as e:
            logger.error(f"Failed to save settings: {e}", exc_info=True)
            return False

    @classmethod
    def _clamp_delay(cls, value: Any, default: float) -> float:
        try:
            delay = float(value)
        except (TypeError, ValueError):
            return default
        return max(0.0, min(cls.MAX_DELAY, delay))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        with self._lock:
            return self._settings.get(key, default)

    def set(self, key: str, value: Any, save: bool = True) -> bool:
        """
        Set a setting value.

        Args:
            key: Setting key
            value: Setting value
            save: Whether to immediately save to disk

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            self._settings[key] = value
            logger.debug(f"Setting '{key}' = {value}")

            if save:
                return self._save_settings()
            return True

    def get_difficulty(self) -> Difficulty:
        """Difficulty selected in the last session."""
        return Difficulty.parse(self.get('difficulty'))

    def set_difficulty(self, difficulty: Difficulty) -> bool:
        """
        Remember the selected difficulty.

        Returns:
            True if successful, False otherwise
        """
        return self.set('difficulty', Difficulty.parse(difficulty).value, save=True)

    def get_match_delay(self) -> float:
        return self.get('match_delay', self.DEFAULT_SETTINGS['match_delay'])

    def get_mismatch_delay(self) -> float:
        return self.get('mismatch_delay', self.DEFAULT_SETTINGS['mismatch_delay'])

    def set_delays(self, match_delay: float, mismatch_delay: float) -> bool:
        """
        Set both resolution delays, clamped to 0.0..MAX_DELAY, and save.

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            self._settings['match_delay'] = self._clamp_delay(match_delay, self.DEFAULT_SETTINGS['match_delay'])
            self._settings['mismatch_delay'] = self._clamp_delay(mismatch_delay, self.DEFAULT_SETTINGS['mismatch_delay'])
            return self._save_settings()

    def reset_to_defaults(self) -> bool:
        """
        Reset all settings to defaults.

        Best scores are kept.

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            saved_scores = self._settings.get(BEST_SCORES_KEY)
            self._settings = self.DEFAULT_SETTINGS.copy()
            if saved_scores is not None:
                self._settings[BEST_SCORES_KEY] = saved_scores
            logger.info("Settings reset to defaults")
            return self._save_settings()
