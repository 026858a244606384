"""
Tests for SettingsManager.

Verifies persistent settings storage and retrieval.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

from memory_match.best_scores import BEST_SCORES_KEY
from memory_match.deck import Difficulty
from memory_match.settings_manager import SettingsManager


class TestSettingsManager(unittest.TestCase):
    """Test cases for SettingsManager."""

    def setUp(self):
        """Create temporary settings file for each test."""
        self.temp_file = tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False)
        self.temp_file.close()
        self.settings_path = Path(self.temp_file.name)

    def tearDown(self):
        """Clean up temporary file."""
        if self.settings_path.exists():
            self.settings_path.unlink()

    def test_defaults(self):
        """Test that defaults are loaded when no settings file exists."""
        temp_dir = Path(tempfile.mkdtemp())
        non_existent = temp_dir / "test_settings_nonexistent.yml"

        settings = SettingsManager(non_existent)

        self.assertEqual(settings.get_difficulty(), Difficulty.MEDIUM)
        self.assertEqual(settings.get_match_delay(), 0.5)
        self.assertEqual(settings.get_mismatch_delay(), 1.0)

        shutil.rmtree(temp_dir)

    def test_save_and_load_difficulty(self):
        """Test that difficulty is saved and can be loaded."""
        settings1 = SettingsManager(self.settings_path)
        result = settings1.set_difficulty(Difficulty.HARD)

        self.assertTrue(result, "set_difficulty should return True")

        settings2 = SettingsManager(self.settings_path)
        self.assertEqual(settings2.get_difficulty(), Difficulty.HARD)

    def test_unknown_stored_difficulty(self):
        """Test that an unknown difficulty in the file falls back to medium."""
        self.settings_path.write_text("difficulty: nightmare\n")

        settings = SettingsManager(self.settings_path)
        self.assertEqual(settings.get_difficulty(), Difficulty.MEDIUM)

    def test_delay_clamping(self):
        """Test that delays are clamped to 0.0..MAX_DELAY."""
        settings = SettingsManager(self.settings_path)

        settings.set_delays(10.0, -1.0)
        self.assertEqual(settings.get_match_delay(), SettingsManager.MAX_DELAY)
        self.assertEqual(settings.get_mismatch_delay(), 0.0)

    def test_delay_clamped_on_load(self):
        """Test that out-of-range delays in the file are clamped on startup."""
        self.settings_path.write_text("match_delay: 99\nmismatch_delay: fast\n")

        settings = SettingsManager(self.settings_path)
        self.assertEqual(settings.get_match_delay(), SettingsManager.MAX_DELAY)
        self.assertEqual(settings.get_mismatch_delay(), 1.0)

    def test_corrupt_file_uses_defaults(self):
        """Test that an unreadable settings file falls back to defaults."""
        self.settings_path.write_text("- just\n- a list\n")

        settings = SettingsManager(self.settings_path)
        self.assertEqual(settings.get_difficulty(), Difficulty.MEDIUM)
        self.assertIsNone(settings.get(BEST_SCORES_KEY))

    def test_generic_get_set(self):
        """Test generic get/set methods."""
        settings = SettingsManager(self.settings_path)

        settings.set('test_key', 'test_value')
        value = settings.get('test_key')

        self.assertEqual(value, 'test_value', "Should retrieve stored value")

        default_value = settings.get('nonexistent_key', 'default')
        self.assertEqual(default_value, 'default', "Should return default for missing key")

    def test_set_without_save(self):
        """Test that save=False keeps the value in memory only."""
        settings1 = SettingsManager(self.settings_path)
        settings1.set('volatile', 1, save=False)
        self.assertEqual(settings1.get('volatile'), 1)

        settings2 = SettingsManager(self.settings_path)
        self.assertIsNone(settings2.get('volatile'))

    def test_reset_to_defaults_keeps_best_scores(self):
        """Test resetting settings keeps saved best scores."""
        settings = SettingsManager(self.settings_path)

        settings.set_difficulty(Difficulty.EASY)
        settings.set(BEST_SCORES_KEY, '{"easy": {"moves": 3, "time": 10}}')

        result = settings.reset_to_defaults()
        self.assertTrue(result, "reset_to_defaults should return True")

        self.assertEqual(settings.get_difficulty(), Difficulty.MEDIUM)
        self.assertEqual(settings.get(BEST_SCORES_KEY), '{"easy": {"moves": 3, "time": 10}}')


if __name__ == '__main__':
    unittest.main()
