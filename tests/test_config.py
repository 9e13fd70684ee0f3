"""
Tests for configuration loading.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from arch_updates_bar.config import Config, validate_config_data
from arch_updates_bar.exceptions import ConfigurationError
from arch_updates_bar.models import AppConfig


class TestConfig(unittest.TestCase):
    """Test configuration file handling."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "arch-updates-bar" / "config.json"

    def tearDown(self) -> None:
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def write(self, content) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content)
        self.config_path.write_text(content, encoding="utf-8")

    def test_missing_file_uses_defaults_and_creates_it(self):
        config = Config(str(self.config_path))

        self.assertEqual(config.app_config, AppConfig())
        self.assertEqual(config.app_config.interval_in_seconds, 1200)
        self.assertEqual(config.app_config.warning_threshold, 25)
        self.assertEqual(config.app_config.critical_threshold, 100)
        self.assertTrue(self.config_path.exists())
        self.assertEqual(json.loads(self.config_path.read_text()), AppConfig().to_dict())
        self.assertEqual(os.stat(self.config_path).st_mode & 0o777, 0o600)

    def test_partial_file_fills_defaults(self):
        self.write({"interval_in_seconds": 600})

        app_config = Config(str(self.config_path)).app_config

        self.assertEqual(app_config.interval_in_seconds, 600)
        self.assertEqual(app_config.warning_threshold, 25)
        self.assertEqual(app_config.critical_threshold, 100)

    def test_full_file(self):
        self.write({"interval_in_seconds": 300, "warning_threshold": 5, "critical_threshold": 10})

        app_config = Config(str(self.config_path)).app_config

        self.assertEqual(app_config, AppConfig(300, 5, 10))

    def test_invalid_json_is_fatal(self):
        self.write("{interval_in_seconds = 1200")
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_non_utf8_file_is_fatal(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_bytes(b'{"warning_threshold": 1\xff}')
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_non_integer_value_is_fatal(self):
        self.write({"interval_in_seconds": "20m"})
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_boolean_value_is_fatal(self):
        self.write({"warning_threshold": True})
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_non_positive_value_is_fatal(self):
        self.write({"interval_in_seconds": 0})
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_inverted_thresholds_are_fatal(self):
        self.write({"warning_threshold": 200, "critical_threshold": 100})
        with self.assertRaises(ConfigurationError):
            Config(str(self.config_path))

    def test_unknown_keys_ignored(self):
        self.write({"theme": "dark", "warning_threshold": 30})
        app_config = Config(str(self.config_path)).app_config
        self.assertEqual(app_config.warning_threshold, 30)

    def test_non_object_document_is_fatal(self):
        with self.assertRaises(ConfigurationError):
            validate_config_data([1200, 25, 100])


if __name__ == '__main__':
    unittest.main()
