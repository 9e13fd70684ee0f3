"""
Configuration management for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    CONFIG_DIR_PERMISSIONS, CONFIG_FILE_PERMISSIONS, MAX_CONFIG_FILE_BYTES,
    get_default_config_path,
)
from .exceptions import ConfigurationError
from .models import AppConfig
from .utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_KEYS = ("interval_in_seconds", "warning_threshold", "critical_threshold")


def validate_config_data(data: Any) -> Dict[str, int]:
    """
    Validate a parsed configuration document.

    Args:
        data: Parsed JSON value

    Returns:
        Dictionary holding the known keys that were present

    Raises:
        ConfigurationError: If the document or any known value is malformed
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    values: Dict[str, int] = {}
    for key in CONFIG_KEYS:
        if key not in data:
            continue
        value = data[key]
        # bool is an int subclass; "true" is not a threshold
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {value}")
        values[key] = value

    for key in data:
        if key not in CONFIG_KEYS:
            logger.warning(f"Ignoring unknown configuration key: {key}")

    return values


class Config:
    """Loads the configuration file once at startup."""

    def __init__(self, config_file: Optional[str] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file

        Raises:
            ConfigurationError: If the file exists but cannot be used
        """
        self.config_file = config_file or str(get_default_config_path())
        self.app_config = self._load_config()

    def _load_config(self) -> AppConfig:
        """
        Load configuration from file, creating a default one if missing.

        Returns:
            AppConfig instance
        """
        if not os.path.exists(self.config_file):
            app_config = AppConfig()
            self._create_default_config(app_config)
            return app_config

        try:
            file_size = os.path.getsize(self.config_file)
            if file_size > MAX_CONFIG_FILE_BYTES:
                raise ConfigurationError(f"Config file too large: {file_size} bytes")
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {self.config_file}: {e}")
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Config file {self.config_file} is not valid UTF-8: {e}")
        except PermissionError as e:
            raise ConfigurationError(f"Permission denied reading config file {self.config_file}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading config file {self.config_file}: {e}")

        app_config = AppConfig.from_dict(validate_config_data(data))
        if app_config.warning_threshold > app_config.critical_threshold:
            raise ConfigurationError(
                f"warning_threshold ({app_config.warning_threshold}) exceeds "
                f"critical_threshold ({app_config.critical_threshold})"
            )

        logger.info(f"Loaded configuration from {self.config_file}")
        return app_config

    def _create_default_config(self, app_config: AppConfig) -> None:
        """Write defaults so users have a file to edit; failure is not fatal."""
        try:
            self.save_config(app_config)
            logger.info(f"Created default config file at {self.config_file}")
        except ConfigurationError as e:
            logger.error(f"Failed to create default config file: {e}")

    def save_config(self, app_config: AppConfig) -> None:
        """
        Save configuration to file.

        Raises:
            ConfigurationError: If saving fails
        """
        try:
            config_dir = Path(self.config_file).parent
            config_dir.mkdir(parents=True, exist_ok=True)

            try:
                os.chmod(config_dir, CONFIG_DIR_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on config directory: {e}")

            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(app_config.to_dict(), f, indent=2)
                f.write("\n")

            try:
                os.chmod(self.config_file, CONFIG_FILE_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on config file: {e}")

        except PermissionError as e:
            raise ConfigurationError(f"Permission denied saving config: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to save config: {e}")
