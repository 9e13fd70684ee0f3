"""
Application constants for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
from pathlib import Path

# Application info
APP_NAME = "arch-updates-bar"
APP_VERSION = "1.0.0"

# File permissions (octal)
CONFIG_DIR_PERMISSIONS = 0o700  # rwx------
CONFIG_FILE_PERMISSIONS = 0o600  # rw-------

# Default values
DEFAULT_INTERVAL_SECONDS = 1200
DEFAULT_WARNING_THRESHOLD = 25
DEFAULT_CRITICAL_THRESHOLD = 100
MAX_CONFIG_FILE_BYTES = 64 * 1024

# Scheduling (seconds)
FAST_TICK_SECONDS = 5
FETCH_TIMEOUT_SECONDS = 120
STALE_LOCK_SECONDS = 60

# External commands
UPDATE_COMMAND = "checkupdates"
CHECKUPDATES_EXIT_UPDATES = 0
CHECKUPDATES_EXIT_NO_UPDATES = 2

# Pacman state
PACMAN_LOCK_PATH = "/var/lib/pacman/db.lck"
PACMAN_LOCAL_DB_DIR = "/var/lib/pacman/local"
PACMAN_PROCESS_NAMES = frozenset({"pacman"})

# Bar payload text
CHECKING_TEXT = "…"
CHECKING_TOOLTIP = "Package transaction in progress"
ERROR_TEXT = "?"


# Paths
def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return Path.home() / ".config" / APP_NAME


def get_cache_dir() -> Path:
    """Get the cache directory path."""
    return Path.home() / ".cache" / APP_NAME


def get_runtime_dir() -> Path:
    """Get the per-user runtime directory, falling back to the cache dir."""
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        return Path(runtime_dir)
    return get_cache_dir()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_config_dir() / "config.json"


def get_default_log_path() -> Path:
    """Get the default log file path."""
    return get_runtime_dir() / f"{APP_NAME}.log"
