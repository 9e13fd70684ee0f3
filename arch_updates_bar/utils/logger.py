"""
Logging configuration for Arch Updates Bar.

Stdout carries the status-bar payload, so every handler here writes to
stderr or to a file.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path
from typing import Optional, Dict

from colorama import Fore, Style


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, '')
        original = record.levelname
        record.levelname = f"{log_color}{original}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_log_file_path: Optional[str] = None
_debug = False
_logger_instances: Dict[str, logging.Logger] = {}
_global_state_lock = threading.RLock()


def _make_console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if sys.stderr.isatty():
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _make_file_handler(log_file: str, level: int) -> Optional[logging.Handler]:
    try:
        log_dir = Path(log_file).parent
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
        os.chmod(log_file, 0o600)
    except OSError:
        # Console logging still works; don't recurse into the logger here
        return None
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def _configure(logger: logging.Logger) -> None:
    level = logging.DEBUG if _debug else logging.INFO
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(_make_console_handler(level))
    if _log_file_path:
        file_handler = _make_file_handler(_log_file_path, level)
        if file_handler is not None:
            logger.addHandler(file_handler)
    logger.propagate = False


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set global logging options and reconfigure every known logger.

    Args:
        debug: Enable debug logging
        log_file: Optional log file path
    """
    global _debug, _log_file_path
    with _global_state_lock:
        _debug = debug
        _log_file_path = log_file
        for logger in _logger_instances.values():
            _configure(logger)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance with thread safety.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    with _global_state_lock:
        if name in _logger_instances:
            return _logger_instances[name]

        logger = logging.getLogger(name)
        _configure(logger)
        _logger_instances[name] = logger
        return logger
