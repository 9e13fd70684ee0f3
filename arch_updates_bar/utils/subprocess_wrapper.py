"""
Secure subprocess wrapper to prevent command injection and handle errors properly.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import re
import stat
import subprocess
import threading
from typing import List, Optional, Dict, Any

from .logger import get_logger

logger = get_logger(__name__)


class SecureSubprocess:
    """Secure wrapper for subprocess operations with command whitelisting."""

    # Commands this application is allowed to execute
    ALLOWED_COMMANDS: Dict[str, Dict[str, Any]] = {
        'checkupdates': {
            'description': 'List pending package updates (pacman-contrib)',
            'required': True,
        },
    }

    STANDARD_PATHS = ['/usr/bin', '/bin', '/usr/local/bin', '/usr/sbin', '/sbin']

    # Cache for validated command paths
    _command_path_cache: Dict[str, str] = {}
    _validation_lock = threading.Lock()

    @classmethod
    def _get_search_paths(cls) -> List[str]:
        """PATH directories followed by the standard system locations."""
        path_env = os.environ.get('PATH', '')
        paths = [p.strip() for p in path_env.split(os.pathsep) if p.strip()]
        for std_path in cls.STANDARD_PATHS:
            if std_path not in paths and os.path.isdir(std_path):
                paths.append(std_path)
        return paths

    @classmethod
    def _find_command_path(cls, command: str) -> Optional[str]:
        """
        Find the absolute path of a command.

        Args:
            command: Command name to find

        Returns:
            Absolute path if found and valid, None otherwise
        """
        with cls._validation_lock:
            cached_path = cls._command_path_cache.get(command)
            if cached_path:
                if cls._validate_command_security(cached_path):
                    return cached_path
                del cls._command_path_cache[command]

            for path_dir in cls._get_search_paths():
                full_path = os.path.join(path_dir, command)
                if cls._validate_command_security(full_path):
                    cls._command_path_cache[command] = full_path
                    logger.debug(f"Found command {command} at {full_path}")
                    return full_path

            logger.warning(f"Command {command} not found in system PATH")
            return None

    @classmethod
    def _validate_command_security(cls, command_path: str) -> bool:
        """
        Validate command security properties.

        Args:
            command_path: Full path to command

        Returns:
            True if command passes security validation
        """
        try:
            if not (os.path.isfile(command_path) and os.access(command_path, os.X_OK)):
                return False

            stat_info = os.stat(command_path)
            if stat_info.st_mode & (stat.S_IWGRP | stat.S_IWOTH):
                logger.warning(f"Command {command_path} has unsafe permissions")
                return False
            return True
        except OSError as e:
            logger.debug(f"Error validating command {command_path}: {e}")
            return False

    @classmethod
    def validate_command(cls, cmd: List[str]) -> bool:
        """
        Validate that a command is safe to execute.

        Args:
            cmd: Command as list of arguments

        Returns:
            True if command is valid

        Raises:
            ValueError: If command is invalid
        """
        if not cmd:
            raise ValueError("Empty command")

        cmd_name = os.path.basename(cmd[0])
        if cmd_name not in cls.ALLOWED_COMMANDS:
            raise ValueError(f"Command '{cmd[0]}' not in allowed list")

        for arg in cmd[1:]:
            if '\x00' in arg:
                raise ValueError("Null byte in command argument")
        return True

    @staticmethod
    def sanitize_package_name(name: str) -> str:
        """
        Sanitize a package name.

        Args:
            name: Package name to sanitize

        Returns:
            Sanitized package name

        Raises:
            ValueError: If package name is invalid
        """
        if not re.match(r'^[a-zA-Z0-9@\-_+.]+$', name):
            raise ValueError(f"Invalid package name: {name}")
        if len(name) > 255:
            raise ValueError(f"Package name too long: {name}")
        return name

    @classmethod
    def run(
        cls,
        cmd: List[str],
        capture_output: bool = True,
        text: bool = True,
        check: bool = False,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
        **kwargs: Any
    ) -> subprocess.CompletedProcess:
        """
        Run a whitelisted command without a shell.

        Args:
            cmd: Command to run
            capture_output: Whether to capture output
            text: Whether to decode output as text
            check: Whether to raise exception on non-zero exit
            timeout: Timeout in seconds
            env: Environment variables (LC_ALL=C is always forced)
            **kwargs: Additional arguments for subprocess.run

        Returns:
            CompletedProcess instance

        Raises:
            FileNotFoundError: If the command cannot be located
            subprocess.TimeoutExpired: If the command exceeds timeout
        """
        cls.validate_command(cmd)

        command_path = cls._find_command_path(cmd[0])
        if command_path is None:
            raise FileNotFoundError(f"Command not found: {cmd[0]}")
        full_cmd = [command_path] + list(cmd[1:])

        # Force English locale for consistent output parsing
        run_env = dict(env) if env is not None else os.environ.copy()
        run_env['LC_ALL'] = 'C'

        # Never use shell=True
        kwargs.pop('shell', None)

        logger.debug(f"Running command: {' '.join(full_cmd)}")
        try:
            result = subprocess.run(
                full_cmd,
                capture_output=capture_output,
                text=text,
                check=check,
                timeout=timeout,
                env=run_env,
                **kwargs
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
            raise
        except subprocess.CalledProcessError as e:
            logger.error(f"Command failed with code {e.returncode}: {' '.join(cmd)}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            raise

        if result.returncode != 0:
            logger.debug(f"Command returned non-zero: {result.returncode}")
        return result

    @classmethod
    def check_command_exists(cls, command: str) -> bool:
        """
        Check if a command exists and is accessible.

        Args:
            command: Command name to check

        Returns:
            True if command exists and is valid
        """
        return cls._find_command_path(command) is not None

    @classmethod
    def clear_cache(cls) -> None:
        """Forget resolved command paths."""
        with cls._validation_lock:
            cls._command_path_cache.clear()
