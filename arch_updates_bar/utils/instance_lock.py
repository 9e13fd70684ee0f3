"""
Instance locking to keep a single status-bar module running per user.

Two copies would both spawn checkupdates on every interval and interleave
their output, so the second one exits at startup.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import fcntl
import json
import os
import time
from pathlib import Path
from typing import Optional, Dict, Any, TextIO, Union

import psutil  # type: ignore[import-untyped]

from ..constants import APP_NAME, get_runtime_dir
from ..exceptions import ArchUpdatesBarError
from .logger import get_logger

logger = get_logger(__name__)

LOCK_FILE_VERSION = "1.0"


class InstanceLockError(ArchUpdatesBarError):
    """Raised when instance lock operations fail."""
    pass


class InstanceAlreadyRunningError(InstanceLockError):
    """Raised when another instance is already running."""
    pass


class InstanceLock:
    """
    File-based instance lock using fcntl.

    The kernel drops the flock when the holder dies, so a leftover lock file
    never blocks a new instance by itself; the recorded PID only feeds the
    error message.
    """

    def __init__(self, app_name: str = APP_NAME,
                 lock_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize instance lock.

        Args:
            app_name: Application name for lock file
            lock_dir: Directory for lock files (defaults to $XDG_RUNTIME_DIR)
        """
        self.app_name = app_name
        self.lock_file_path = Path(lock_dir or get_runtime_dir()) / f"{app_name}.lock"
        self.lock_file: Optional[TextIO] = None
        self.locked = False
        self.pid = os.getpid()

    def acquire(self) -> bool:
        """
        Acquire the instance lock without blocking.

        Returns:
            True once the lock is held

        Raises:
            InstanceAlreadyRunningError: If another instance is running
            InstanceLockError: If lock operation fails
        """
        if self.locked:
            return True

        try:
            self.lock_file_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
            fd = os.open(str(self.lock_file_path), os.O_CREAT | os.O_RDWR, 0o600)
            self.lock_file = os.fdopen(fd, 'r+')
        except OSError as e:
            raise InstanceLockError(f"Failed to open lock file {self.lock_file_path}: {e}")

        try:
            fcntl.flock(self.lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            existing_pid = self._get_existing_pid()
            self._close_lock_file()
            raise InstanceAlreadyRunningError(
                f"Another instance of {self.app_name} is already running "
                f"(PID: {existing_pid or 'unknown'})"
            )
        except OSError as e:
            self._close_lock_file()
            raise InstanceLockError(f"Failed to acquire instance lock: {e}")

        lock_data = {
            'pid': self.pid,
            'timestamp': time.time(),
            'version': LOCK_FILE_VERSION,
            'app_name': self.app_name,
        }
        self.lock_file.seek(0)
        self.lock_file.truncate()
        json.dump(lock_data, self.lock_file)
        self.lock_file.flush()

        self.locked = True
        logger.info(f"Acquired instance lock {self.lock_file_path} - PID: {self.pid}")
        return True

    def release(self) -> None:
        """Release the instance lock."""
        if not self.locked:
            return

        if self.lock_file is not None:
            try:
                fcntl.flock(self.lock_file.fileno(), fcntl.LOCK_UN)
            except OSError as e:
                logger.debug(f"Could not unlock {self.lock_file_path}: {e}")
        self._close_lock_file()

        try:
            self.lock_file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Could not remove lock file: {e}")

        self.locked = False
        logger.info("Released instance lock")

    def _close_lock_file(self) -> None:
        if self.lock_file is not None:
            try:
                self.lock_file.close()
            except OSError:
                pass
            self.lock_file = None

    def _get_lock_data(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.lock_file_path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError):
            return None
        if isinstance(data, dict) and 'pid' in data:
            return data
        return None

    def _get_existing_pid(self) -> Optional[int]:
        """
        Get PID of the running instance from the lock file.

        Returns:
            PID if recorded and alive, None otherwise
        """
        data = self._get_lock_data()
        if not data or not isinstance(data.get('pid'), int):
            return None
        pid = data['pid']
        if not psutil.pid_exists(pid):
            return None
        return pid

    def __enter__(self):
        """Context manager entry."""
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.release()
