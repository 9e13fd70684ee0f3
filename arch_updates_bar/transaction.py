"""
Detection of running pacman transactions.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import time
from typing import Callable, Optional

import psutil  # type: ignore[import-untyped]

from .constants import (
    PACMAN_LOCK_PATH, PACMAN_LOCAL_DB_DIR, PACMAN_PROCESS_NAMES,
    STALE_LOCK_SECONDS,
)
from .exceptions import DetectorError
from .models import TransactionState
from .utils.logger import get_logger

logger = get_logger(__name__)


def pacman_process_running() -> bool:
    """Scan the process table for a running pacman."""
    for proc in psutil.process_iter(['name']):
        try:
            if proc.info['name'] in PACMAN_PROCESS_NAMES:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False


class PacmanTransactionDetector:
    """
    Reports whether pacman is currently changing the system.

    A transaction is active while pacman's database lock exists. A change to
    the local package database since the previous probe is also reported as
    active for that one probe, so transactions shorter than a tick still
    cause a refresh. A lock older than STALE_LOCK_SECONDS with no pacman
    process alive is left over from a crash and is ignored.
    """

    def __init__(self,
                 lock_path: str = PACMAN_LOCK_PATH,
                 local_db_dir: Optional[str] = PACMAN_LOCAL_DB_DIR,
                 process_check: Callable[[], bool] = pacman_process_running,
                 clock: Callable[[], float] = time.time) -> None:
        self.lock_path = lock_path
        self.local_db_dir = local_db_dir
        self._process_check = process_check
        self._clock = clock
        self._last_local_mtime: Optional[float] = None
        self._stale_lock_reported = False

    def _stat(self, path: str) -> Optional[os.stat_result]:
        try:
            return os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise DetectorError(f"Cannot stat {path}: {e}")

    def _lock_is_stale(self, lock_stat: os.stat_result) -> bool:
        if self._clock() - lock_stat.st_mtime < STALE_LOCK_SECONDS:
            return False
        try:
            running = self._process_check()
        except psutil.Error as e:
            raise DetectorError(f"Process scan failed: {e}")
        return not running

    def _local_db_changed(self) -> bool:
        if not self.local_db_dir:
            return False
        db_stat = self._stat(self.local_db_dir)
        if db_stat is None:
            return False
        previous, self._last_local_mtime = self._last_local_mtime, db_stat.st_mtime
        return previous is not None and db_stat.st_mtime != previous

    def probe(self) -> TransactionState:
        """
        Sample the transaction state.

        Raises:
            DetectorError: If the pacman state cannot be read
        """
        db_changed = self._local_db_changed()

        lock_stat = self._stat(self.lock_path)
        if lock_stat is not None:
            if not self._lock_is_stale(lock_stat):
                self._stale_lock_reported = False
                return TransactionState.IN_PROGRESS
            if not self._stale_lock_reported:
                logger.warning(f"Ignoring stale pacman lock {self.lock_path}: no pacman process running")
                self._stale_lock_reported = True
        else:
            self._stale_lock_reported = False

        if db_changed:
            logger.debug(f"{self.local_db_dir} changed since last probe")
            return TransactionState.IN_PROGRESS
        return TransactionState.IDLE

    def is_transaction_active(self) -> bool:
        """Whether a package transaction is in progress."""
        return self.probe() is TransactionState.IN_PROGRESS
