"""
Pending update source backed by checkupdates.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import subprocess
from datetime import datetime
from typing import List, Optional, Callable

from .constants import (
    UPDATE_COMMAND, FETCH_TIMEOUT_SECONDS,
    CHECKUPDATES_EXIT_UPDATES, CHECKUPDATES_EXIT_NO_UPDATES,
)
from .exceptions import FetchError, FetchErrorKind
from .models import UpdateSnapshot
from .utils.logger import get_logger
from .utils.subprocess_wrapper import SecureSubprocess

logger = get_logger(__name__)


def parse_update_lines(output: str) -> List[str]:
    """
    Split checkupdates output into entries.

    Each non-blank line is one entry ("name old -> new"); order is kept
    exactly as printed.

    Raises:
        FetchError: If a line does not start with a valid package name
    """
    entries = []
    for line in output.splitlines():
        entry = line.strip()
        if not entry:
            continue
        try:
            SecureSubprocess.sanitize_package_name(entry.split()[0])
        except ValueError:
            raise FetchError(
                FetchErrorKind.PARSE_ERROR,
                f"Unexpected line in {UPDATE_COMMAND} output: {entry!r}"
            )
        entries.append(entry)
    return entries


class CheckupdatesSource:
    """Fetches the list of pending updates without touching the system database."""

    def __init__(self, timeout: float = FETCH_TIMEOUT_SECONDS,
                 now: Optional[Callable[[], datetime]] = None) -> None:
        """
        Initialize the update source.

        Args:
            timeout: Upper bound in seconds for one checkupdates run
            now: Wall clock used to stamp snapshots
        """
        self.timeout = timeout
        self._now = now or datetime.now

    def fetch_updates(self) -> UpdateSnapshot:
        """
        Run one full check.

        checkupdates exits 0 when it printed updates, 2 when there are
        none and 1 on failure, so a non-zero code is not always an error.

        Returns:
            A fresh UpdateSnapshot

        Raises:
            FetchError: On timeout, failed command or unparseable output
        """
        logger.info("Checking for package updates...")
        try:
            result = SecureSubprocess.run(
                [UPDATE_COMMAND],
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"{UPDATE_COMMAND} did not finish within {self.timeout}s"
            )
        # UnicodeDecodeError is a ValueError subclass
        except UnicodeDecodeError as e:
            raise FetchError(FetchErrorKind.PARSE_ERROR, f"Undecodable {UPDATE_COMMAND} output: {e}")
        except (FileNotFoundError, ValueError) as e:
            raise FetchError(FetchErrorKind.COMMAND_FAILED, f"Cannot run {UPDATE_COMMAND}: {e}")
        except OSError as e:
            raise FetchError(FetchErrorKind.COMMAND_FAILED, f"Failed to start {UPDATE_COMMAND}: {e}")

        if result.returncode == CHECKUPDATES_EXIT_NO_UPDATES:
            logger.info("No pending updates")
            return UpdateSnapshot.from_entries([], fetched_at=self._now())

        if result.returncode != CHECKUPDATES_EXIT_UPDATES:
            error_msg = result.stderr.strip() if result.stderr else "Unknown error"
            raise FetchError(
                FetchErrorKind.COMMAND_FAILED,
                f"{UPDATE_COMMAND} exited with code {result.returncode}: {error_msg}"
            )

        entries = parse_update_lines(result.stdout or "")
        logger.info(f"Found {len(entries)} pending updates")
        return UpdateSnapshot.from_entries(entries, fetched_at=self._now())
