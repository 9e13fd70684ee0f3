"""
In-memory status cache owned by the scheduler loop.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from typing import Optional

from ..exceptions import FetchError
from ..models import UpdateSnapshot
from .logger import get_logger

logger = get_logger(__name__)


class StatusCache:
    """
    Last known update snapshot plus the scheduler clock.

    Only the scheduler mutates it, always from its single control thread.
    Nothing is persisted; a restart begins with an unknown snapshot.
    """

    def __init__(self) -> None:
        self.snapshot: UpdateSnapshot = UpdateSnapshot.unknown()
        self.last_full_check: Optional[float] = None
        self.last_error: Optional[FetchError] = None

    @property
    def has_snapshot(self) -> bool:
        """Whether a full check has ever succeeded."""
        return self.snapshot.is_known

    @property
    def is_stale(self) -> bool:
        """Whether the latest full check failed after an earlier success."""
        return self.has_snapshot and self.last_error is not None

    def interval_elapsed(self, now: float, interval: float) -> bool:
        """Whether a scheduled full check is due at monotonic time ``now``."""
        if self.last_full_check is None:
            return True
        return now - self.last_full_check >= interval

    def store(self, snapshot: UpdateSnapshot, now: float) -> None:
        """Replace the snapshot after a successful full check."""
        self.snapshot = snapshot
        self.last_full_check = now
        self.last_error = None
        logger.debug(f"Cached snapshot with {snapshot.count} updates")

    def record_failure(self, error: FetchError, now: float) -> None:
        """Keep the previous snapshot and remember why the refresh failed."""
        self.last_full_check = now
        self.last_error = error
