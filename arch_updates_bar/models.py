"""
Data models for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple, Optional, Dict, Any
from enum import Enum

from .constants import (
    DEFAULT_INTERVAL_SECONDS, DEFAULT_WARNING_THRESHOLD,
    DEFAULT_CRITICAL_THRESHOLD,
)


class TransactionState(Enum):
    """State of the package manager, derived fresh on each tick."""
    IDLE = "idle"
    IN_PROGRESS = "in_progress"


class DisplayKind(Enum):
    """Variant tag of a DisplayState."""
    NORMAL = "normal"
    CHECKING = "checking"
    ERROR = "error"


class SchedulerPhase(Enum):
    """Phase of the scheduler state machine."""
    NORMAL = "normal"
    CHECKING = "checking"


class TickAction(Enum):
    """Side effect requested by a scheduler transition."""
    EMIT_CACHED = "emit_cached"
    EMIT_CHECKING = "emit_checking"
    FULL_CHECK = "full_check"


@dataclass(frozen=True)
class UpdateSnapshot:
    """Pending updates as reported by one successful full check."""
    count: int = 0
    package_names: Tuple[str, ...] = ()
    fetched_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate snapshot data."""
        if self.count < 0:
            raise ValueError("Update count cannot be negative")
        if len(self.package_names) != self.count:
            raise ValueError(
                f"Update count {self.count} does not match "
                f"{len(self.package_names)} package entries"
            )

    @classmethod
    def unknown(cls) -> 'UpdateSnapshot':
        """Snapshot held before the first successful full check."""
        return cls()

    @classmethod
    def from_entries(cls, entries, fetched_at: Optional[datetime] = None) -> 'UpdateSnapshot':
        """Create a snapshot from an ordered sequence of package entries."""
        names = tuple(entries)
        return cls(
            count=len(names),
            package_names=names,
            fetched_at=fetched_at or datetime.now(),
        )

    @property
    def is_known(self) -> bool:
        """Whether this snapshot came from a real full check."""
        return self.fetched_at is not None


@dataclass(frozen=True)
class DisplayState:
    """The single status value rendered for the bar."""
    kind: DisplayKind
    snapshot: Optional[UpdateSnapshot] = None
    reason: Optional[str] = None
    stale: bool = False

    def __post_init__(self) -> None:
        """Reject mixed states."""
        if self.kind is DisplayKind.NORMAL and self.snapshot is None:
            raise ValueError("Normal display state requires a snapshot")
        if self.kind is not DisplayKind.NORMAL and self.snapshot is not None:
            raise ValueError(f"{self.kind.value} display state cannot carry a snapshot")
        if self.kind is DisplayKind.ERROR and not self.reason:
            raise ValueError("Error display state requires a reason")

    @classmethod
    def normal(cls, snapshot: UpdateSnapshot, stale: bool = False) -> 'DisplayState':
        return cls(kind=DisplayKind.NORMAL, snapshot=snapshot, stale=stale)

    @classmethod
    def checking(cls) -> 'DisplayState':
        return cls(kind=DisplayKind.CHECKING)

    @classmethod
    def error(cls, reason: str) -> 'DisplayState':
        return cls(kind=DisplayKind.ERROR, reason=reason)


@dataclass(frozen=True)
class TickSignals:
    """Inputs sampled at the start of a tick."""
    transaction_active: bool
    interval_elapsed: bool


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""
    interval_in_seconds: int = DEFAULT_INTERVAL_SECONDS
    warning_threshold: int = DEFAULT_WARNING_THRESHOLD
    critical_threshold: int = DEFAULT_CRITICAL_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "interval_in_seconds": self.interval_in_seconds,
            "warning_threshold": self.warning_threshold,
            "critical_threshold": self.critical_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """Create from dictionary, falling back to defaults for missing keys."""
        return cls(
            interval_in_seconds=data.get("interval_in_seconds", DEFAULT_INTERVAL_SECONDS),
            warning_threshold=data.get("warning_threshold", DEFAULT_WARNING_THRESHOLD),
            critical_threshold=data.get("critical_threshold", DEFAULT_CRITICAL_THRESHOLD),
        )
