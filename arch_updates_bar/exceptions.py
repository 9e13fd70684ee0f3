"""
Custom exceptions for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from enum import Enum


class ArchUpdatesBarError(Exception):
    """Base exception for all Arch Updates Bar errors."""

    pass


class ConfigurationError(ArchUpdatesBarError):
    """Raised when configuration is invalid."""

    pass


class FetchErrorKind(Enum):
    """Why a full update check failed."""
    TIMEOUT = "timeout"
    COMMAND_FAILED = "command_failed"
    PARSE_ERROR = "parse_error"


class FetchError(ArchUpdatesBarError):
    """Raised when the update source cannot produce a snapshot."""

    def __init__(self, kind: FetchErrorKind, message: str) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.args[0]} ({self.kind.value})"


class DetectorError(ArchUpdatesBarError):
    """Raised when transaction state cannot be determined."""

    pass


class CommandNotFoundError(ArchUpdatesBarError):
    """Raised when a required external command is missing."""

    pass
