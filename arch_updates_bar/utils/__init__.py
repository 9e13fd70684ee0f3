"""
Utils package for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from .cache import StatusCache
from .logger import get_logger, setup_logging
from .subprocess_wrapper import SecureSubprocess
from .instance_lock import (
    InstanceLock,
    InstanceLockError,
    InstanceAlreadyRunningError,
)

__all__ = [
    "StatusCache",
    "get_logger",
    "setup_logging",
    "SecureSubprocess",
    "InstanceLock",
    "InstanceLockError",
    "InstanceAlreadyRunningError",
]
