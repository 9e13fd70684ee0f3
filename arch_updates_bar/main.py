"""
Main entry point for Arch Updates Bar.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import Config
from .constants import UPDATE_COMMAND, get_default_log_path
from .exceptions import ArchUpdatesBarError, CommandNotFoundError
from .output import OutputEmitter
from .scheduler import Scheduler
from .transaction import PacmanTransactionDetector
from .update_source import CheckupdatesSource
from .utils.instance_lock import InstanceLock
from .utils.logger import get_logger, setup_logging
from .utils.subprocess_wrapper import SecureSubprocess

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create command line argument parser.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='Arch Updates Bar - stream pending update status to a status bar'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Path to custom configuration file'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Emit a single status line and exit'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Write logs to this file (default: $XDG_RUNTIME_DIR/arch-updates-bar.log)'
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def verify_update_command() -> None:
    """
    Make sure checkupdates is installed.

    Raises:
        CommandNotFoundError: If the command cannot be found
    """
    if not SecureSubprocess.check_command_exists(UPDATE_COMMAND):
        raise CommandNotFoundError(
            f"{UPDATE_COMMAND} is not installed (it ships with pacman-contrib)"
        )
    logger.info(f"{UPDATE_COMMAND} is installed")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = create_parser().parse_args(argv)
    setup_logging(debug=args.debug, log_file=args.log_file or str(get_default_log_path()))

    try:
        verify_update_command()
        app_config = Config(args.config).app_config

        with InstanceLock():
            scheduler = Scheduler(
                config=app_config,
                source=CheckupdatesSource(),
                detector=PacmanTransactionDetector(),
                emitter=OutputEmitter(app_config),
            )
            scheduler.install_signal_handlers()
            scheduler.run(max_ticks=1 if args.once else None)
        return 0

    except ArchUpdatesBarError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
