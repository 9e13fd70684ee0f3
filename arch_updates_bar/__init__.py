"""
Arch Updates Bar - status-bar module for pending Arch Linux updates

Polls checkupdates on a schedule, watches for running pacman transactions
and streams a JSON status line per tick for waybar-style custom modules.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

__version__ = "1.0.0"
__author__ = "NeatCode Labs"
__email__ = "neatcodelabs@gmail.com"
