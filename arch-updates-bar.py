#!/usr/bin/env python3
"""
Arch Updates Bar by NeatCode Labs
Streams the number of pending Arch Linux updates to waybar-style status bars
and switches to a "checking" state while pacman is running.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import sys

from arch_updates_bar.main import main

if __name__ == "__main__":
    sys.exit(main())
