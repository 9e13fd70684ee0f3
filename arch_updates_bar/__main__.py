"""
Allow running the module with ``python -m arch_updates_bar``.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import sys

from .main import main

sys.exit(main())
