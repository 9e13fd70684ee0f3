"""
Status-bar payload rendering.

One JSON object per line in the format read by waybar custom modules
(``return-type: json``): text, alt, class, tooltip and percentage.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import html
import json
import sys
from typing import Any, Dict, TextIO, Optional

from .constants import CHECKING_TEXT, CHECKING_TOOLTIP, ERROR_TEXT
from .models import AppConfig, DisplayKind, DisplayState, UpdateSnapshot


def severity_class(count: int, config: AppConfig) -> str:
    """Map an update count onto the configured thresholds."""
    if count >= config.critical_threshold:
        return "critical"
    if count >= config.warning_threshold:
        return "warning"
    return "normal"


def _icon_key(count: int, severity: str) -> str:
    if count == 0:
        return "no-updates"
    if severity == "normal":
        return "updates"
    return f"updates-{severity}"


def _snapshot_tooltip(snapshot: UpdateSnapshot, stale: bool) -> str:
    if snapshot.count == 0:
        lines = ["No pending updates"]
    else:
        heading = "1 pending update" if snapshot.count == 1 else f"{snapshot.count} pending updates"
        lines = [heading, ""]
        # Tooltips are Pango markup; "->" in entries must be escaped
        lines.extend(html.escape(name, quote=False) for name in snapshot.package_names)
    if snapshot.fetched_at is not None:
        lines.append("")
        lines.append(f"Checked at {snapshot.fetched_at.strftime('%H:%M')}")
    if stale:
        lines.append("Last check failed, showing previous result")
    return "\n".join(lines)


def build_payload(state: DisplayState, config: AppConfig) -> Dict[str, Any]:
    """Build the payload dictionary for a display state."""
    if state.kind is DisplayKind.CHECKING:
        return {
            "text": CHECKING_TEXT,
            "alt": "checking",
            "class": "checking",
            "tooltip": CHECKING_TOOLTIP,
        }

    if state.kind is DisplayKind.ERROR:
        return {
            "text": ERROR_TEXT,
            "alt": "error",
            "class": "error",
            "tooltip": html.escape(f"Update check failed: {state.reason}", quote=False),
        }

    snapshot = state.snapshot
    severity = severity_class(snapshot.count, config)
    css_class: Any = [severity, "stale"] if state.stale else severity
    return {
        "text": str(snapshot.count),
        "alt": _icon_key(snapshot.count, severity),
        "class": css_class,
        "tooltip": _snapshot_tooltip(snapshot, state.stale),
        "percentage": min(100, snapshot.count * 100 // config.critical_threshold),
    }


def render(state: DisplayState, config: AppConfig) -> str:
    """
    Render a display state as a single JSON line (without newline).

    Identical inputs always produce byte-identical output.
    """
    return json.dumps(
        build_payload(state, config),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


class OutputEmitter:
    """Writes rendered states to the bar, one flushed line per tick."""

    def __init__(self, config: AppConfig, stream: Optional[TextIO] = None) -> None:
        self.config = config
        self.stream = stream if stream is not None else sys.stdout

    def emit(self, state: DisplayState) -> str:
        """Write one payload line and flush it."""
        line = render(state, self.config)
        self.stream.write(line + "\n")
        self.stream.flush()
        return line
