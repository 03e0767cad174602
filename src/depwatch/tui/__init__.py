"""Interactive TUI for depwatch (requires the ``tui`` extra)."""

from depwatch.tui.app import DepwatchApp, run_tui

__all__ = ["DepwatchApp", "run_tui"]
