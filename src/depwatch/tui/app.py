"""Main TUI application for depwatch."""

from pathlib import Path

from textual.app import App
from textual.binding import Binding

from depwatch.config import Settings
from depwatch.controller import ScanController
from depwatch.tui.screens import MainScreen


class DepwatchApp(App):
    """Interactive node_modules cleanup application."""

    TITLE = "depwatch"
    SUB_TITLE = "node_modules cleanup"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("?", "help", "Help"),
    ]

    def __init__(self, settings: Settings | None = None, root: Path | None = None):
        super().__init__()
        self.settings = settings or Settings()
        self.initial_root = root
        self.controller = ScanController(
            self.call_from_thread,
            target_name=self.settings.target_name,
            max_workers=self.settings.max_workers,
        )

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        self.push_screen(MainScreen(self.controller, self.initial_root))

    def on_unmount(self) -> None:
        self.controller.shutdown(wait=False)

    def action_help(self) -> None:
        """Show help information."""
        self.notify(
            "Enter a directory and press Enter to scan, Space to select, D to delete selected, R to rescan",
            title="Help",
            timeout=5,
        )


def run_tui(settings: Settings | None = None, root: Path | None = None) -> None:
    """Run the interactive TUI.

    Args:
        settings: Scan and delete options
        root: Directory to scan as soon as the app starts
    """
    app = DepwatchApp(settings=settings, root=root)
    app.run()
