"""Custom widgets for depwatch TUI."""

from rich.markup import escape
from textual.reactive import reactive
from textual.widgets import Static

from depwatch.display import format_mb


class SizeSummary(Static):
    """Selected and total size of the current candidate list."""

    selected_mb: reactive[float] = reactive(0.0)
    total_mb: reactive[float] = reactive(0.0)
    selected_count: reactive[int] = reactive(0)

    def update_sizes(self, selected_mb: float, total_mb: float, selected_count: int) -> None:
        self.selected_mb = selected_mb
        self.total_mb = total_mb
        self.selected_count = selected_count

    def render(self) -> str:
        if not self.selected_count:
            selected = "[dim]No folders selected[/dim]"
        else:
            selected = (
                f"[bold]{self.selected_count}[/bold] selected: "
                f"[cyan]{format_mb(self.selected_mb)}[/cyan]"
            )
        return f"Selected Size: {selected}\n[bold]Total Size:[/bold] {format_mb(self.total_mb)}"


class RootLabel(Static):
    """Shows which directory is being scanned."""

    directory: reactive[str] = reactive("")

    def render(self) -> str:
        if not self.directory:
            return "[dim]Type a directory below and press Enter[/dim]"
        return f"[bold]Selected Directory:[/bold] {escape(self.directory)}"
