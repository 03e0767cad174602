"""TUI screens for depwatch."""

from pathlib import Path

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, LoadingIndicator, Static

from depwatch.controller import ScanController
from depwatch.display import format_mb, format_size
from depwatch.tui.widgets import RootLabel, SizeSummary


class MainScreen(Screen):
    """Candidate list with toggles, totals and the delete action."""

    DEFAULT_CSS = """
    #busy { height: 3; }
    #candidate-table { height: 1fr; }
    #summary { padding: 1 0; }
    """

    BINDINGS = [
        Binding("space", "toggle_select", "Select"),
        Binding("d", "delete", "Delete Selected"),
        Binding("r", "rescan", "Rescan"),
    ]

    def __init__(self, controller: ScanController, root: Path | None = None):
        super().__init__()
        self.controller = controller
        self.initial_root = root
        self._awaiting_delete = False
        self._was_busy = False

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="main-container"):
            yield RootLabel(id="root-label")
            yield Input(placeholder="Directory to scan", id="root-input")
            yield LoadingIndicator(id="busy")
            yield Static("", id="busy-status")
            yield DataTable(id="candidate-table")
            yield SizeSummary(id="summary")
            yield Button("Delete Selected Folders", variant="error", id="btn-delete", disabled=True)

        yield Footer()

    def on_mount(self) -> None:
        """Initialize the screen."""
        table = self.query_one("#candidate-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("", "Project", "Size")

        self.controller.on_change(self._on_controller_change)
        self._update_view()

        if self.initial_root is not None:
            self.query_one("#root-input", Input).value = str(self.initial_root)
            self._start_scan(self.initial_root)

    def _start_scan(self, root: Path) -> None:
        if self.controller.request_scan(root) is None:
            self.notify("A scan is already running", severity="warning")
            return
        self.query_one("#root-label", RootLabel).directory = str(root)
        self.query_one("#candidate-table", DataTable).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        if value:
            self._start_scan(Path(value).expanduser())

    def _on_controller_change(self, controller: ScanController) -> None:
        self._update_view()

        was_busy, self._was_busy = self._was_busy, controller.is_busy
        if controller.is_busy or not was_busy:
            return

        if controller.last_error:
            self.notify(escape(controller.last_error), title="Error Reading Directory", severity="error")

        if self._awaiting_delete:
            self._awaiting_delete = False
            self._report_outcomes()

    def _report_outcomes(self) -> None:
        for outcome in self.controller.last_outcomes:
            if not outcome.success:
                self.notify(
                    f"Could not delete folder {escape(outcome.name)}: {escape(outcome.error or 'unknown error')}",
                    title="Error Deleting Folder",
                    severity="error",
                    timeout=8,
                )

        freed = sum(o.bytes_freed for o in self.controller.last_outcomes if o.success)
        deleted = sum(1 for o in self.controller.last_outcomes if o.success)
        if deleted:
            self.notify(f"Deleted {deleted} folders, {format_size(freed)} freed")

    def _update_view(self) -> None:
        """Rebuild the table and totals from controller state."""
        controller = self.controller
        table = self.query_one("#candidate-table", DataTable)
        cursor_row = table.cursor_row

        self.query_one("#busy", LoadingIndicator).display = controller.is_busy
        self.query_one("#busy-status", Static).update(self._busy_text())

        table.clear()
        for candidate in controller.candidates:
            checkbox = "[green]X[/green]" if controller.selection.is_selected(candidate.path) else "[ ]"
            table.add_row(checkbox, escape(candidate.name), candidate.size_human, key=candidate.path)

        if table.row_count:
            table.move_cursor(row=min(cursor_row, table.row_count - 1))

        self.query_one("#summary", SizeSummary).update_sizes(
            controller.selection.selected_total(),
            controller.selection.total(),
            len(controller.selection),
        )
        self.query_one("#btn-delete", Button).disabled = (
            controller.is_busy or not len(controller.selection)
        )

    def _busy_text(self) -> str:
        progress = self.controller.progress
        if progress:
            return f"Deleting {escape(progress.name)} ({progress.current}/{progress.total})..."
        if self.controller.is_busy:
            return "Calculating..."
        return ""

    def action_toggle_select(self) -> None:
        """Toggle selection of current row."""
        if self.controller.is_busy:
            return

        table = self.query_one("#candidate-table", DataTable)
        if not table.row_count:
            return

        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        self.controller.toggle(str(row_key.value))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if not self.controller.is_busy and event.row_key.value is not None:
            self.controller.toggle(str(event.row_key.value))

    def action_rescan(self) -> None:
        if self.controller.root:
            self._start_scan(Path(self.controller.root))

    def action_delete(self) -> None:
        """Ask for confirmation, then delete the selected folders."""
        if self.controller.is_busy:
            return
        if not len(self.controller.selection):
            self.notify("No folders selected", severity="warning")
            return

        self.app.push_screen(
            ConfirmDeleteScreen(
                len(self.controller.selection),
                self.controller.selection.selected_total(),
                self.controller.target_name,
                dry_run=self.app.settings.dry_run,
            ),
            self._on_confirm,
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-delete":
            self.action_delete()

    def _on_confirm(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        if self.controller.request_delete(dry_run=self.app.settings.dry_run) is not None:
            self._awaiting_delete = True


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Confirmation dialog shown before deleting."""

    DEFAULT_CSS = """
    ConfirmDeleteScreen { align: center middle; }
    #confirm-dialog { width: 60; height: auto; border: thick $error; padding: 1 2; }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes, Delete"),
        Binding("n", "cancel", "Cancel"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, count: int, size_mb: float, target_name: str, dry_run: bool = False):
        super().__init__()
        self.count = count
        self.size_mb = size_mb
        self.target_name = target_name
        self.dry_run = dry_run

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Static(
                f"[bold]Delete {self.count} {self.target_name} folders?[/bold]\n"
                f"Selected Size: {format_mb(self.size_mb)}"
            )
            if self.dry_run:
                yield Static("[yellow]DRY RUN - No files will be deleted[/yellow]")
            with Horizontal():
                yield Button("Delete", variant="error", id="btn-confirm")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "btn-confirm":
            self.action_confirm()
        else:
            self.action_cancel()

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
