"""Rich terminal display for depwatch."""

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from depwatch.models import BYTES_PER_MB, TARGET_DIRNAME, Candidate, DeletionOutcome

console = Console()


def format_mb(size_mb: float) -> str:
    """Format a megabyte figure the way the candidate list shows sizes."""
    return f"{size_mb:.2f} MB"


def format_size(size_bytes: int) -> str:
    """Format bytes as megabytes."""
    return format_mb(size_bytes / BYTES_PER_MB)


def show_candidates(
    candidates: list[Candidate],
    selected: frozenset[str] | set[str] = frozenset(),
    title: str | None = None,
    target_name: str = TARGET_DIRNAME,
) -> None:
    """Display the candidate list, largest first."""
    if not candidates:
        console.print(f"[yellow]No {target_name} folders found.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("", width=3)
    table.add_column("Project", style="cyan", no_wrap=True)
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Path", style="dim", overflow="fold")

    for candidate in candidates:
        checkbox = "[green]X[/green]" if candidate.path in selected else "[ ]"
        table.add_row(checkbox, escape(candidate.name), candidate.size_human, escape(candidate.path))

    console.print(table)


def show_totals(total_mb: float, selected_mb: float | None = None) -> None:
    """Display selected and total sizes."""
    if selected_mb is not None:
        console.print(f"[bold]Selected Size:[/bold] [cyan]{format_mb(selected_mb)}[/cyan]")
    console.print(f"[bold]Total Size:[/bold] {format_mb(total_mb)}")


def show_scan_error(error: str) -> None:
    console.print(f"[red]Error reading directory: {escape(error)}[/red]")


def show_deletion_outcome(outcome: DeletionOutcome) -> None:
    """Display a single deletion outcome."""
    if outcome.success:
        prefix = "[yellow]Would delete[/yellow]" if outcome.dry_run else "[green]✓ Deleted[/green]"
        console.print(f"{prefix} {escape(outcome.name)} ({format_size(outcome.bytes_freed)})")
    else:
        console.print(f"[red]✗ Could not delete folder {escape(outcome.name)}: {escape(outcome.error or 'unknown error')}[/red]")


def show_deletion_summary(outcomes: list[DeletionOutcome]) -> None:
    """Display the summary for a delete batch."""
    freed = sum(o.bytes_freed for o in outcomes if o.success)
    success_count = sum(1 for o in outcomes if o.success)
    failure_count = len(outcomes) - success_count

    console.print()

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Space freed", format_size(freed))
    table.add_row("Folders deleted", str(success_count))
    if failure_count > 0:
        table.add_row("[red]Failed[/red]", str(failure_count))

    console.print(table)


def show_scanning_progress() -> Progress:
    """Create spinner for a running scan."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
