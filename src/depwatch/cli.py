"""CLI interface for depwatch."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.markup import escape

from depwatch import __version__
from depwatch.config import Settings
from depwatch.controller import CallQueue, ScanController
from depwatch.display import (
    confirm_action,
    console,
    show_candidates,
    show_deletion_outcome,
    show_deletion_summary,
    show_scan_error,
    show_scanning_progress,
    show_totals,
)
from depwatch.logging_setup import setup_logging
from depwatch.models import TARGET_DIRNAME

app = typer.Typer(
    name="depwatch",
    help="Find node_modules folders under a directory and delete the ones you pick",
    add_completion=False,
    no_args_is_help=True,
)

ROOT_ARGUMENT = typer.Argument(..., help="Directory whose project folders are scanned")
TARGET_OPTION = typer.Option(
    TARGET_DIRNAME, "--target", "-t", envvar="DEPWATCH_TARGET", help="Subfolder name to look for"
)
WORKERS_OPTION = typer.Option(
    4, "--workers", "-w", envvar="DEPWATCH_WORKERS", help="Parallel size calculations"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", help="Show debug logging")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"depwatch version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """depwatch - reclaim disk space taken by node_modules folders."""


def _load_settings(configure_logging: bool = True, **values) -> Settings:
    try:
        settings = Settings(**values)
    except ValidationError as e:
        for error in e.errors():
            console.print(f"[red]Invalid option: {error['msg']}[/red]")
        raise typer.Exit(1)
    if configure_logging:
        setup_logging(settings.verbose)
    return settings


def _wait(controller: ScanController, calls: CallQueue, description: str) -> None:
    """Pump the call queue until the controller is idle again."""
    with show_scanning_progress() as progress:
        task = progress.add_task(description, total=None)
        while controller.is_busy:
            calls.drain(timeout=0.1)
            if controller.progress:
                name, current, total = controller.progress
                progress.update(task, description=f"Deleting {escape(name)} ({current}/{total})...")


def _scan(controller: ScanController, calls: CallQueue, root: Path) -> None:
    controller.request_scan(root)
    _wait(controller, calls, f"Calculating sizes under {root}...")


@app.command()
def scan(
    root: Path = ROOT_ARGUMENT,
    target: str = TARGET_OPTION,
    workers: int = WORKERS_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List node_modules folders under ROOT, largest first."""
    settings = _load_settings(target_name=target, max_workers=workers, verbose=verbose)
    calls = CallQueue()
    controller = ScanController(calls.post, settings.target_name, settings.max_workers)

    try:
        _scan(controller, calls, root.expanduser())
    finally:
        controller.shutdown()

    if controller.last_error:
        show_scan_error(controller.last_error)
        raise typer.Exit(1)

    show_candidates(
        controller.candidates,
        title=f"Selected Directory: {root.name or root}",
        target_name=settings.target_name,
    )
    show_totals(controller.selection.total())


@app.command()
def clean(
    root: Path = ROOT_ARGUMENT,
    select: Optional[list[str]] = typer.Option(
        None, "--select", "-s", help="Project folder name to delete (repeatable)"
    ),
    all_: bool = typer.Option(False, "--all", help="Select every folder found"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate without deleting"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    target: str = TARGET_OPTION,
    workers: int = WORKERS_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Delete the node_modules folders of selected projects under ROOT."""
    if not select and not all_:
        console.print("[red]Error: Specify --select NAME or --all[/red]")
        console.print("  depwatch clean ~/code --select my-app   # Delete one project's folder")
        console.print("  depwatch clean ~/code --all             # Delete every folder found")
        raise typer.Exit(1)

    settings = _load_settings(
        target_name=target, max_workers=workers, dry_run=dry_run, verbose=verbose
    )
    calls = CallQueue()
    controller = ScanController(calls.post, settings.target_name, settings.max_workers)
    root = root.expanduser()

    try:
        _scan(controller, calls, root)

        if controller.last_error:
            show_scan_error(controller.last_error)
            raise typer.Exit(1)

        if all_:
            controller.select_all()
        else:
            by_name = {c.name: c for c in controller.candidates}
            for name in select:
                if name in by_name:
                    controller.select(by_name[name].path)
                else:
                    console.print(f"[yellow]No {settings.target_name} folder found for: {name}[/yellow]")

        if not len(controller.selection):
            console.print("[yellow]Nothing selected.[/yellow]")
            raise typer.Exit(0)

        show_candidates(controller.candidates, controller.selection.selected_paths)
        show_totals(controller.selection.total(), controller.selection.selected_total())

        if not yes and not settings.dry_run:
            console.print()
            if not confirm_action("Delete selected folders?"):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        controller.request_delete(dry_run=settings.dry_run)
        _wait(controller, calls, "Deleting...")
    finally:
        controller.shutdown()

    outcomes = controller.last_outcomes
    for outcome in outcomes:
        show_deletion_outcome(outcome)
    show_deletion_summary(outcomes)

    console.print()
    if controller.last_error:
        show_scan_error(controller.last_error)
    else:
        show_candidates(controller.candidates, title="After cleanup", target_name=settings.target_name)
        show_totals(controller.selection.total())

    if any(not o.success for o in outcomes):
        raise typer.Exit(1)


@app.command()
def tui(
    root: Optional[Path] = typer.Argument(None, help="Directory to scan on start"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate without deleting"),
    target: str = TARGET_OPTION,
    workers: int = WORKERS_OPTION,
) -> None:
    """Launch the interactive TUI."""
    settings = _load_settings(
        configure_logging=False, target_name=target, max_workers=workers, dry_run=dry_run
    )
    try:
        from depwatch.tui import run_tui
    except ImportError:
        console.print("[red]TUI not available.[/red]")
        console.print("Install with: [bold]pip install depwatch[tui][/bold]")
        raise typer.Exit(1)

    run_tui(settings, root=root.expanduser() if root else None)


if __name__ == "__main__":
    app()
