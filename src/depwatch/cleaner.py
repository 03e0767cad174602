"""Deletion of selected node_modules folders for depwatch."""

import logging
import shutil
from pathlib import Path
from typing import Callable, Iterable

from depwatch.models import Candidate, DeletionOutcome
from depwatch.scanner import get_directory_size

log = logging.getLogger(__name__)


class DeletionError(Exception):
    """A target subfolder could not be removed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not delete {self.path}: {reason}")


def is_path_safe(target: Path, target_name: str) -> bool:
    """
    Check if a target folder is safe to delete.

    Only a real directory carrying the target name is ever removed, never a
    symlink and never the project folder itself.

    Args:
        target: Folder about to be removed
        target_name: Expected folder name (e.g. 'node_modules')

    Returns:
        True if safe to delete, False otherwise
    """
    if target.name != target_name:
        return False
    if target.is_symlink():
        return False
    return target.is_dir()


def delete_target(candidate: Candidate, dry_run: bool = False) -> int:
    """
    Remove a candidate's target subfolder and everything in it.

    Args:
        candidate: Candidate whose target folder is removed
        dry_run: If True, don't actually delete

    Returns:
        Bytes freed

    Raises:
        DeletionError: If the folder is missing, unsafe or cannot be removed
    """
    target = candidate.target_path

    if not target.exists() and not target.is_symlink():
        raise DeletionError(target, "already removed")
    if not is_path_safe(target, candidate.target_name):
        raise DeletionError(target, "refusing to delete a symlink or non-directory")

    size = get_directory_size(target)
    if dry_run:
        return size

    try:
        shutil.rmtree(target)
    except PermissionError as e:
        raise DeletionError(target, f"Permission denied: {e}") from e
    except OSError as e:
        raise DeletionError(target, f"OS error: {e}") from e

    return size


def delete_selected(
    candidates: Iterable[Candidate],
    selection: Iterable[str],
    dry_run: bool = False,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> list[DeletionOutcome]:
    """
    Delete the target subfolder of every selected candidate.

    Each deletion is independent: a failure is recorded and the remaining
    candidates are still attempted. Nothing is rolled back.

    Args:
        candidates: Current candidate set
        selection: Paths of the candidates to delete
        dry_run: If True, don't actually delete
        progress_callback: Optional callback(name, current, total)

    Returns:
        One DeletionOutcome per selected candidate, in candidate order
    """
    selected = set(selection)
    targets = [c for c in candidates if c.path in selected]
    outcomes: list[DeletionOutcome] = []

    for i, candidate in enumerate(targets):
        if progress_callback:
            progress_callback(candidate.name, i + 1, len(targets))

        try:
            freed = delete_target(candidate, dry_run=dry_run)
        except DeletionError as e:
            log.error("%s", e)
            outcomes.append(
                DeletionOutcome(
                    path=candidate.path,
                    success=False,
                    error=e.reason,
                    dry_run=dry_run,
                )
            )
            continue

        log.info("Deleted %s (%d bytes)%s", candidate.target_path, freed, " [dry run]" if dry_run else "")
        outcomes.append(
            DeletionOutcome(
                path=candidate.path,
                success=True,
                bytes_freed=freed,
                dry_run=dry_run,
            )
        )

    return outcomes
