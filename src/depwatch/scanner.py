"""Directory scanning for depwatch.

Finds project folders that contain a ``node_modules`` folder directly beneath
them and measures how much space each one takes.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from depwatch.models import TARGET_DIRNAME, Candidate

log = logging.getLogger(__name__)

HIDDEN_PREFIX = "."


class DirectoryReadError(Exception):
    """A directory could not be enumerated."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not read {self.path}: {reason}")


def is_hidden(name: str) -> bool:
    """Check whether an entry name is hidden."""
    return name.startswith(HIDDEN_PREFIX)


def get_directory_size(path: Path) -> int:
    """
    Calculate the total size of every regular file under a directory.

    Hidden entries are skipped together with everything below them and
    symbolic links are never followed. Files or subdirectories that cannot
    be read are logged and counted as zero; the walk always finishes.

    Args:
        path: Directory to measure

    Returns:
        Total size in bytes (0 if the path does not exist)
    """
    total_size = 0

    def _scan(p: str) -> None:
        nonlocal total_size
        try:
            with os.scandir(p) as entries:
                for entry in entries:
                    if is_hidden(entry.name):
                        continue
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            _scan(entry.path)
                    except OSError as e:
                        log.warning("Skipping %s: %s", entry.path, e)
        except FileNotFoundError:
            if p != str(path):
                log.warning("Directory vanished during scan: %s", p)
        except OSError as e:
            log.warning("Skipping directory %s: %s", p, e)

    _scan(str(path))
    return total_size


def _list_project_dirs(root: Path) -> list[os.DirEntry]:
    """Return the visible, non-symlink child directories of root in name order."""
    try:
        with os.scandir(root) as entries:
            children = [
                entry
                for entry in entries
                if not is_hidden(entry.name) and _is_real_dir(entry)
            ]
    except OSError as e:
        raise DirectoryReadError(root, e.strerror or str(e)) from e

    return sorted(children, key=lambda entry: entry.name)


def _is_real_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def has_target(project_dir: Path, target_name: str = TARGET_DIRNAME) -> bool:
    """Check whether a project folder holds the target subfolder (not a symlink)."""
    target = project_dir / target_name
    return target.is_dir() and not target.is_symlink()


def scan_candidates(
    root: Path | str,
    target_name: str = TARGET_DIRNAME,
    max_workers: int = 4,
) -> list[Candidate]:
    """
    Scan the direct children of root for target subfolders.

    Only immediate children are examined. Each child that holds a
    ``target_name`` folder becomes a candidate sized by that folder alone.
    Sizes are computed in parallel; the result is sorted by size descending
    and keeps name order between equal sizes.

    Args:
        root: Directory whose children are examined
        target_name: Name of the subfolder to look for
        max_workers: Number of parallel size calculations

    Returns:
        Candidates sorted largest first

    Raises:
        DirectoryReadError: If root cannot be enumerated
    """
    root_path = Path(root)
    projects = [
        Path(entry.path)
        for entry in _list_project_dirs(root_path)
        if has_target(Path(entry.path), target_name)
    ]
    log.debug("Found %d folders with %s under %s", len(projects), target_name, root_path)

    if not projects:
        return []

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        sizes = list(executor.map(get_directory_size, [p / target_name for p in projects]))

    candidates = [
        Candidate(
            name=project.name,
            path=str(project.absolute()),
            size_bytes=size,
            target_name=target_name,
        )
        for project, size in zip(projects, sizes)
    ]

    # list.sort is stable, so equal sizes keep name order
    candidates.sort(key=lambda c: c.size_bytes, reverse=True)
    return candidates
