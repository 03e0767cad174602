"""Shared fixtures for depwatch tests."""

from pathlib import Path

import pytest

MB = 1024 * 1024


def write_sized(path: Path, size: int) -> Path:
    """Create a file of exactly `size` bytes (sparse, so it's cheap)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def make_project(tmp_path):
    """Create tmp_path/<name>, optionally with a node_modules of a given size."""

    def _make(name: str, node_modules_bytes: int | None = None, root: Path | None = None) -> Path:
        project = (root or tmp_path) / name
        project.mkdir(parents=True, exist_ok=True)
        if node_modules_bytes is not None:
            nm = project / "node_modules"
            nm.mkdir()
            if node_modules_bytes:
                write_sized(nm / "pkg" / "index.js", node_modules_bytes)
        return project

    return _make


@pytest.fixture
def scenario_root(tmp_path, make_project):
    """A has 10 MB of node_modules, B has 5 MB, C has none."""
    make_project("A", 10 * MB)
    make_project("B", 5 * MB)
    make_project("C")
    return tmp_path
