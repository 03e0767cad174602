"""Selection tracking for depwatch."""

from depwatch.models import Candidate


class SelectionStore:
    """Tracks which candidates of the current scan are marked for deletion.

    Selected paths are always a subset of the current candidate paths;
    installing a new candidate set clears the selection.
    """

    def __init__(self, candidates: list[Candidate] | None = None):
        self._candidates: list[Candidate] = list(candidates or [])
        self._selected: set[str] = set()

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def selected_paths(self) -> frozenset[str]:
        return frozenset(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def reset(self, candidates: list[Candidate]) -> None:
        """Install a freshly scanned candidate set and clear the selection."""
        self._candidates = list(candidates)
        self.clear()

    def toggle(self, path: str) -> bool:
        """
        Flip the selection of a candidate.

        Paths that are not in the current candidate set are ignored.

        Returns:
            True if the path is selected afterwards
        """
        if path in self._selected:
            self._selected.remove(path)
            return False
        if any(c.path == path for c in self._candidates):
            self._selected.add(path)
            return True
        return False

    def is_selected(self, path: str) -> bool:
        return path in self._selected

    def select(self, path: str) -> bool:
        """Select a candidate without toggling; unknown paths are ignored."""
        if path not in self._selected and any(c.path == path for c in self._candidates):
            self._selected.add(path)
        return path in self._selected

    def select_all(self) -> None:
        self._selected = {c.path for c in self._candidates}

    def clear(self) -> None:
        self._selected.clear()

    def selected_candidates(self) -> list[Candidate]:
        """Selected candidates, in candidate-set order."""
        return [c for c in self._candidates if c.path in self._selected]

    def selected_total(self, candidates: list[Candidate] | None = None) -> float:
        """Size in MB of the selected candidates."""
        pool = self._candidates if candidates is None else candidates
        return sum(c.size_mb for c in pool if c.path in self._selected)

    def total(self) -> float:
        """Size in MB of every candidate."""
        return sum(c.size_mb for c in self._candidates)
