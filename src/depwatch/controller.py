"""Background scan orchestration for depwatch.

The controller owns the candidate list, the selection and the busy flag.
Filesystem work runs on a worker thread which never touches that state: it
computes a result and hands it to ``dispatch``, which runs the publishing
step on the interactive thread (``App.call_from_thread`` in the TUI,
``CallQueue.post`` for headless use).

A request that arrives while a scan or delete is in flight is rejected; the
in-flight job's result is what gets published.
"""

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, NamedTuple

from depwatch.cleaner import delete_selected
from depwatch.models import TARGET_DIRNAME, Candidate, DeletionOutcome, ScanReport, ScanState
from depwatch.scanner import DirectoryReadError, scan_candidates
from depwatch.selection import SelectionStore

log = logging.getLogger(__name__)

Dispatch = Callable[..., Any]  # dispatch(callback, *args) runs callback on the interactive thread
ChangeListener = Callable[["ScanController"], None]


class DeleteProgress(NamedTuple):
    """Which folder a running delete batch is working on."""

    name: str
    current: int
    total: int


class CallQueue:
    """Queue of callbacks posted by worker threads and run by the owning thread."""

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[Callable[..., Any], tuple[Any, ...]]] = queue.Queue()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def drain(self, timeout: float | None = None) -> int:
        """
        Run pending callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first callback; None runs only
                what is already queued

        Returns:
            Number of callbacks run
        """
        ran = 0
        if timeout is not None:
            try:
                callback, args = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            callback(*args)
            ran += 1

        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return ran
            callback(*args)
            ran += 1


class ScanController:
    """Runs scans and deletions off the interactive thread and publishes results."""

    def __init__(
        self,
        dispatch: Dispatch,
        target_name: str = TARGET_DIRNAME,
        max_workers: int = 4,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._dispatch = dispatch
        self.target_name = target_name
        self.max_workers = max_workers
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="depwatch-worker"
        )
        self._owns_executor = executor is None

        self.selection = SelectionStore()
        self._state = ScanState.IDLE
        self._root: str | None = None
        self._report: ScanReport | None = None
        self._outcomes: list[DeletionOutcome] = []
        self._progress: DeleteProgress | None = None
        self._listeners: list[ChangeListener] = []

    # -- read-only view -------------------------------------------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state == ScanState.SCANNING

    @property
    def root(self) -> str | None:
        return self._root

    @property
    def candidates(self) -> list[Candidate]:
        return self.selection.candidates

    @property
    def last_error(self) -> str | None:
        return self._report.error if self._report else None

    @property
    def last_outcomes(self) -> list[DeletionOutcome]:
        return list(self._outcomes)

    @property
    def progress(self) -> DeleteProgress | None:
        """Progress of the running delete batch, None otherwise."""
        return self._progress

    @property
    def report(self) -> ScanReport | None:
        return self._report

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callback run on the interactive thread after each transition."""
        self._listeners.append(listener)

    # -- requests (interactive thread) ------------------------------------

    def request_scan(self, root: Path | str) -> Future | None:
        """
        Start scanning root in the background.

        Returns:
            The worker future, or None if a job is already running
        """
        if self.is_busy:
            log.info("Scan of %s ignored: another job is still running", root)
            return None

        self._root = str(root)
        self._set_state(ScanState.SCANNING)
        return self._executor.submit(self._scan_job, self._root)

    def request_delete(self, dry_run: bool = False) -> Future | None:
        """
        Delete the selected candidates in the background, then rescan.

        Returns:
            The worker future, or None if busy or nothing is selected
        """
        if self.is_busy:
            log.info("Delete ignored: another job is still running")
            return None
        if self._root is None or not len(self.selection):
            return None

        candidates = self.selection.candidates
        paths = self.selection.selected_paths
        self._set_state(ScanState.SCANNING)
        return self._executor.submit(self._delete_job, self._root, candidates, paths, dry_run)

    def toggle(self, path: str) -> bool:
        selected = self.selection.toggle(path)
        self._notify()
        return selected

    def select(self, path: str) -> bool:
        selected = self.selection.select(path)
        self._notify()
        return selected

    def select_all(self) -> None:
        self.selection.select_all()
        self._notify()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # -- worker thread --------------------------------------------------

    def _run_scan(self, root: str) -> ScanReport:
        try:
            candidates = scan_candidates(root, self.target_name, self.max_workers)
        except DirectoryReadError as e:
            log.error("%s", e)
            return ScanReport(root=root, error=str(e))
        return ScanReport(root=root, candidates=candidates)

    def _scan_job(self, root: str) -> None:
        try:
            report = self._run_scan(root)
        except Exception as e:
            log.exception("Scan of %s failed", root)
            report = ScanReport(root=root, error=str(e))
        self._dispatch(self._publish, report, None)

    def _delete_job(
        self,
        root: str,
        candidates: list[Candidate],
        paths: frozenset[str],
        dry_run: bool,
    ) -> None:
        outcomes: list[DeletionOutcome] = []
        try:
            outcomes = delete_selected(
                candidates,
                paths,
                dry_run=dry_run,
                progress_callback=lambda name, current, total: self._dispatch(
                    self._report_progress, DeleteProgress(name, current, total)
                ),
            )
            report = self._run_scan(root)
        except Exception as e:
            log.exception("Delete under %s failed", root)
            report = ScanReport(root=root, error=str(e))
        self._dispatch(self._publish, report, outcomes)

    # -- interactive thread ---------------------------------------------

    def _report_progress(self, progress: DeleteProgress) -> None:
        self._progress = progress
        self._notify()

    def _publish(self, report: ScanReport, outcomes: list[DeletionOutcome] | None) -> None:
        self._report = report
        self._progress = None
        self.selection.reset(report.candidates)
        if outcomes is not None:
            self._outcomes = outcomes
        self._set_state(ScanState.IDLE)

    def _set_state(self, state: ScanState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)
