"""Tests for background scan orchestration."""

import shutil
import threading
from unittest.mock import patch

import pytest

from conftest import MB
from depwatch.controller import CallQueue, ScanController
from depwatch.models import ScanState

_real_rmtree = shutil.rmtree


@pytest.fixture
def calls():
    return CallQueue()


@pytest.fixture
def controller(calls):
    controller = ScanController(calls.post)
    yield controller
    controller.shutdown()


def wait_idle(controller, calls, timeout=10.0):
    """Run handed-back callbacks on this thread until the controller is idle."""
    while controller.is_busy:
        if not calls.drain(timeout=timeout):
            raise AssertionError("controller did not finish in time")


class TestCallQueue:
    def test_runs_posted_callbacks_in_order(self):
        calls = CallQueue()
        seen = []
        calls.post(seen.append, 1)
        calls.post(seen.append, 2)

        assert calls.drain() == 2
        assert seen == [1, 2]

    def test_drain_without_timeout_does_not_block(self):
        assert CallQueue().drain() == 0

    def test_drain_times_out(self):
        assert CallQueue().drain(timeout=0.01) == 0

    def test_callbacks_run_on_draining_thread(self):
        calls = CallQueue()
        seen = []
        worker = threading.Thread(target=lambda: calls.post(lambda: seen.append(threading.get_ident())))
        worker.start()
        worker.join()

        calls.drain(timeout=1)
        assert seen == [threading.get_ident()]


class TestScan:
    def test_initial_state(self, controller):
        assert controller.state == ScanState.IDLE
        assert controller.candidates == []
        assert controller.last_error is None
        assert controller.root is None

    def test_scan_publishes_sorted_candidates(self, controller, calls, scenario_root):
        assert controller.request_scan(scenario_root) is not None
        assert controller.state == ScanState.SCANNING

        wait_idle(controller, calls)

        assert controller.state == ScanState.IDLE
        assert [c.name for c in controller.candidates] == ["A", "B"]
        assert controller.selection.total() == 15.0
        assert controller.last_error is None

    def test_results_are_not_visible_before_handoff(self, controller, calls, scenario_root):
        future = controller.request_scan(scenario_root)
        future.result(timeout=10)

        # worker is done, but nothing is published until the owner drains
        assert controller.is_busy
        assert controller.candidates == []

        calls.drain()
        assert not controller.is_busy
        assert len(controller.candidates) == 2

    def test_previous_results_stay_visible_while_scanning(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        controller.request_scan(scenario_root)
        assert controller.is_busy
        assert [c.name for c in controller.candidates] == ["A", "B"]
        wait_idle(controller, calls)

    def test_new_scan_clears_selection(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        controller.toggle(controller.candidates[0].path)
        assert len(controller.selection) == 1

        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        assert len(controller.selection) == 0
        assert controller.selection.selected_total() == 0

    def test_unreadable_root_publishes_empty_set_and_error(self, controller, calls, tmp_path, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        controller.request_scan(tmp_path / "missing")
        wait_idle(controller, calls)

        assert controller.state == ScanState.IDLE
        assert controller.candidates == []
        assert "missing" in controller.last_error

    def test_unexpected_failure_returns_to_idle(self, controller, calls, scenario_root):
        with patch("depwatch.controller.scan_candidates", side_effect=RuntimeError("boom")):
            controller.request_scan(scenario_root)
            wait_idle(controller, calls)

        assert controller.state == ScanState.IDLE
        assert controller.last_error == "boom"


class TestConcurrentRequests:
    def test_scan_while_scanning_is_rejected(self, controller, calls, scenario_root, tmp_path):
        other = tmp_path / "other"
        other.mkdir()

        assert controller.request_scan(scenario_root) is not None
        assert controller.request_scan(other) is None

        wait_idle(controller, calls)

        # the in-flight scan is the one that got published
        assert controller.root == str(scenario_root)
        assert [c.name for c in controller.candidates] == ["A", "B"]

    def test_delete_while_scanning_is_rejected(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        controller.toggle(controller.candidates[0].path)

        controller.request_scan(scenario_root)
        assert controller.request_delete() is None
        wait_idle(controller, calls)

        assert (scenario_root / "A" / "node_modules").exists()

    def test_accepts_new_scan_once_idle(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        assert controller.request_scan(scenario_root) is not None
        wait_idle(controller, calls)


class TestDelete:
    def test_nothing_selected(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        assert controller.request_delete() is None
        assert controller.state == ScanState.IDLE

    def test_no_scan_yet(self, controller):
        assert controller.request_delete() is None

    def test_scenario_delete_then_rescan(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        a = next(c for c in controller.candidates if c.name == "A")
        controller.toggle(a.path)
        assert controller.selection.selected_total() == 10.0

        assert controller.request_delete() is not None
        assert controller.is_busy
        wait_idle(controller, calls)

        assert not (scenario_root / "A" / "node_modules").exists()
        assert [c.name for c in controller.candidates] == ["B"]
        assert controller.selection.total() == 5.0
        assert len(controller.selection) == 0
        assert [o.success for o in controller.last_outcomes] == [True]

    def test_failed_delete_reappears(self, controller, calls, tmp_path, make_project):
        make_project("ok", 3 * MB)
        locked = make_project("locked", 2 * MB)
        controller.request_scan(tmp_path)
        wait_idle(controller, calls)
        controller.selection.select_all()

        def rmtree(path, *args, **kwargs):
            if str(path) == str(locked / "node_modules"):
                raise PermissionError(13, "Permission denied", str(path))
            return _real_rmtree(path, *args, **kwargs)

        with patch("depwatch.cleaner.shutil.rmtree", rmtree):
            controller.request_delete()
            wait_idle(controller, calls)

        assert [(c.name, c.size_bytes) for c in controller.candidates] == [("locked", 2 * MB)]
        failed = [o for o in controller.last_outcomes if not o.success]
        assert [o.name for o in failed] == ["locked"]
        assert "Permission denied" in failed[0].error

    def test_dry_run_keeps_everything(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        controller.selection.select_all()

        controller.request_delete(dry_run=True)
        wait_idle(controller, calls)

        assert [c.name for c in controller.candidates] == ["A", "B"]
        assert all(o.dry_run and o.success for o in controller.last_outcomes)


class TestListeners:
    def test_listener_sees_each_transition(self, controller, calls, scenario_root):
        states = []
        controller.on_change(lambda c: states.append(c.state))

        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        assert states == [ScanState.SCANNING, ScanState.IDLE]

    def test_listener_runs_on_owner_thread(self, controller, calls, scenario_root):
        threads = []
        controller.on_change(lambda c: threads.append(threading.get_ident()))

        controller.request_scan(scenario_root)
        wait_idle(controller, calls)

        assert set(threads) == {threading.get_ident()}

    def test_toggle_notifies(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        seen = []
        controller.on_change(lambda c: seen.append(len(c.selection)))

        controller.toggle(controller.candidates[0].path)

        assert seen == [1]

    def test_select_notifies_and_does_not_toggle(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        seen = []
        controller.on_change(lambda c: seen.append(len(c.selection)))
        path = controller.candidates[0].path

        controller.select(path)
        controller.select(path)

        assert seen == [1, 1]
        assert controller.selection.is_selected(path)

    def test_select_all_notifies(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        seen = []
        controller.on_change(lambda c: seen.append(len(c.selection)))

        controller.select_all()

        assert seen == [2]


class TestDeleteProgress:
    def test_progress_handed_to_owner_thread(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        controller.select_all()
        seen = []
        controller.on_change(
            lambda c: c.progress and seen.append((tuple(c.progress), threading.get_ident()))
        )

        controller.request_delete(dry_run=True)
        wait_idle(controller, calls)

        assert [p for p, _ in seen] == [("A", 1, 2), ("B", 2, 2)]
        assert {t for _, t in seen} == {threading.get_ident()}

    def test_progress_cleared_after_publish(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        wait_idle(controller, calls)
        controller.select_all()

        controller.request_delete(dry_run=True)
        wait_idle(controller, calls)

        assert controller.progress is None

    def test_scan_reports_no_progress(self, controller, calls, scenario_root):
        controller.request_scan(scenario_root)
        assert controller.progress is None
        wait_idle(controller, calls)
