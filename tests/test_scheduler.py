"""Tests for the single-flight reconciliation scheduler."""

import logging
import threading

import pytest

from reconciler.services.scheduler import ReconciliationScheduler, SchedulerState
from reconciler.types import NoChange, Skipped


class ScriptedJob:
    """Job whose passes can be blocked, failed, or counted from the test"""

    name = "scripted"

    def __init__(self):
        self.calls = 0
        self.error = None
        self.entered = threading.Event()
        self.release = threading.Event()
        self.release.set()

    def run(self):
        self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return NoChange()

    def skipped_result(self):
        return Skipped()


@pytest.fixture
def job():
    return ScriptedJob()


@pytest.fixture
def scheduler(job):
    scheduler = ReconciliationScheduler(job, interval_seconds=3600)
    yield scheduler
    job.release.set()
    scheduler.stop(wait=True, timeout=5)


class TestLifecycle:

    def test_start_runs_an_initial_pass(self, scheduler, job):
        scheduler.start()

        assert job.calls == 1
        assert scheduler.is_running
        assert isinstance(scheduler.last_result, NoChange)

    def test_start_is_idempotent(self, scheduler, job):
        scheduler.start()
        scheduler.start()

        assert job.calls == 1

    def test_startup_failure_propagates(self, scheduler, job):
        job.error = RuntimeError("rpc down")

        with pytest.raises(RuntimeError):
            scheduler.start()

        assert scheduler.state is SchedulerState.STOPPED

    def test_stop_before_start_is_a_no_op(self, scheduler):
        scheduler.stop()
        scheduler.stop()

        assert scheduler.state is SchedulerState.STOPPED

    def test_stop_then_start_again(self, scheduler, job):
        scheduler.start()
        scheduler.stop(wait=True, timeout=5)
        scheduler.start()

        assert job.calls == 2
        assert scheduler.is_running

    def test_stop_during_startup_pass_returns_promptly(self, scheduler, job):
        job.release.clear()
        starter = threading.Thread(target=scheduler.start)
        starter.start()
        assert job.entered.wait(timeout=5)
        assert scheduler.state is SchedulerState.STARTING

        stopper = threading.Thread(target=scheduler.stop)
        stopper.start()
        stopper.join(timeout=1)
        stopped_promptly = not stopper.is_alive()

        job.release.set()
        starter.join(timeout=5)

        assert stopped_promptly
        assert scheduler.state is SchedulerState.STOPPED
        assert scheduler._handle is None
        assert job.calls == 1

    def test_interval_must_be_positive(self, job):
        with pytest.raises(ValueError):
            ReconciliationScheduler(job, interval_seconds=0)


class TestSingleFlight:

    def test_concurrent_pass_is_skipped(self, scheduler, job):
        job.release.clear()
        worker = threading.Thread(target=scheduler.refresh)
        worker.start()
        assert job.entered.wait(timeout=5)

        result = scheduler.refresh()

        assert isinstance(result, Skipped)
        assert result.skipped
        assert job.calls == 1

        job.release.set()
        worker.join(timeout=5)

    def test_guard_released_after_failure(self, scheduler, job):
        job.error = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            scheduler.refresh()

        job.error = None
        assert isinstance(scheduler.refresh(), NoChange)
        assert not scheduler.is_busy

    def test_refresh_works_without_start(self, scheduler, job):
        assert isinstance(scheduler.refresh(), NoChange)
        assert scheduler.state is SchedulerState.STOPPED


class TestScheduledFailures:

    def test_tick_error_is_logged_and_counted(self, scheduler, job, caplog):
        job.error = ValueError("bad payload")

        with caplog.at_level(logging.ERROR, logger="reconciler"):
            scheduler._run_scheduled()
            scheduler._run_scheduled()

        assert scheduler.failure_count == 2
        failures = [r for r in caplog.records if r.getMessage() == "Reconciliation pass failed"]
        assert len(failures) == 2
        assert failures[-1].job == "scripted"
        assert failures[-1].origin == "schedule"
        assert failures[-1].exception_type == "ValueError"
        assert failures[-1].exc_info is not None

    def test_tick_error_does_not_stop_schedule(self, job):
        scheduler = ReconciliationScheduler(job, interval_seconds=0.01)
        scheduler.start()
        job.error = RuntimeError("transient")

        try:
            deadline = threading.Event()
            for _ in range(200):
                if scheduler.failure_count >= 2:
                    break
                deadline.wait(0.01)
            assert scheduler.failure_count >= 2
            assert scheduler.is_running
        finally:
            scheduler.stop(wait=True, timeout=5)
