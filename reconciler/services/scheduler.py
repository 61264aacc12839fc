# reconciler/services/scheduler.py

"""
Recurring, single-flight execution of a reconciliation job.

Each scheduler owns one job and one guard. A pass requested while another
pass of the same job is running returns the job's skipped result at once;
it never waits and never queues.
"""

import enum
import threading
from typing import Optional, Protocol

from ..core.logging import LoggingMixin, log_with_context, ERROR
from ..types import PassResult


class ReconciliationJob(Protocol):
    name: str

    def run(self) -> PassResult: ...

    def skipped_result(self) -> PassResult: ...


class SchedulerState(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class _ScheduleHandle:
    """Background thread firing the job every ``interval`` seconds until cancelled"""

    def __init__(self, scheduler: 'ReconciliationScheduler', interval: float):
        self.stop_event = threading.Event()
        self.thread = threading.Thread(
            target=self._loop,
            args=(scheduler, interval),
            name=f"reconciler-{scheduler.job.name}",
            daemon=True,
        )

    def _loop(self, scheduler: 'ReconciliationScheduler', interval: float) -> None:
        while not self.stop_event.wait(interval):
            scheduler._run_scheduled()

    def start(self) -> None:
        self.thread.start()

    def cancel(self) -> None:
        self.stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)


class ReconciliationScheduler(LoggingMixin):
    """
    Lifecycle wrapper around a reconciliation job.

    ``start()`` runs one pass synchronously (its failure propagates), then
    arms the recurring schedule. A ``stop()`` that lands during that first
    pass wins and the schedule is never armed. Scheduled failures are
    logged and counted, never raised. ``refresh()`` runs a pass on the
    caller's thread and propagates failures.
    """

    def __init__(self, job: ReconciliationJob, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.job = job
        self.interval_seconds = interval_seconds
        self.state = SchedulerState.STOPPED
        self.failure_count = 0
        self.last_result: Optional[PassResult] = None

        self._handle: Optional[_ScheduleHandle] = None
        self._lifecycle_lock = threading.Lock()
        self._in_flight = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    @property
    def is_busy(self) -> bool:
        return self._in_flight.locked()

    def start(self) -> None:
        with self._lifecycle_lock:
            if self.state is not SchedulerState.STOPPED:
                return
            self.state = SchedulerState.STARTING

        self.log_info("Starting reconciliation schedule",
                      job=self.job.name, interval=self.interval_seconds)

        # First pass runs outside the lock so stop() is never held up by it
        try:
            self.run_once(origin="startup")
        except Exception:
            with self._lifecycle_lock:
                if self.state is SchedulerState.STARTING:
                    self.state = SchedulerState.STOPPED
            raise

        with self._lifecycle_lock:
            if self.state is not SchedulerState.STARTING:
                self.log_info("Schedule stopped during startup pass", job=self.job.name)
                return

            handle = _ScheduleHandle(self, self.interval_seconds)
            handle.start()
            self._handle = handle
            self.state = SchedulerState.RUNNING

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> None:
        """
        Cancel the schedule. A pass already in flight is not interrupted;
        pass ``wait=True`` to block until it has finished.
        """
        with self._lifecycle_lock:
            handle, self._handle = self._handle, None
            was_running = self.state is not SchedulerState.STOPPED
            self.state = SchedulerState.STOPPED

        if handle is not None:
            handle.cancel()
            if wait:
                handle.join(timeout)

        if wait:
            self.wait_idle(timeout)

        if was_running:
            self.log_info("Reconciliation schedule stopped", job=self.job.name)

    def refresh(self) -> PassResult:
        return self.run_once(origin="manual")

    def run_once(self, origin: str = "manual") -> PassResult:
        """Run one guarded pass. Returns the skipped result if a pass is already running."""
        if not self._in_flight.acquire(blocking=False):
            self.log_warning("Reconciliation already in progress, skipping",
                             job=self.job.name, origin=origin)
            return self.job.skipped_result()

        try:
            result = self.job.run()
        finally:
            self._in_flight.release()

        self.last_result = result
        self.log_debug("Reconciliation pass finished",
                       job=self.job.name, origin=origin, status=result.status)
        return result

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no pass is in flight. Returns False on timeout."""
        acquired = self._in_flight.acquire(timeout=-1 if timeout is None else timeout)
        if acquired:
            self._in_flight.release()
        return acquired

    def _run_scheduled(self) -> None:
        try:
            self.run_once(origin="schedule")
        except Exception as e:
            self._log_tick_failure(e, origin="schedule")

    def _log_tick_failure(self, error: Exception, origin: str) -> None:
        self.failure_count += 1
        log_with_context(self.logger, ERROR, "Reconciliation pass failed",
                         exc_info=(type(error), error, error.__traceback__),
                         job=self.job.name,
                         origin=origin,
                         failures=self.failure_count,
                         error=str(error),
                         exception_type=type(error).__name__)
