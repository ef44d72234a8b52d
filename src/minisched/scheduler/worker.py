"""Worker: drains the task queue, one full task lifecycle at a time.

Each worker runs in its own thread and handles tasks strictly
sequentially::

    PENDING → CREATED → STARTED → MONITORED → AWAITING_EXIT
            → {COMPLETED | FAILED} → CLEANED

Failure handling per step:

    create   BackendError → FAILED, nothing to clean up
    start    BackendError → FAILED, unit removed if remove_on_start_failure
    monitor  BackendError → ignored (debug log), lifecycle continues
    wait     WaitFailed   → FAILED, unit removed
    cleanup  BackendError → logged, never raised

A task-level failure never ends the worker; only queue exhaustion does.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from minisched.backend.protocol import ExecutionBackend, WaitFailed
from minisched.core.errors import BackendError
from minisched.core.logging import LogContext, get_logger
from minisched.scheduler.config import SchedulerConfig
from minisched.scheduler.models import Task, TaskState, WorkerStats
from minisched.scheduler.monitor import UsageMonitor
from minisched.scheduler.queue import TaskQueue

logger = get_logger(__name__)

TransitionListener = Callable[[int, Task, TaskState], None]


class Worker:
    """One consumer of the task queue.

    Args:
        worker_id: 1-based worker number, used in logs
        backend: Shared execution backend
        queue: Shared task queue
        config: Scheduler configuration
        monitor: Usage monitor (built from *backend* when omitted)
        on_transition: Called on every lifecycle state entry
    """

    def __init__(
        self,
        worker_id: int,
        backend: ExecutionBackend,
        queue: TaskQueue,
        config: SchedulerConfig,
        monitor: UsageMonitor | None = None,
        on_transition: TransitionListener | None = None,
    ):
        self.worker_id = worker_id
        self.backend = backend
        self.queue = queue
        self.config = config
        self.monitor = monitor or UsageMonitor(backend)
        self.on_transition = on_transition
        self.stats = WorkerStats(worker_id=worker_id)

    def run(self) -> None:
        """Process tasks until the queue is closed and drained."""
        logger.debug("worker.started", worker_id=self.worker_id)
        for task in self.queue:
            self.process(task)
        logger.debug("worker.exited", **self.stats.to_dict())

    def process(self, task: Task) -> TaskState:
        """Drive one task through its lifecycle; return its terminal state."""
        self.stats.processed += 1
        with LogContext(worker_id=self.worker_id, task_id=task.id):
            logger.info("task.starting", image=task.image)
            self._enter(task, TaskState.PENDING)
            try:
                final = self._run_lifecycle(task)
            except Exception:
                logger.exception("task.crashed")
                final = TaskState.FAILED
        if final is TaskState.COMPLETED:
            self.stats.completed += 1
        else:
            self.stats.failed += 1
        return final

    # ------------------------------------------------------------------ #
    # Lifecycle steps
    # ------------------------------------------------------------------ #

    def _run_lifecycle(self, task: Task) -> TaskState:
        try:
            unit_id = self.backend.create(
                task.image,
                task.command,
                self.config.memory_limit_bytes,
                task.id,
            )
        except BackendError as exc:
            self._log_failure("task.create_failed", exc, task, step="create")
            self._enter(task, TaskState.FAILED)
            return TaskState.FAILED
        self._enter(task, TaskState.CREATED)
        logger.debug("task.created", unit_id=unit_id[:12])

        try:
            self.backend.start(unit_id)
        except BackendError as exc:
            self._log_failure("task.start_failed", exc, task, step="start", unit_id=unit_id)
            self._enter(task, TaskState.FAILED)
            if self.config.remove_on_start_failure:
                self._cleanup(task, unit_id)
            return TaskState.FAILED
        self._enter(task, TaskState.STARTED)

        final = TaskState.FAILED
        try:
            self._monitor(task, unit_id)
            self._enter(task, TaskState.AWAITING_EXIT)
            final = self._await_exit(task, unit_id)
        except Exception:
            logger.exception("task.crashed")
        finally:
            self._enter(task, final)
            self._cleanup(task, unit_id)
        return final

    def _monitor(self, task: Task, unit_id: str) -> None:
        if self.config.settle_delay:
            time.sleep(self.config.settle_delay)
        try:
            snapshot = self.monitor.snapshot(unit_id)
        except BackendError as exc:
            self._log_failure(
                "monitor.unavailable", exc, task, step="monitor", unit_id=unit_id, level="debug"
            )
        else:
            logger.info("monitor.snapshot", memory_mb=round(snapshot.memory_mb, 2))
        self._enter(task, TaskState.MONITORED)

    def _await_exit(self, task: Task, unit_id: str) -> TaskState:
        outcome = self.backend.wait_for_exit(unit_id)
        if isinstance(outcome, WaitFailed):
            self._log_failure("task.wait_failed", outcome.error, task, step="wait", unit_id=unit_id)
            return TaskState.FAILED
        logger.info("task.finished", status_code=outcome.status_code)
        return TaskState.COMPLETED

    def _cleanup(self, task: Task, unit_id: str) -> None:
        try:
            self.backend.remove(unit_id)
        except BackendError as exc:
            self._log_failure(
                "task.cleanup_failed", exc, task, step="cleanup", unit_id=unit_id, level="warning"
            )
        self._enter(task, TaskState.CLEANED)

    def _log_failure(
        self,
        event: str,
        exc: BackendError,
        task: Task,
        *,
        step: str,
        unit_id: str | None = None,
        level: str = "error",
    ) -> None:
        exc.with_context(task_id=task.id, worker_id=self.worker_id, step=step, unit_id=unit_id)
        getattr(logger, level)(event, **exc.to_dict())

    # ------------------------------------------------------------------ #
    # Listener
    # ------------------------------------------------------------------ #

    def _enter(self, task: Task, state: TaskState) -> None:
        if self.on_transition is None:
            return
        try:
            self.on_transition(self.worker_id, task, state)
        except Exception:
            logger.exception("listener.failed", state=state.value)
