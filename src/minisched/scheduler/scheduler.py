"""Scheduler: wires the queue, the worker pool and the completion barrier.

ARCHITECTURE
────────────
::

    Scheduler(backend, SchedulerConfig(worker_count=3))
      ├── .start_workers()               ─ spawn worker_count threads
      ├── .submit(count, image, command) ─ submission loop thread
      ├── .wait()                        ─ completion barrier
      └── .run(count, image, command)    ─ all three, blocking

    submission thread ──put──▶ TaskQueue ──get──▶ Worker 1..N ──▶ backend
                                                      │
                                               WorkerGroup.done()
                                                      ▼
                                              Scheduler.wait() returns

Thread-safety:
    The backend is shared by all workers and must tolerate concurrent
    calls. The queue and the worker group are the only shared mutable
    state and lock internally.

Example::

    scheduler = Scheduler(DockerBackend(), SchedulerConfig(worker_count=3))
    scheduler.run(count=5, image="alpine", command="sleep 2")
"""

from __future__ import annotations

import threading

from minisched.backend.protocol import ExecutionBackend
from minisched.core.logging import get_logger
from minisched.scheduler.barrier import WorkerGroup
from minisched.scheduler.config import SchedulerConfig
from minisched.scheduler.models import WorkerStats
from minisched.scheduler.monitor import UsageMonitor
from minisched.scheduler.queue import TaskQueue
from minisched.scheduler.submission import submit_tasks
from minisched.scheduler.worker import TransitionListener, Worker

logger = get_logger(__name__)


class Scheduler:
    """Fixed-size worker pool executing tasks against one backend.

    Args:
        backend: Execution backend shared by every worker
        config: Scheduler configuration (defaults when omitted)
        on_transition: Optional lifecycle listener ``(worker_id, task, state)``
    """

    def __init__(
        self,
        backend: ExecutionBackend,
        config: SchedulerConfig | None = None,
        on_transition: TransitionListener | None = None,
    ):
        self.backend = backend
        self.config = config or SchedulerConfig()
        self.on_transition = on_transition
        self.queue = TaskQueue(capacity=self.config.queue_capacity)
        self.group = WorkerGroup()
        self.monitor = UsageMonitor(backend)
        self.workers: list[Worker] = []
        self._threads: list[threading.Thread] = []
        self._submitter: threading.Thread | None = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start_workers(self) -> None:
        """Spawn ``worker_count`` worker threads (once)."""
        if self.workers:
            raise RuntimeError("Workers already started")
        for worker_id in range(1, self.config.worker_count + 1):
            worker = Worker(
                worker_id=worker_id,
                backend=self.backend,
                queue=self.queue,
                config=self.config,
                monitor=self.monitor,
                on_transition=self.on_transition,
            )
            self.workers.append(worker)
            self.group.add(1)
            thread = threading.Thread(
                target=self._run_worker,
                args=(worker,),
                name=f"minisched-worker-{worker_id}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        logger.debug("scheduler.workers_started", workers=self.config.worker_count)

    def submit(self, count: int, image: str, command: str) -> threading.Thread:
        """Run the submission loop in its own thread and return it.

        Raises:
            ValueError: If *count* is negative.
            RuntimeError: If a submission loop already ran.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if self._submitter is not None:
            raise RuntimeError("Tasks already submitted; the queue closes after one submission loop")
        self._submitter = threading.Thread(
            target=submit_tasks,
            args=(self.queue, count, image, command),
            name="minisched-submitter",
            daemon=True,
        )
        self._submitter.start()
        return self._submitter

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every worker has drained the queue and exited.

        Returns ``False`` if *timeout* elapsed first.
        """
        if not self.group.wait(timeout=timeout):
            return False
        for thread in self._threads:
            thread.join()
        if self._submitter is not None:
            self._submitter.join()
        logger.debug("scheduler.drained")
        return True

    def run(self, count: int, image: str, command: str) -> None:
        """Start workers, submit *count* tasks and wait for completion."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self.start_workers()
        self.submit(count, image, command)
        self.wait()

    def stats(self) -> list[WorkerStats]:
        """Per-worker counters."""
        return [worker.stats for worker in self.workers]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _run_worker(self, worker: Worker) -> None:
        try:
            worker.run()
        except Exception:
            logger.exception("worker.crashed", worker_id=worker.worker_id)
        finally:
            self.group.done()
