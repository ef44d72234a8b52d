"""Submission Loop: produce ``job-1 .. job-N`` into the task queue."""

from __future__ import annotations

from collections.abc import Iterator

from minisched.core.logging import get_logger
from minisched.scheduler.models import Task
from minisched.scheduler.queue import TaskQueue

logger = get_logger(__name__)


def make_tasks(count: int, image: str, command: str) -> Iterator[Task]:
    """Yield *count* tasks with 1-indexed ids ``job-1`` .. ``job-<count>``."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    for i in range(1, count + 1):
        yield Task(id=f"job-{i}", image=image, command=command)


def submit_tasks(queue: TaskQueue, count: int, image: str, command: str) -> int:
    """Enqueue every task in order, then close the queue.

    Blocks while the queue is full. The queue is closed exactly once,
    after the last submission, even when ``count`` is zero or a put
    fails.

    Returns:
        Number of tasks submitted.
    """
    submitted = 0
    try:
        for task in make_tasks(count, image, command):
            queue.put(task)
            submitted += 1
            logger.info("task.submitted", task_id=task.id)
    finally:
        queue.close()
    return submitted
