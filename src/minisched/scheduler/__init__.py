"""Scheduler core: task queue, worker pool, usage monitor, completion barrier."""

from minisched.scheduler.barrier import WorkerGroup
from minisched.scheduler.config import SchedulerConfig
from minisched.scheduler.models import Task, TaskState, UsageSnapshot, WorkerStats
from minisched.scheduler.monitor import UsageMonitor, decode_memory_bytes
from minisched.scheduler.queue import TaskQueue
from minisched.scheduler.scheduler import Scheduler
from minisched.scheduler.submission import make_tasks, submit_tasks
from minisched.scheduler.worker import Worker

__all__ = [
    "Scheduler",
    "SchedulerConfig",
    "Task",
    "TaskQueue",
    "TaskState",
    "UsageMonitor",
    "UsageSnapshot",
    "Worker",
    "WorkerGroup",
    "WorkerStats",
    "decode_memory_bytes",
    "make_tasks",
    "submit_tasks",
]
