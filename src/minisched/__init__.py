"""
minisched - a minimal local task scheduler.

Runs a stream of short-lived, isolated tasks on a fixed pool of workers,
each task in its own execution unit with a hard memory ceiling.
"""

__version__ = "0.1.0"

from minisched.scheduler import Scheduler, SchedulerConfig, Task, TaskState  # noqa: E402

__all__ = ["Scheduler", "SchedulerConfig", "Task", "TaskState", "__version__"]
