"""Task Queue: bounded, closable FIFO channel of tasks.

WHY
───
``queue.Queue`` has no notion of end-of-stream: consumers would need one
sentinel per worker, and the producer would need to know how many
workers exist. ``TaskQueue`` makes ``close()`` the single end-of-stream
signal instead. Consumers drain what is buffered, then see exhaustion.

ARCHITECTURE
────────────
::

    TaskQueue(capacity=100)
      ├── .put(task)   ─ blocks while full; QueueClosedError once closed
      ├── .get()       ─ blocks while empty and open; None when exhausted
      ├── .close()     ─ idempotent; wakes every blocked consumer
      └── iter(queue)  ─ yields tasks until exhausted

Example::

    queue = TaskQueue(capacity=10)
    queue.put(Task("job-1", "alpine", "true"))
    queue.close()
    for task in queue:
        ...
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator

from minisched.core.errors import QueueClosedError
from minisched.scheduler.models import Task


class TaskQueue:
    """Multi-producer / multi-consumer FIFO with a capacity bound."""

    def __init__(self, capacity: int = 100):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: deque[Task] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def put(self, task: Task) -> None:
        """Append *task*, blocking while the queue is at capacity.

        Raises:
            QueueClosedError: If the queue was closed before or while waiting.
        """
        with self._not_full:
            while not self._closed and len(self._items) >= self.capacity:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError(
                    f"Cannot enqueue {task.id!r}: queue is closed"
                ).with_context(task_id=task.id)
            self._items.append(task)
            self._not_empty.notify()

    def get(self) -> Task | None:
        """Pop the oldest task, blocking while empty and open.

        Returns ``None`` once the queue is closed and drained.
        """
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                return None
            task = self._items.popleft()
            self._not_full.notify()
            return task

    def close(self) -> None:
        """Signal end-of-stream. Buffered tasks remain available."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[Task]:
        while (task := self.get()) is not None:
            yield task
