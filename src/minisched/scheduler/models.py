"""Data model for the scheduler core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Task:
    """Immutable task descriptor.

    ``id`` doubles as the backend unit name, so it must be unique within
    one scheduler run. Duplicates are left for the backend to reject.
    """

    id: str
    image: str
    command: str


@dataclass(frozen=True)
class UsageSnapshot:
    """Point-in-time memory usage of one execution unit."""

    memory_mb: float

    @classmethod
    def from_bytes(cls, usage_bytes: int | float) -> UsageSnapshot:
        return cls(memory_mb=usage_bytes / 1024 / 1024)


class TaskState(str, Enum):
    """Per-task lifecycle states, in the order a successful task visits them."""

    PENDING = "pending"
    CREATED = "created"
    STARTED = "started"
    MONITORED = "monitored"
    AWAITING_EXIT = "awaiting_exit"
    COMPLETED = "completed"
    FAILED = "failed"
    CLEANED = "cleaned"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED)


@dataclass
class WorkerStats:
    """Counters for one worker."""

    worker_id: int
    processed: int = 0
    completed: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "processed": self.processed,
            "completed": self.completed,
            "failed": self.failed,
        }
