"""Scheduler configuration model.

Replaces the fixed worker-count and memory-ceiling constants with one
explicit, validated object passed to :class:`Scheduler`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WORKER_COUNT = 3
DEFAULT_MEMORY_LIMIT_BYTES = 128 * 1024 * 1024  # 128 MiB
DEFAULT_QUEUE_CAPACITY = 100
DEFAULT_SETTLE_DELAY = 1.0


class SchedulerConfig(BaseModel):
    """Immutable scheduler configuration.

    Example::

        config = SchedulerConfig(worker_count=3, memory_limit_bytes=64 * 1024 * 1024)
    """

    model_config = ConfigDict(frozen=True)

    worker_count: int = Field(
        default=DEFAULT_WORKER_COUNT,
        gt=0,
        description="Number of concurrent workers; max units in flight",
    )
    memory_limit_bytes: int = Field(
        default=DEFAULT_MEMORY_LIMIT_BYTES,
        gt=0,
        description="Hard memory ceiling attached to every unit at creation",
    )
    queue_capacity: int = Field(
        default=DEFAULT_QUEUE_CAPACITY,
        gt=0,
        description="Bound of the task queue; producers block when full",
    )
    settle_delay: float = Field(
        default=DEFAULT_SETTLE_DELAY,
        ge=0,
        description="Seconds to wait after start before the usage snapshot",
    )
    remove_on_start_failure: bool = Field(
        default=True,
        description="Remove a created unit when starting it fails",
    )
