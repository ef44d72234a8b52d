"""Environment-driven settings for minisched.

``SchedulerSettings`` reads ``MINISCHED_*`` environment variables (and a
``.env`` file when present) and turns them into a validated
:class:`~minisched.scheduler.config.SchedulerConfig`.

Override precedence: CLI flags > environment > field defaults.

Examples:
    >>> settings = SchedulerSettings(worker_count=4)
    >>> settings.to_config().worker_count
    4
"""

from __future__ import annotations

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from minisched.core.errors import ConfigError
from minisched.scheduler.config import (
    DEFAULT_MEMORY_LIMIT_BYTES,
    DEFAULT_QUEUE_CAPACITY,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_WORKER_COUNT,
    SchedulerConfig,
)


class SchedulerSettings(BaseSettings):
    """Process-wide settings.

    Fields
    ──────
    worker_count            : Concurrent workers (units in flight)
    memory_limit_bytes      : Hard memory ceiling per execution unit
    queue_capacity          : Task queue bound
    settle_delay            : Seconds between start and the usage snapshot
    remove_on_start_failure : Remove a created unit whose start failed
    docker_binary           : Explicit docker CLI path (PATH lookup if unset)
    log_level               : Structlog log level
    json_logs               : Force JSON logs (auto-detect if unset)
    """

    model_config = SettingsConfigDict(
        env_prefix="MINISCHED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Scheduling ───────────────────────────────────────────────
    worker_count: int = DEFAULT_WORKER_COUNT
    memory_limit_bytes: int = DEFAULT_MEMORY_LIMIT_BYTES
    queue_capacity: int = DEFAULT_QUEUE_CAPACITY
    settle_delay: float = DEFAULT_SETTLE_DELAY
    remove_on_start_failure: bool = True

    # ── Backend ──────────────────────────────────────────────────
    docker_binary: str | None = Field(
        default=None,
        description="Path to the docker CLI; looked up on PATH when unset",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    def to_config(self, **overrides) -> SchedulerConfig:
        """Build a validated ``SchedulerConfig``.

        ``None`` values in *overrides* are ignored so unset CLI flags fall
        through to the settings value.

        Raises:
            ConfigError: If any value is out of range.
        """
        values = {
            "worker_count": self.worker_count,
            "memory_limit_bytes": self.memory_limit_bytes,
            "queue_capacity": self.queue_capacity,
            "settle_delay": self.settle_delay,
            "remove_on_start_failure": self.remove_on_start_failure,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return SchedulerConfig(**values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid scheduler configuration: {exc}", cause=exc) from exc
