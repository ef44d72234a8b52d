"""Core primitives shared by every minisched module: errors, logging, settings."""

from minisched.core.errors import (
    BackendError,
    BackendUnavailableError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    QueueClosedError,
    SchedulerError,
    StatsDecodeError,
    UnitCreateError,
    UnitRemoveError,
    UnitStartError,
    UnitWaitError,
)
from minisched.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "LogContext",
    "QueueClosedError",
    "SchedulerError",
    "StatsDecodeError",
    "UnitCreateError",
    "UnitRemoveError",
    "UnitStartError",
    "UnitWaitError",
    "configure_logging",
    "get_logger",
]
