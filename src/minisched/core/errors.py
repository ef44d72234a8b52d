"""
Structured error types for minisched.

Every failure the scheduler can observe is raised as a ``SchedulerError``
subclass carrying a category, structured context and an optional chained
cause, so workers can log one uniform set of fields no matter which
lifecycle step failed.

Architecture:
    ::

        SchedulerError (category, context, cause)
        ├── BackendError                (BACKEND)
        │   ├── BackendUnavailableError (fatal at startup)
        │   ├── UnitCreateError
        │   ├── UnitStartError
        │   ├── UnitWaitError
        │   ├── UnitRemoveError
        │   └── StatsDecodeError        (MONITOR)
        ├── ConfigError                 (CONFIG)
        └── QueueClosedError            (QUEUE)

Handling policy:
    - ``BackendUnavailableError`` aborts the process before scheduling.
    - Create / start / wait errors abort one task; the worker continues.
    - Stats and remove errors are best-effort and never fail a task.

Usage:
    from minisched.core.errors import UnitCreateError

    try:
        run_docker(args)
    except subprocess.CalledProcessError as e:
        raise UnitCreateError("docker create failed", cause=e).with_context(
            task_id="job-1",
        )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification in logs."""

    BACKEND = "BACKEND"
    MONITOR = "MONITOR"
    CONFIG = "CONFIG"
    QUEUE = "QUEUE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        task_id: Task being processed when the error occurred
        unit_id: Backend handle of the execution unit, if one exists
        worker_id: Worker that observed the error
        step: Lifecycle step (create, start, monitor, wait, cleanup)
        metadata: Additional key-value pairs
    """

    task_id: str | None = None
    unit_id: str | None = None
    worker_id: int | None = None
    step: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["task_id", "unit_id", "worker_id", "step"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SchedulerError(Exception):
    """
    Base exception for all minisched errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained onto ``__cause__`` so tracebacks keep
    the original backend failure.

    Examples:
        >>> error = SchedulerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = UnitStartError("start failed").with_context(task_id="job-2")
        >>> error.context.task_id
        'job-2'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SchedulerError:
        """
        Add context to this error (fluent API).

        Unknown keys land in ``context.metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# BACKEND ERRORS
# =============================================================================


class BackendError(SchedulerError):
    """A call into the execution backend failed."""

    default_category = ErrorCategory.BACKEND


class BackendUnavailableError(BackendError):
    """The backend cannot be reached at all (binary missing, daemon down)."""


class UnitCreateError(BackendError):
    """The backend refused to create an execution unit."""


class UnitStartError(BackendError):
    """The backend could not start a created unit."""


class UnitWaitError(BackendError):
    """The backend reported an error while waiting for a unit to exit."""


class UnitRemoveError(BackendError):
    """The backend could not remove a unit."""


class StatsDecodeError(BackendError):
    """A stats payload did not contain a decodable memory usage field."""

    default_category = ErrorCategory.MONITOR


# =============================================================================
# CONFIG / QUEUE ERRORS
# =============================================================================


class ConfigError(SchedulerError):
    """Invalid scheduler configuration."""

    default_category = ErrorCategory.CONFIG


class QueueClosedError(SchedulerError):
    """A task was enqueued after the queue was closed."""

    default_category = ErrorCategory.QUEUE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SchedulerError",
    "BackendError",
    "BackendUnavailableError",
    "UnitCreateError",
    "UnitStartError",
    "UnitWaitError",
    "UnitRemoveError",
    "StatsDecodeError",
    "ConfigError",
    "QueueClosedError",
]
