"""Tests for minisched.core.errors."""

from __future__ import annotations

import pytest

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


class TestErrorContext:
    def test_empty_context_serializes_to_empty_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_only_set_fields_are_serialized(self):
        ctx = ErrorContext(task_id="job-1", worker_id=2)
        assert ctx.to_dict() == {"task_id": "job-1", "worker_id": 2}

    def test_metadata_is_merged(self):
        ctx = ErrorContext(step="start", metadata={"image": "alpine"})
        assert ctx.to_dict() == {"step": "start", "image": "alpine"}


class TestSchedulerError:
    def test_default_category(self):
        assert SchedulerError("boom").category == ErrorCategory.INTERNAL

    def test_category_override(self):
        err = SchedulerError("boom", category=ErrorCategory.QUEUE)
        assert err.category == ErrorCategory.QUEUE

    def test_with_context_sets_known_and_unknown_keys(self):
        err = UnitStartError("start failed").with_context(task_id="job-2", image="alpine")
        assert err.context.task_id == "job-2"
        assert err.context.metadata == {"image": "alpine"}

    def test_cause_is_chained(self):
        cause = OSError("no such file")
        err = BackendError("docker missing", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_to_dict(self):
        err = UnitCreateError("conflict", cause=ValueError("dup")).with_context(task_id="job-1")
        d = err.to_dict()
        assert d["error_type"] == "UnitCreateError"
        assert d["message"] == "conflict"
        assert d["category"] == "BACKEND"
        assert d["context"] == {"task_id": "job-1"}
        assert d["cause"] == "dup"

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [BackendUnavailableError, UnitCreateError, UnitStartError, UnitWaitError, UnitRemoveError, StatsDecodeError],
    )
    def test_backend_errors(self, cls):
        assert issubclass(cls, BackendError)
        assert issubclass(cls, SchedulerError)

    def test_categories(self):
        assert UnitCreateError("x").category == ErrorCategory.BACKEND
        assert StatsDecodeError("x").category == ErrorCategory.MONITOR
        assert ConfigError("x").category == ErrorCategory.CONFIG
        assert QueueClosedError("x").category == ErrorCategory.QUEUE
