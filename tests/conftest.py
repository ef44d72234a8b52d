"""
Shared pytest fixtures for minisched tests.

This module provides:
- Logging reset between tests
- Fast scheduler configs (no settle delay)
- In-memory backends
- A thread-safe recorder of lifecycle transitions
"""

import sys
import threading
from collections import defaultdict
from pathlib import Path

import pytest
import structlog

# Ensure minisched package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minisched.backend.memory import InMemoryBackend
from minisched.scheduler.config import SchedulerConfig
from minisched.scheduler.models import Task, TaskState


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop structlog configuration and bound context after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Scheduler fixtures
# =============================================================================


@pytest.fixture
def fast_config() -> SchedulerConfig:
    """Three workers, no settle delay."""
    return SchedulerConfig(worker_count=3, settle_delay=0)


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


class TransitionRecorder:
    """Collects ``(worker_id, task, state)`` callbacks from many threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: list[tuple[int, str, TaskState]] = []

    def __call__(self, worker_id: int, task: Task, state: TaskState) -> None:
        with self._lock:
            self.events.append((worker_id, task.id, state))

    def states(self, task_id: str) -> list[TaskState]:
        with self._lock:
            return [state for _, tid, state in self.events if tid == task_id]

    def workers_by_task(self) -> dict[str, set[int]]:
        result: dict[str, set[int]] = defaultdict(set)
        with self._lock:
            for worker_id, tid, _ in self.events:
                result[tid].add(worker_id)
        return dict(result)

    def task_ids(self) -> set[str]:
        with self._lock:
            return {tid for _, tid, _ in self.events}


@pytest.fixture
def recorder() -> TransitionRecorder:
    return TransitionRecorder()
