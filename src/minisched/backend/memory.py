"""In-memory execution backend: test double and dry-run engine.

Runs nothing. Units are bookkeeping records whose "process" lasts
``run_seconds`` of wall-clock time inside ``wait_for_exit``. Failures can
be scripted per task name and per lifecycle step, which makes every
partial-failure path of the worker pool reproducible without Docker.

ARCHITECTURE
────────────
::

    InMemoryBackend(run_seconds=0.0, failures={"job-2": {"create"}})
      ├── .create(...)         ─ record unit, reject duplicate live names
      ├── .start(id)           ─ mark running, track peak concurrency
      ├── .stats_snapshot(id)  ─ {"memory_stats": {"usage": memory_bytes}}
      ├── .wait_for_exit(id)   ─ sleep run_seconds → Exited(exit code)
      └── .remove(id)          ─ forget unit

    Failure steps: "create", "start", "stats", "wait", "remove"

Example::

    backend = InMemoryBackend(failures={"job-3": {"wait"}})
    scheduler = Scheduler(backend, SchedulerConfig(settle_delay=0))
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any

from minisched.backend.protocol import Exited, WaitFailed, WaitOutcome
from minisched.core.errors import (
    BackendError,
    BackendUnavailableError,
    UnitCreateError,
    UnitRemoveError,
    UnitStartError,
    UnitWaitError,
)

FAILURE_STEPS = frozenset({"create", "start", "stats", "wait", "remove"})


@dataclass
class MemoryUnit:
    """Bookkeeping for one simulated execution unit."""

    unit_id: str
    name: str
    image: str
    command: str
    memory_limit_bytes: int
    state: str = "created"
    exit_code: int | None = None


class InMemoryBackend:
    """Thread-safe fake ``ExecutionBackend``.

    Parameters
    ----------
    run_seconds
        Simulated run time of every unit, spent inside ``wait_for_exit``.
    memory_bytes
        Memory usage reported by ``stats_snapshot``.
    failures
        Map of task name → set of steps that fail for that task.
    exit_codes
        Map of task name → exit code (default 0).
    available
        When ``False``, ``ping()`` raises ``BackendUnavailableError``.
    """

    def __init__(
        self,
        *,
        run_seconds: float = 0.0,
        memory_bytes: int = 1024 * 1024,
        failures: dict[str, set[str]] | None = None,
        exit_codes: dict[str, int] | None = None,
        available: bool = True,
    ) -> None:
        failures = failures or {}
        unknown = {step for steps in failures.values() for step in steps} - FAILURE_STEPS
        if unknown:
            raise ValueError(f"Unknown failure steps: {sorted(unknown)}")
        self.run_seconds = run_seconds
        self.memory_bytes = memory_bytes
        self.failures = failures
        self.exit_codes = exit_codes or {}
        self.available = available

        self._lock = threading.Lock()
        self._units: dict[str, MemoryUnit] = {}
        self._running = 0
        self.max_concurrent = 0
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "memory"

    # ------------------------------------------------------------------
    # ExecutionBackend
    # ------------------------------------------------------------------

    def ping(self) -> None:
        if not self.available:
            raise BackendUnavailableError("In-memory backend marked unavailable")

    def create(
        self,
        image: str,
        command: str,
        memory_limit_bytes: int,
        name: str,
    ) -> str:
        with self._lock:
            self.calls.append(("create", name))
            if self._should_fail(name, "create"):
                raise UnitCreateError(f"Simulated create failure for {name!r}")
            if any(u.name == name for u in self._units.values()):
                raise UnitCreateError(f"Conflict: unit name {name!r} is already in use")
            unit_id = uuid.uuid4().hex
            self._units[unit_id] = MemoryUnit(
                unit_id=unit_id,
                name=name,
                image=image,
                command=command,
                memory_limit_bytes=memory_limit_bytes,
            )
            return unit_id

    def start(self, unit_id: str) -> None:
        with self._lock:
            unit = self._get(unit_id, UnitStartError)
            self.calls.append(("start", unit.name))
            if self._should_fail(unit.name, "start"):
                raise UnitStartError(f"Simulated start failure for {unit.name!r}")
            unit.state = "running"
            self._running += 1
            self.max_concurrent = max(self.max_concurrent, self._running)

    def stats_snapshot(self, unit_id: str) -> dict[str, Any]:
        with self._lock:
            unit = self._get(unit_id, BackendError)
            self.calls.append(("stats", unit.name))
            if self._should_fail(unit.name, "stats"):
                raise BackendError(f"Simulated stats failure for {unit.name!r}")
            return {
                "name": unit.name,
                "memory_stats": {"usage": self.memory_bytes, "limit": unit.memory_limit_bytes},
            }

    def wait_for_exit(self, unit_id: str) -> WaitOutcome:
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None:
                return WaitFailed(UnitWaitError(f"No such unit: {unit_id}"))
            self.calls.append(("wait", unit.name))
            if self._should_fail(unit.name, "wait"):
                return WaitFailed(UnitWaitError(f"Simulated wait failure for {unit.name!r}"))

        if self.run_seconds:
            time.sleep(self.run_seconds)

        with self._lock:
            self._stop(unit)
            unit.exit_code = self.exit_codes.get(unit.name, 0)
            return Exited(unit.exit_code)

    def remove(self, unit_id: str) -> None:
        with self._lock:
            unit = self._get(unit_id, UnitRemoveError)
            self.calls.append(("remove", unit.name))
            if self._should_fail(unit.name, "remove"):
                raise UnitRemoveError(f"Simulated remove failure for {unit.name!r}")
            self._stop(unit)
            del self._units[unit_id]

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    @property
    def live_units(self) -> list[MemoryUnit]:
        """Units created and not yet removed."""
        with self._lock:
            return list(self._units.values())

    @property
    def running(self) -> int:
        with self._lock:
            return self._running

    def calls_for(self, name: str) -> list[str]:
        """Backend calls made for one task name, in order."""
        with self._lock:
            return [step for step, n in self.calls if n == name]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _should_fail(self, name: str, step: str) -> bool:
        return step in self.failures.get(name, ())

    def _get(self, unit_id: str, error_cls: type[BackendError]) -> MemoryUnit:
        unit = self._units.get(unit_id)
        if unit is None:
            raise error_cls(f"No such unit: {unit_id}")
        return unit

    def _stop(self, unit: MemoryUnit) -> None:
        if unit.state == "running":
            unit.state = "exited"
            self._running -= 1
