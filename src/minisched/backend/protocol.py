"""ExecutionBackend Protocol: the single backend interface.

Regardless of what actually isolates a task (Docker, an in-memory fake),
the worker pool drives every unit through the same five calls. The
protocol is a ``typing.Protocol``: any object with the right methods
satisfies it, no base class required.

ARCHITECTURE
────────────
::

    ExecutionBackend (Protocol)
      ├── .ping()                      ─ reachability check at startup
      ├── .create(image, command, ...) ─ new unit with memory ceiling → unit_id
      ├── .start(unit_id)
      ├── .stats_snapshot(unit_id)     ─ raw, non-streaming stats payload
      ├── .wait_for_exit(unit_id)      ─ blocks → WaitOutcome
      └── .remove(unit_id)

    Implementations:
      DockerBackend    ─ docker CLI via subprocess
      InMemoryBackend  ─ thread-safe fake (dry-run, tests)

WaitOutcome
───────────
The exit wait has exactly two outcomes, modelled as a tagged result
instead of two racing channels::

    Exited(status_code)   ─ unit reached a non-running state
    WaitFailed(error)     ─ backend reported an error while waiting
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from minisched.core.errors import BackendError


@dataclass(frozen=True)
class Exited:
    """The unit stopped running; ``status_code`` is its exit code."""

    status_code: int


@dataclass(frozen=True)
class WaitFailed:
    """The backend could not deliver the unit's exit."""

    error: BackendError


WaitOutcome = Exited | WaitFailed


@runtime_checkable
class ExecutionBackend(Protocol):
    """How execution units are created, observed and destroyed.

    All methods may be called concurrently from several worker threads.
    Every method except ``wait_for_exit`` raises ``BackendError`` (or a
    subclass) on failure; ``wait_for_exit`` reports failures through
    ``WaitFailed`` instead.
    """

    def ping(self) -> None:
        """Raise ``BackendUnavailableError`` if the backend is unreachable."""
        ...

    def create(
        self,
        image: str,
        command: str,
        memory_limit_bytes: int,
        name: str,
    ) -> str:
        """Create a unit running ``sh -c command`` from *image*.

        The memory ceiling is attached at creation and cannot change.

        Returns:
            unit_id: Opaque backend handle
        """
        ...

    def start(self, unit_id: str) -> None:
        """Start a created unit."""
        ...

    def stats_snapshot(self, unit_id: str) -> dict[str, Any]:
        """Return one point-in-time statistics payload for a unit."""
        ...

    def wait_for_exit(self, unit_id: str) -> WaitOutcome:
        """Block until the unit is no longer running."""
        ...

    def remove(self, unit_id: str) -> None:
        """Destroy a unit (forcefully, if still running)."""
        ...
