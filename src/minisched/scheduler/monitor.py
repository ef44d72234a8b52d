"""Usage Monitor: point-in-time memory snapshot of a running unit.

Two payload shapes are understood:

- Engine API stats (``GET /containers/{id}/stats?stream=false``)::

      {"memory_stats": {"usage": 1572864, ...}, ...}

- ``docker stats --no-stream --format '{{json .}}'``::

      {"MemUsage": "1.5MiB / 128MiB", ...}

Usage in bytes is converted with a plain float division
(``bytes / 1024 / 1024``); nothing is rounded here.
"""

from __future__ import annotations

import re
from typing import Any

from minisched.backend.protocol import ExecutionBackend
from minisched.core.errors import StatsDecodeError
from minisched.scheduler.models import UsageSnapshot

_SIZE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([A-Za-z]*)\s*$")

_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "kib": 1024,
    "mb": 1000**2,
    "mib": 1024**2,
    "gb": 1000**3,
    "gib": 1024**3,
    "tb": 1000**4,
    "tib": 1024**4,
}


def parse_size(text: str) -> float:
    """Parse a docker size string (``"1.5MiB"``, ``"512kB"``) to bytes."""
    match = _SIZE.match(text)
    if match is None:
        raise StatsDecodeError(f"Unrecognised size: {text!r}")
    number, unit = match.groups()
    factor = _UNITS.get(unit.lower())
    if factor is None:
        raise StatsDecodeError(f"Unknown size unit {unit!r} in {text!r}")
    return float(number) * factor


def decode_memory_bytes(payload: dict[str, Any]) -> float:
    """Extract memory usage in bytes from a raw stats payload.

    Raises:
        StatsDecodeError: If neither known field is present and valid.
    """
    memory_stats = payload.get("memory_stats")
    if isinstance(memory_stats, dict) and "usage" in memory_stats:
        usage = memory_stats["usage"]
        if isinstance(usage, bool) or not isinstance(usage, int | float):
            raise StatsDecodeError(f"memory_stats.usage is not a number: {usage!r}")
        return usage

    mem_usage = payload.get("MemUsage")
    if isinstance(mem_usage, str):
        used = mem_usage.split("/", 1)[0]
        return parse_size(used)

    raise StatsDecodeError("Stats payload has no memory usage field")


class UsageMonitor:
    """Reads usage snapshots through an ``ExecutionBackend``."""

    def __init__(self, backend: ExecutionBackend):
        self.backend = backend

    def snapshot(self, unit_id: str) -> UsageSnapshot:
        """Take one non-streaming snapshot.

        Backend and decode errors propagate; callers decide whether they
        matter (the worker pool ignores them).
        """
        payload = self.backend.stats_snapshot(unit_id)
        return UsageSnapshot.from_bytes(decode_memory_bytes(payload))
