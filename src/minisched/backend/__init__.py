"""Execution backends.

``ExecutionBackend`` is the protocol the worker pool consumes;
``DockerBackend`` drives real containers, ``InMemoryBackend`` simulates
them for dry runs and tests.
"""

from minisched.backend.docker import DockerBackend
from minisched.backend.memory import InMemoryBackend
from minisched.backend.protocol import ExecutionBackend, Exited, WaitFailed, WaitOutcome

__all__ = [
    "DockerBackend",
    "ExecutionBackend",
    "Exited",
    "InMemoryBackend",
    "WaitFailed",
    "WaitOutcome",
]
