"""Docker execution backend.

Drives execution units through the ``docker`` CLI (subprocess). No
``docker-py`` dependency. Connection parameters (``DOCKER_HOST``,
contexts, TLS) are whatever the local CLI is configured with.

Key Concepts:
    DockerBackend: ``ExecutionBackend`` implementation, one docker
        container per task, named after the task id and labelled
        ``minisched.task=<id>``.
    Memory ceiling: passed as ``--memory <bytes>`` at ``docker create``
        time, so it is fixed for the life of the container.

Command mapping::

    create          docker create --name N --memory B --label … IMAGE sh -c CMD
                                            (no timeout; may pull the image)
    start           docker start ID         (no timeout)
    stats_snapshot  docker stats --no-stream --format '{{json .}}' ID
    wait_for_exit   docker wait ID          (no timeout; blocks)
    remove          docker rm --force ID

Example::

    backend = DockerBackend()
    backend.ping()
    unit = backend.create("alpine", "sleep 2", 128 * 1024 * 1024, "job-1")
    backend.start(unit)
    outcome = backend.wait_for_exit(unit)
    backend.remove(unit)
"""

from __future__ import annotations

import json
import shutil
import subprocess
from typing import Any

from minisched.backend.protocol import Exited, WaitFailed, WaitOutcome
from minisched.core.errors import (
    BackendError,
    BackendUnavailableError,
    StatsDecodeError,
    UnitCreateError,
    UnitRemoveError,
    UnitStartError,
    UnitWaitError,
)
from minisched.core.logging import get_logger

logger = get_logger(__name__)


class DockerBackend:
    """Runs each task in its own docker container.

    Parameters
    ----------
    docker_binary
        Path to the docker CLI. Looked up on ``PATH`` when omitted.
    label_prefix
        Label namespace put on every container (``<prefix>.task=<id>``).
    command_timeout
        Timeout in seconds for ``info``, ``stats`` and ``rm``. Create (which
        may pull the image), start and wait run without a deadline.
    """

    def __init__(
        self,
        docker_binary: str | None = None,
        label_prefix: str = "minisched",
        command_timeout: float = 60,
    ) -> None:
        self.label_prefix = label_prefix
        self.command_timeout = command_timeout
        self._docker_cmd = docker_binary or self._find_docker()

    # ------------------------------------------------------------------
    # Docker CLI discovery
    # ------------------------------------------------------------------

    @staticmethod
    def _find_docker() -> str:
        """Find the docker CLI binary."""
        docker = shutil.which("docker")
        if docker is None:
            raise BackendUnavailableError(
                "Docker CLI not found on PATH. Install Docker or set MINISCHED_DOCKER_BINARY."
            )
        return docker

    def ping(self) -> None:
        """Check that the docker daemon answers."""
        self._run_docker(
            ["info", "--format", "{{.ServerVersion}}"],
            error_cls=BackendUnavailableError,
            timeout=10,
        )

    # ------------------------------------------------------------------
    # Unit lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        image: str,
        command: str,
        memory_limit_bytes: int,
        name: str,
    ) -> str:
        result = self._run_docker(
            [
                "create",
                "--name", name,
                "--memory", str(memory_limit_bytes),
                "--label", f"{self.label_prefix}.task={name}",
                image,
                "sh", "-c", command,
            ],
            error_cls=UnitCreateError,
            timeout=None,
        )
        unit_id = result.stdout.strip()
        if not unit_id:
            raise UnitCreateError(f"docker create returned no container id for {name!r}")
        logger.debug("docker.created", container=name, unit_id=unit_id[:12], image=image)
        return unit_id

    def start(self, unit_id: str) -> None:
        self._run_docker(["start", unit_id], error_cls=UnitStartError, timeout=None)

    def stats_snapshot(self, unit_id: str) -> dict[str, Any]:
        """Read one ``docker stats`` sample (``--no-stream``) as a dict."""
        result = self._run_docker(
            ["stats", "--no-stream", "--format", "{{json .}}", unit_id],
            error_cls=BackendError,
        )
        line = result.stdout.strip().splitlines()[0] if result.stdout.strip() else ""
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise StatsDecodeError(
                f"docker stats returned non-JSON output: {line!r}", cause=exc
            ) from exc
        if not isinstance(payload, dict):
            raise StatsDecodeError(f"docker stats returned {type(payload).__name__}, expected object")
        return payload

    def wait_for_exit(self, unit_id: str) -> WaitOutcome:
        """Block on ``docker wait`` until the container stops running."""
        try:
            result = self._run_docker(["wait", unit_id], error_cls=UnitWaitError, timeout=None)
        except UnitWaitError as exc:
            return WaitFailed(exc)
        raw = result.stdout.strip()
        try:
            return Exited(int(raw))
        except ValueError:
            return WaitFailed(UnitWaitError(f"docker wait returned unexpected output: {raw!r}"))

    def remove(self, unit_id: str) -> None:
        self._run_docker(["rm", "--force", unit_id], error_cls=UnitRemoveError)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _run_docker(
        self,
        args: list[str],
        error_cls: type[BackendError],
        timeout: float | None = -1,
    ) -> subprocess.CompletedProcess[str]:
        """Run a docker CLI command; raise *error_cls* on any failure.

        ``timeout=-1`` means the backend's default; ``None`` means no timeout.
        """
        if timeout == -1:
            timeout = self.command_timeout
        cmd = [self._docker_cmd, *args]
        logger.debug("docker.exec", cmd=" ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise error_cls(
                f"Docker command timed out after {exc.timeout}s: {' '.join(args)}", cause=exc
            ) from exc
        except OSError as exc:
            raise error_cls(f"Docker command could not run: {exc}", cause=exc) from exc
        if result.returncode != 0:
            raise error_cls(
                f"Docker command failed (exit {result.returncode}): "
                f"{' '.join(args)}\n{result.stderr.strip()}"
            )
        return result
