"""
CLI: ``minisched`` - submit N tasks and run them on a fixed worker pool.

Single command, no sub-commands::

    minisched                                   # 5 x "sleep 2" on alpine
    minisched --count 10 --image busybox --cmd "echo hi"
    minisched --workers 2 --memory-limit 67108864
    minisched --dry-run                         # in-memory backend, no Docker

Exit codes:
    0  the run finished (individual task failures do not change this)
    1  the backend could not be reached at startup
    1  the configuration (flags or MINISCHED_* settings) is invalid; this
       is reported before any backend call
    2  usage error from the argument parser (e.g. a negative --count)
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from typer import Typer

from minisched.core.errors import BackendUnavailableError, ConfigError

app = Typer(
    name="minisched",
    help="minisched: run isolated tasks on a fixed-size worker pool.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console(highlight=False)
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError, version as pkg_version

        try:
            v = pkg_version("minisched")
        except PackageNotFoundError:
            from minisched import __version__ as v
        typer.echo(f"minisched {v}")
        raise typer.Exit()


@app.command()
def run(
    count: int = typer.Option(5, "--count", "-n", min=0, help="Number of tasks to run."),
    image: str = typer.Option("alpine", "--image", "-i", help="Image to run every task in."),
    cmd: str = typer.Option("sleep 2", "--cmd", "-c", help="Shell command run inside each unit."),
    workers: int | None = typer.Option(None, "--workers", "-w", help="Concurrent workers."),  # noqa: UP007
    memory_limit: int | None = typer.Option(  # noqa: UP007
        None, "--memory-limit", "-m", help="Memory ceiling per unit, in bytes."
    ),
    queue_capacity: int | None = typer.Option(  # noqa: UP007
        None, "--queue-capacity", help="Task queue bound."
    ),
    settle_delay: float | None = typer.Option(  # noqa: UP007
        None, "--settle-delay", help="Seconds between start and the usage snapshot."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory backend."),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Log level."),  # noqa: UP007
    json_logs: bool | None = typer.Option(  # noqa: UP007
        None, "--json-logs/--console-logs", help="Force JSON or console log output."
    ),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Submit COUNT tasks and block until every worker has finished."""
    from minisched.core.logging import configure_logging
    from minisched.core.settings import SchedulerSettings
    from minisched.scheduler.scheduler import Scheduler

    try:
        settings = SchedulerSettings()
        config = settings.to_config(
            worker_count=workers,
            memory_limit_bytes=memory_limit,
            queue_capacity=queue_capacity,
            settle_delay=settle_delay,
        )
        configure_logging(
            level=log_level or settings.log_level,
            json_format=json_logs if json_logs is not None else settings.json_logs,
        )
    except (ConfigError, ValidationError, ValueError) as exc:
        err_console.print(f"[bold red]Invalid configuration[/bold red]: {escape(str(exc))}")
        raise typer.Exit(code=1)

    try:
        backend = _make_backend(dry_run, settings.docker_binary)
        backend.ping()
    except BackendUnavailableError as exc:
        err_console.print(f"[bold red]Failed to connect to backend[/bold red]: {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print("--- Mini-Scheduler Initialized ---")
    console.print(
        f"Config: {config.worker_count} Workers | {count} Tasks | Image: {image}",
        markup=False,
    )

    Scheduler(backend, config).run(count, image, cmd)

    console.print("--- All Jobs Completed ---")


def _make_backend(dry_run: bool, docker_binary: str | None):
    if dry_run:
        from minisched.backend.memory import InMemoryBackend

        return InMemoryBackend()

    from minisched.backend.docker import DockerBackend

    return DockerBackend(docker_binary=docker_binary)
