"""Completion Barrier: counts active workers and blocks until all exit."""

from __future__ import annotations

import threading


class WorkerGroup:
    """A counter of active workers that ``wait()`` can block on.

    Workers call ``done()`` from a ``finally`` block when their consumption
    loop ends, so a failing task can never skip or double the count.

    Example::

        group = WorkerGroup()
        group.add(3)
        ...            # each worker thread calls group.done() on exit
        group.wait()   # returns once the count reaches zero
    """

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def active(self) -> int:
        with self._cond:
            return self._count

    def add(self, n: int = 1) -> None:
        with self._cond:
            if self._count + n < 0:
                raise RuntimeError("WorkerGroup counter would go negative")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the counter reaches zero.

        Returns ``False`` if *timeout* elapsed first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
