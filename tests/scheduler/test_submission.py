"""Tests for the submission loop."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from minisched.scheduler.models import Task
from minisched.scheduler.queue import TaskQueue
from minisched.scheduler.submission import make_tasks, submit_tasks


class TestMakeTasks:
    @pytest.mark.parametrize("count", [0, 1, 7])
    def test_ids_are_one_indexed(self, count):
        tasks = list(make_tasks(count, "alpine", "sleep 2"))
        assert [t.id for t in tasks] == [f"job-{i}" for i in range(1, count + 1)]
        assert all(t.image == "alpine" and t.command == "sleep 2" for t in tasks)

    def test_negative_count(self):
        with pytest.raises(ValueError):
            list(make_tasks(-1, "alpine", "true"))

    def test_ids_identical_across_runs(self):
        first = [t.id for t in make_tasks(4, "alpine", "true")]
        second = [t.id for t in make_tasks(4, "alpine", "true")]
        assert first == second


class TestSubmitTasks:
    def test_enqueues_in_order_then_closes(self):
        queue = TaskQueue(capacity=10)
        assert submit_tasks(queue, 3, "alpine", "true") == 3
        assert queue.closed
        assert [t.id for t in queue] == ["job-1", "job-2", "job-3"]

    def test_zero_count_still_closes(self):
        queue = TaskQueue()
        assert submit_tasks(queue, 0, "alpine", "true") == 0
        assert queue.closed
        assert queue.get() is None

    def test_close_called_exactly_once_after_last_put(self):
        queue = MagicMock()
        submit_tasks(queue, 2, "alpine", "true")
        assert [c[0] for c in queue.method_calls] == ["put", "put", "close"]
        assert queue.put.call_args_list[-1].args[0] == Task("job-2", "alpine", "true")

    def test_blocks_on_small_queue_until_drained(self):
        queue = TaskQueue(capacity=1)
        producer = threading.Thread(target=submit_tasks, args=(queue, 5, "alpine", "true"))
        producer.start()
        drained = [t.id for t in queue]
        producer.join(timeout=2)
        assert drained == [f"job-{i}" for i in range(1, 6)]
        assert not producer.is_alive()
