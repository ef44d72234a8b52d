"""Tests for minisched.core.logging."""

from __future__ import annotations

import json

import pytest
import structlog

from minisched.core.logging import LogContext, configure_logging, get_logger


class TestConfigureLogging:
    def test_json_output_uses_ecs_fields(self, capsys):
        configure_logging(level="INFO", json_format=True, service="test-sched")
        get_logger("minisched.test").info("task.finished", task_id="job-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "task.finished"
        assert record["task_id"] == "job-1"
        assert record["service.name"] == "test-sched"
        assert record["log.level"] == "info"
        assert "@timestamp" in record

    def test_level_filters_debug(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("minisched.test").debug("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(level="LOUD")


class TestLogContext:
    def test_context_bound_and_released(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("minisched.test")

        with LogContext(worker_id=2, task_id="job-4"):
            logger.info("inside")
        logger.info("outside")

        lines = [json.loads(l) for l in capsys.readouterr().out.strip().splitlines()]
        inside = next(r for r in lines if r["event"] == "inside")
        outside = next(r for r in lines if r["event"] == "outside")
        assert inside["worker_id"] == 2
        assert inside["task_id"] == "job-4"
        assert "task_id" not in outside
        assert structlog.contextvars.get_contextvars() == {}
