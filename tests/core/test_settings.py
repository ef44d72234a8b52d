"""Tests for SchedulerSettings and SchedulerConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from minisched.core.errors import ConfigError
from minisched.core.settings import SchedulerSettings
from minisched.scheduler.config import DEFAULT_MEMORY_LIMIT_BYTES, SchedulerConfig


class TestSchedulerConfig:
    def test_defaults(self):
        config = SchedulerConfig()
        assert config.worker_count == 3
        assert config.memory_limit_bytes == 128 * 1024 * 1024
        assert config.queue_capacity == 100
        assert config.settle_delay == 1.0
        assert config.remove_on_start_failure is True

    @pytest.mark.parametrize("field", ["worker_count", "memory_limit_bytes", "queue_capacity"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValidationError):
            SchedulerConfig(**{field: 0})

    def test_rejects_negative_settle_delay(self):
        with pytest.raises(ValidationError):
            SchedulerConfig(settle_delay=-1)

    def test_frozen(self):
        config = SchedulerConfig()
        with pytest.raises(ValidationError):
            config.worker_count = 10


class TestSchedulerSettings:
    def test_defaults(self):
        settings = SchedulerSettings(_env_file=None)
        assert settings.worker_count == 3
        assert settings.memory_limit_bytes == DEFAULT_MEMORY_LIMIT_BYTES
        assert settings.docker_binary is None
        assert settings.log_level == "INFO"

    @patch.dict(os.environ, {"MINISCHED_WORKER_COUNT": "7", "MINISCHED_SETTLE_DELAY": "0.5"})
    def test_from_env(self):
        settings = SchedulerSettings(_env_file=None)
        assert settings.worker_count == 7
        assert settings.settle_delay == 0.5

    def test_to_config_applies_overrides(self):
        settings = SchedulerSettings(_env_file=None, worker_count=2)
        config = settings.to_config(worker_count=5, queue_capacity=None)
        assert config.worker_count == 5
        assert config.queue_capacity == 100

    def test_to_config_uses_settings_when_override_missing(self):
        settings = SchedulerSettings(_env_file=None, worker_count=2, remove_on_start_failure=False)
        config = settings.to_config()
        assert config.worker_count == 2
        assert config.remove_on_start_failure is False

    def test_to_config_invalid_raises_config_error(self):
        settings = SchedulerSettings(_env_file=None)
        with pytest.raises(ConfigError):
            settings.to_config(worker_count=0)
