"""Tests for the usage monitor and memory decoding."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from minisched.core.errors import BackendError, StatsDecodeError
from minisched.scheduler.models import UsageSnapshot
from minisched.scheduler.monitor import UsageMonitor, decode_memory_bytes, parse_size


class TestParseSize:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0B", 0),
            ("512B", 512),
            ("1KiB", 1024),
            ("1.5MiB", 1.5 * 1024**2),
            ("2GiB", 2 * 1024**3),
            ("10kB", 10_000),
            ("3MB", 3_000_000),
            (" 4.25MiB ", 4.25 * 1024**2),
        ],
    )
    def test_units(self, text, expected):
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["", "MiB", "1.5 parsecs", "--"])
    def test_invalid(self, text):
        with pytest.raises(StatsDecodeError):
            parse_size(text)


class TestDecodeMemoryBytes:
    def test_engine_api_payload(self):
        assert decode_memory_bytes({"memory_stats": {"usage": 1572864}}) == 1572864

    def test_cli_payload(self):
        assert decode_memory_bytes({"MemUsage": "1.5MiB / 128MiB"}) == 1.5 * 1024**2

    def test_missing_field(self):
        with pytest.raises(StatsDecodeError):
            decode_memory_bytes({"CPUPerc": "0.00%"})

    def test_non_numeric_usage(self):
        with pytest.raises(StatsDecodeError):
            decode_memory_bytes({"memory_stats": {"usage": "lots"}})


class TestUsageMonitor:
    def test_snapshot_converts_to_megabytes_without_rounding(self):
        backend = MagicMock()
        backend.stats_snapshot.return_value = {"memory_stats": {"usage": 1_000_000}}

        snapshot = UsageMonitor(backend).snapshot("abc")

        assert snapshot == UsageSnapshot(memory_mb=1_000_000 / 1024 / 1024)
        backend.stats_snapshot.assert_called_once_with("abc")

    def test_backend_error_propagates(self):
        backend = MagicMock()
        backend.stats_snapshot.side_effect = BackendError("gone")
        with pytest.raises(BackendError):
            UsageMonitor(backend).snapshot("abc")

    def test_decode_error_propagates(self):
        backend = MagicMock()
        backend.stats_snapshot.return_value = {}
        with pytest.raises(StatsDecodeError):
            UsageMonitor(backend).snapshot("abc")
