"""
Tests for swellmind/utils (time helpers and the JSON log formatter).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from swellmind.utils.logging import _JsonFormatter
from swellmind.utils.time_utils import round_half_up, to_utc, within_window


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(98.5, 99), (98.4999, 98), (0.5, 1), (2.5, 3), (0.0, 0), (100.0, 100)],
    )
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


class TestTimeHelpers:
    def test_to_utc_converts_offsets(self):
        ts = datetime(2026, 3, 1, 3, 0, tzinfo=timezone(timedelta(hours=-4)))
        assert to_utc(ts) == datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc)

    def test_within_window_inclusive(self):
        t = datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc)
        assert within_window(t, t + timedelta(minutes=30), 30)
        assert not within_window(t, t + timedelta(minutes=31), 30)


class TestJsonFormatter:
    def test_emits_one_json_object_with_extras(self):
        record = logging.LogRecord(
            "swellmind.pipeline.retrain", logging.INFO, __file__, 1,
            "Retrained user=%s", ("alice",), None,
        )
        record.user_id = "alice"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["msg"] == "Retrained user=alice"
        assert payload["level"] == "INFO"
        assert payload["user_id"] == "alice"
        assert payload["ts"].endswith("Z")
