"""
Shared pytest fixtures for the SwellMind test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``make_forecast`` / ``make_session``: factories for domain objects with
    sensible defaults, overridable per test.
  - Sample preferences and the canonical heuristic-scoring forecast.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Callable, Generator

import pytest

from swellmind.db.schema import apply_schema
from swellmind.models.forecast import ForecastObservation
from swellmind.models.session import SessionRecord, TrainingPair, UserPreferences
from swellmind.taxonomy.conditions import TimeOfDay, WindOrientation

BASE_TIME = datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def make_forecast() -> Callable[..., ForecastObservation]:
    """Factory: ``make_forecast(wave_height=2.0, ...)``."""

    def _make(**overrides) -> ForecastObservation:
        fields = dict(
            spot_id="pipeline",
            timestamp=BASE_TIME,
            wave_height=1.5,
            wave_period=12.0,
            wind_speed=2.0,
            wind_direction=90.0,
            wind_orientation=WindOrientation.OFFSHORE,
        )
        fields.update(overrides)
        return ForecastObservation(**fields)

    return _make


@pytest.fixture
def make_session(make_forecast) -> Callable[..., SessionRecord]:
    """Factory: ``make_session(rating=8, forecast=...)``; linked by default."""

    def _make(**overrides) -> SessionRecord:
        fields = dict(
            user_id="alice",
            spot_id="pipeline",
            surf_timestamp=BASE_TIME,
            rating=7,
        )
        fields.update(overrides)
        if "forecast" not in overrides:
            fields["forecast"] = make_forecast(timestamp=fields["surf_timestamp"])
        return SessionRecord(**fields)

    return _make


@pytest.fixture
def make_pair(make_forecast) -> Callable[..., TrainingPair]:
    """Factory: ``make_pair(rating, **forecast_fields)``."""

    def _make(rating: int, **forecast_fields) -> TrainingPair:
        return TrainingPair(forecast=make_forecast(**forecast_fields), rating=rating)

    return _make


@pytest.fixture
def sample_prefs() -> UserPreferences:
    """Preferences from the canonical scoring scenario."""
    return UserPreferences(
        ideal_wave_size_min=1.0,
        ideal_wave_size_max=2.0,
        preferred_times_of_day=[TimeOfDay.MORNING],
    )


@pytest.fixture
def canonical_forecast() -> ForecastObservation:
    """1.5 m, offshore, 2 m/s at 07:00 UTC (dawn)."""
    return ForecastObservation(
        timestamp=datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc),
        wave_height=1.5,
        wind_orientation=WindOrientation.OFFSHORE,
        wind_speed=2.0,
    )
