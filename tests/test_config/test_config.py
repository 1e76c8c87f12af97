"""
Tests for swellmind/config.py.

What we test
------------
  - Section defaults match the documented scoring constants.
  - load_config() reads a TOML file, deep-merges local.toml, and applies
    SWELLMIND_* environment overrides.
  - Invalid values raise ValidationError; a missing file raises
    FileNotFoundError.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from swellmind.config import (
    AppConfig,
    LoggingConfig,
    PhaseConfig,
    ScoringConfig,
    TrainingConfig,
    load_config,
)

_TOML = """
[database]
db_path = "data/db/test.db"

[scoring]
recommend_threshold = 70

[training]
regressor = "fixed"
"""


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ("SWELLMIND_DB_PATH", "SWELLMIND_LOG_LEVEL", "SWELLMIND_REGRESSOR", "SWELLMIND_DEBUG"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_scoring_constants(self):
        s = ScoringConfig()
        assert (s.wave_weight, s.wind_orientation_weight, s.wind_speed_weight, s.time_weight) == (
            0.40, 0.25, 0.20, 0.15
        )
        assert s.recommend_threshold == 75
        assert s.blend_heuristic_weight == 0.5

    def test_phase_thresholds(self):
        p = PhaseConfig()
        assert (p.min_sessions_for_model, p.learned_threshold) == (3, 10)

    def test_app_config_defaults(self):
        assert AppConfig().training.regressor == "auto"


class TestValidation:
    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ScoringConfig(wave_weight=0.5)

    def test_blend_weight_range(self):
        with pytest.raises(ValidationError):
            ScoringConfig(blend_heuristic_weight=1.5)

    def test_phase_order(self):
        with pytest.raises(ValidationError, match="learned_threshold"):
            PhaseConfig(min_sessions_for_model=5, learned_threshold=4)

    def test_unknown_regressor(self):
        with pytest.raises(ValidationError, match="regressor"):
            TrainingConfig(regressor="xgboost")

    def test_log_level_normalised(self):
        assert LoggingConfig(level="debug").level == "DEBUG"


class TestLoadConfig:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "default.toml"
        path.write_text(_TOML)
        config = load_config(path)
        assert config.database.db_path == "data/db/test.db"
        assert config.scoring.recommend_threshold == 70
        assert config.scoring.wave_weight == 0.40
        assert config.training.regressor == "fixed"

    def test_local_overrides_are_merged(self, tmp_path):
        (tmp_path / "default.toml").write_text(_TOML)
        (tmp_path / "local.toml").write_text("[scoring]\nrecommend_threshold = 80\n")
        config = load_config(tmp_path / "default.toml")
        assert config.scoring.recommend_threshold == 80
        assert config.database.db_path == "data/db/test.db"

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "default.toml"
        path.write_text(_TOML)
        monkeypatch.setenv("SWELLMIND_DB_PATH", "/tmp/override.db")
        monkeypatch.setenv("SWELLMIND_REGRESSOR", "ols")
        monkeypatch.setenv("SWELLMIND_DEBUG", "true")
        config = load_config(path)
        assert config.database.db_path == "/tmp/override.db"
        assert config.training.regressor == "ols"
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "default.toml"
        path.write_text("[scoring]\ntime_weight = 0.5\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_committed_default_file_loads(self):
        assert load_config().phases.learned_threshold == 10
