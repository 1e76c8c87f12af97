"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      - committed static defaults
  2. ``config/local.toml``        - optional local overrides (gitignored)
  3. ``.env``                     - local secrets and env overrides (gitignored)
  4. Environment variables        - ``SWELLMIND_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The scoring constants (sub-score weights, blend ratio, phase thresholds)
are product-tunable values, not derived ones.  Every scoring function takes
its constants from one of the sections below and defaults to the section's
defaults, so a missing config file never changes scoring behaviour.
"""

from __future__ import annotations

import math
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/swellmind.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class ScoringConfig(BaseModel):
    """Weights and thresholds used by the heuristic and blended scorers."""

    model_config = ConfigDict(frozen=True)

    wave_weight: float = 0.40
    wind_orientation_weight: float = 0.25
    wind_speed_weight: float = 0.20
    time_weight: float = 0.15
    recommend_threshold: int = 75
    blend_heuristic_weight: float = 0.5
    high_tier_threshold: int = 80
    mid_tier_threshold: int = 60
    preferred_time_boost: int = 10

    @field_validator("blend_heuristic_weight")
    @classmethod
    def validate_blend_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"blend_heuristic_weight must be in [0.0, 1.0], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_weights_sum(self) -> "ScoringConfig":
        total = (
            self.wave_weight
            + self.wind_orientation_weight
            + self.wind_speed_weight
            + self.time_weight
        )
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Sub-score weights must sum to 1.0, got {total:.4f}.")
        return self


class PhaseConfig(BaseModel):
    """Session-count thresholds separating generic, blended and learned scoring."""

    model_config = ConfigDict(frozen=True)

    min_sessions_for_model: int = 3
    learned_threshold: int = 10

    @model_validator(mode="after")
    def validate_order(self) -> "PhaseConfig":
        if self.min_sessions_for_model < 1:
            raise ValueError("min_sessions_for_model must be >= 1.")
        if self.learned_threshold < self.min_sessions_for_model:
            raise ValueError(
                f"learned_threshold ({self.learned_threshold}) must be >= "
                f"min_sessions_for_model ({self.min_sessions_for_model})."
            )
        return self


class TrainingConfig(BaseModel):
    """Per-user model fitting settings."""

    model_config = ConfigDict(frozen=True)

    regressor: str = "auto"   # auto | ols | fixed

    @field_validator("regressor")
    @classmethod
    def validate_regressor(cls, v: str) -> str:
        valid = {"auto", "ols", "fixed"}
        if v.lower() not in valid:
            raise ValueError(f"regressor must be one of {sorted(valid)}, got '{v}'.")
        return v.lower()


class InsightsConfig(BaseModel):
    """Thresholds for insight derivation from session history."""

    model_config = ConfigDict(frozen=True)

    min_sessions: int = 3
    good_rating_threshold: int = 7
    high_confidence_sessions: int = 15
    medium_confidence_sessions: int = 8


class SessionConfig(BaseModel):
    """Write-path matching windows, in minutes."""

    model_config = ConfigDict(frozen=True)

    forecast_link_window_minutes: int = 90
    duplicate_window_minutes: int = 30


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/swellmind.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration, the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    scoring: ScoringConfig = ScoringConfig()
    phases: PhaseConfig = PhaseConfig()
    training: TrainingConfig = TrainingConfig()
    insights: InsightsConfig = InsightsConfig()
    sessions: SessionConfig = SessionConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply SWELLMIND_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply SWELLMIND_* env vars to the raw config dict.

    Supported overrides:
      SWELLMIND_DB_PATH    -> raw["database"]["db_path"]
      SWELLMIND_LOG_LEVEL  -> raw["logging"]["level"]
      SWELLMIND_REGRESSOR  -> raw["training"]["regressor"]
      SWELLMIND_DEBUG      -> raw["debug"]
    """
    if db_path := os.environ.get("SWELLMIND_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("SWELLMIND_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if regressor := os.environ.get("SWELLMIND_REGRESSOR"):
        raw.setdefault("training", {})["regressor"] = regressor

    if debug := os.environ.get("SWELLMIND_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        phases=PhaseConfig(**raw.get("phases", {})),
        training=TrainingConfig(**raw.get("training", {})),
        insights=InsightsConfig(**raw.get("insights", {})),
        sessions=SessionConfig(**raw.get("sessions", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
