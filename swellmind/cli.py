"""
SwellMind CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute the action against the SQLite database.
  5. Report the result to stdout; errors go to stderr with exit code 1.

Install and run::

    pip install -e .
    swellmind --help
    swellmind init-db
    swellmind add-user alice --wave-min 0.8 --wave-max 1.8 --time dawn
    swellmind import-forecasts --file forecasts.json --beach-orientation 270
    swellmind log-session --user alice --spot pipeline --at 2026-03-01T07:00:00Z --rating 8
    swellmind score --user alice --spot pipeline
    swellmind insights --user alice
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="swellmind",
    help="SwellMind: personalised surf-window scoring from your logged sessions.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from swellmind.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from swellmind.utils.logging import configure_logging
    configure_logging(config.logging)


def _connect(config, db_path: Optional[str] = None):
    from swellmind.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


def _parse_timestamp_or_exit(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid timestamp '{value}': {exc}", err=True)
        raise typer.Exit(code=1)


def _require_user_or_exit(conn, user_id: str):
    from swellmind.db.repositories.user_repo import UserRepository

    prefs = UserRepository(conn).get_preferences(user_id)
    if prefs is None:
        typer.echo(f"[ERROR] User '{user_id}' not found. Run add-user first.", err=True)
        raise typer.Exit(code=1)
    return prefs


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the schema.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    """
    from swellmind.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with _connect(config, target_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values."""
    config = _load_config_or_exit(config_path)

    s = config.scoring
    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(
        f"  Score weights:    wave={s.wave_weight} wind={s.wind_orientation_weight} "
        f"speed={s.wind_speed_weight} time={s.time_weight}"
    )
    typer.echo(
        f"  Phases:           blended from {config.phases.min_sessions_for_model}, "
        f"learned from {config.phases.learned_threshold} sessions"
    )
    typer.echo(f"  Regressor:        {config.training.regressor}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))


@app.command("import-forecasts")
def import_forecasts(
    forecasts_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="JSON array of forecast observations.",
    ),
    spot_id: Optional[str] = typer.Option(
        None,
        "--spot",
        help="Spot ID for records that do not carry one.",
    ),
    beach_orientation: Optional[float] = typer.Option(
        None,
        "--beach-orientation",
        help="Beach facing in degrees; derives wind_orientation where missing.",
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate records but do not write to the database.",
    ),
) -> None:
    """Import forecast windows from a JSON file.

    Uses UPSERT semantics: a window with the same spot, timestamp and
    data source is refreshed in place.
    """
    from pydantic import ValidationError

    from swellmind.db.repositories.forecast_repo import ForecastRepository
    from swellmind.features.orientation import calculate_wind_orientation
    from swellmind.models.forecast import ForecastObservation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(forecasts_file)
    if not path.exists():
        typer.echo(f"[ERROR] Forecast file not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        with open(path, encoding="utf-8") as f:
            raw_records = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(raw_records, list):
        typer.echo("[ERROR] Forecast file must contain a JSON array.", err=True)
        raise typer.Exit(code=1)

    validated: list[ForecastObservation] = []
    errors: list[tuple[int, str]] = []
    for i, raw in enumerate(raw_records):
        record = dict(raw)
        if spot_id and not record.get("spot_id"):
            record["spot_id"] = spot_id
        if beach_orientation is not None and not record.get("wind_orientation"):
            record["wind_orientation"] = calculate_wind_orientation(
                record.get("wind_direction"), beach_orientation
            )
        try:
            obs = ForecastObservation(**record)
        except ValidationError as exc:
            errors.append((i, str(exc)))
            continue
        if obs.spot_id is None:
            errors.append((i, "missing spot_id (pass --spot)"))
            continue
        validated.append(obs)

    if errors:
        typer.echo(f"[ERROR] {len(errors)} record(s) failed validation:", err=True)
        for idx, msg in errors[:5]:
            typer.echo(f"  Record #{idx}: {msg}", err=True)
        if len(errors) > 5:
            typer.echo(f"  ... and {len(errors) - 5} more.", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Validated {len(validated)} forecast window(s).")

    if dry_run:
        typer.echo("[DRY RUN] No forecasts written to database.")
        return

    with _connect(config, db_path) as conn:
        written = ForecastRepository(conn).upsert_batch(validated)

    typer.echo(f"  Upserted {written} forecast window(s).")
    typer.echo("[OK] Forecasts imported.")


@app.command("add-user")
def add_user(
    user_id: str = typer.Argument(..., help="User ID."),
    wave_min: float = typer.Option(0.5, "--wave-min", help="Ideal wave height lower bound (m)."),
    wave_max: float = typer.Option(1.5, "--wave-max", help="Ideal wave height upper bound (m)."),
    crowd: int = typer.Option(5, "--crowd", help="Crowd tolerance, 1-10."),
    times: Optional[list[str]] = typer.Option(
        None,
        "--time",
        help="Preferred time of day (repeatable): dawn, morning, midday, afternoon, evening.",
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Create a user, or replace an existing user's preferences."""
    from pydantic import ValidationError

    from swellmind.db.repositories.user_repo import UserRepository
    from swellmind.models.session import UserPreferences

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        prefs = UserPreferences(
            ideal_wave_size_min=wave_min,
            ideal_wave_size_max=wave_max,
            crowd_tolerance=crowd,
            preferred_times_of_day=times or [],
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid preferences: {exc}", err=True)
        raise typer.Exit(code=1)

    with _connect(config, db_path) as conn:
        UserRepository(conn).upsert(user_id, prefs)

    typer.echo(f"[OK] User '{user_id}' saved.")


# ── Session commands ──────────────────────────────────────────────────────────

@app.command("log-session")
def log_session(
    user_id: str = typer.Option(..., "--user", help="User ID."),
    spot_id: str = typer.Option(..., "--spot", help="Spot ID."),
    at: str = typer.Option(..., "--at", help="Session time, ISO 8601 (naive = UTC)."),
    rating: int = typer.Option(..., "--rating", help="Overall rating, 1-10."),
    wind: Optional[str] = typer.Option(
        None, "--wind", help="Perceived wind: too_onshore, just_right, too_weak."
    ),
    size: Optional[int] = typer.Option(None, "--size", help="Perceived wave size, 1-10."),
    crowd: Optional[int] = typer.Option(None, "--crowd", help="Perceived crowd, 1-10."),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free text, max 500 chars."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Log a surf session and retrain the user's model."""
    from pydantic import ValidationError

    from swellmind.models.session import SessionRecord
    from swellmind.pipeline.retrain import RetrainWorker
    from swellmind.sessions.service import (
        DuplicateSessionError,
        SessionService,
        UserNotFoundError,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        record = SessionRecord(
            user_id=user_id,
            spot_id=spot_id,
            surf_timestamp=_parse_timestamp_or_exit(at),
            rating=rating,
            perceived_wind=wind,
            perceived_size=size,
            perceived_crowd=crowd,
            notes=notes,
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid session: {exc}", err=True)
        raise typer.Exit(code=1)

    worker = RetrainWorker(config, db_path=db_path)
    with _connect(config, db_path) as conn:
        service = SessionService(conn, publish=worker.publish, config=config.sessions)
        try:
            stored = service.log_session(record)
        except (DuplicateSessionError, UserNotFoundError) as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)

    worker.drain()

    linked = "linked to forecast" if stored.is_linked else "no forecast within window"
    typer.echo(f"[OK] Session {stored.session_id} logged ({linked}).")
    if worker.failures:
        typer.echo("[WARN] Model retrain failed; see log for details.", err=True)


@app.command("delete-session")
def delete_session(
    session_id: int = typer.Argument(..., help="Session ID."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Delete a session and retrain the owner's model."""
    from swellmind.pipeline.retrain import RetrainWorker
    from swellmind.sessions.service import SessionNotFoundError, SessionService

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    worker = RetrainWorker(config, db_path=db_path)
    with _connect(config, db_path) as conn:
        try:
            SessionService(conn, publish=worker.publish, config=config.sessions).delete_session(session_id)
        except SessionNotFoundError as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)

    worker.drain()
    typer.echo(f"[OK] Session {session_id} deleted.")


@app.command("retrain")
def retrain(
    user_id: str = typer.Option(..., "--user", help="User ID."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Retrain one user's model from all of their linked sessions."""
    from swellmind.pipeline.retrain import retrain_user

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _connect(config, db_path) as conn:
        _require_user_or_exit(conn, user_id)
        stats = retrain_user(conn, user_id, config)

    typer.echo(f"  Sessions:  {stats.num_sessions}")
    typer.echo(f"  Phase:     {stats.model_type.value}")
    if stats.model is None:
        typer.echo("  Model:     not enough sessions yet")
    else:
        typer.echo(f"  Fit:       {stats.model.fit_method.value}")
        typer.echo(f"  MAE:       {stats.training_error:.2f}")
    typer.echo("[OK] Retrain complete.")


# ── Read commands ─────────────────────────────────────────────────────────────

@app.command("score")
def score(
    user_id: str = typer.Option(..., "--user", help="User ID."),
    spot_id: str = typer.Option(..., "--spot", help="Spot ID."),
    limit: int = typer.Option(10, "--limit", help="Maximum upcoming windows to show."),
    include_past: bool = typer.Option(False, "--include-past", help="Also list past windows."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Score and rank a spot's forecast windows for a user."""
    from swellmind.db.repositories.forecast_repo import ForecastRepository
    from swellmind.db.repositories.model_repo import ModelStatsRepository
    from swellmind.db.repositories.session_repo import SessionRepository
    from swellmind.ml.trainer import model_type_for_count
    from swellmind.scoring.router import rank_windows
    from swellmind.utils.time_utils import utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _connect(config, db_path) as conn:
        prefs = _require_user_or_exit(conn, user_id)
        forecasts = ForecastRepository(conn).get_for_spot(spot_id)
        stats = ModelStatsRepository(conn).get(user_id)
        num_sessions = SessionRepository(conn).count_linked(user_id)

    if not forecasts:
        typer.echo(f"[ERROR] No forecast windows stored for spot '{spot_id}'.", err=True)
        raise typer.Exit(code=1)

    model = stats.model if stats else None
    now = utcnow()
    ranked = rank_windows(
        forecasts,
        prefs,
        model=model,
        num_sessions=num_sessions,
        now=now,
        limit=limit,
        scoring=config.scoring,
        phases=config.phases,
    )
    if not include_past:
        ranked = [w for w in ranked if w.forecast.timestamp >= now]

    if as_json:
        typer.echo(json.dumps([w.model_dump(mode="json") for w in ranked], indent=2))
        return

    phase = model_type_for_count(num_sessions, config.phases).value if model else "generic"
    typer.echo(f"Windows for '{spot_id}' (user={user_id}, phase={phase}):")
    for w in ranked:
        flag = "*" if w.result.is_recommended else " "
        typer.echo(
            f"  {flag} {w.forecast.timestamp:%Y-%m-%d %H:%M}Z  "
            f"{w.result.score:>3}  {w.result.explanation}"
        )


@app.command("insights")
def insights(
    user_id: str = typer.Option(..., "--user", help="User ID."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show what a user's best sessions had in common."""
    from swellmind.db.repositories.session_repo import SessionRepository
    from swellmind.insights.report import build_insights_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _connect(config, db_path) as conn:
        _require_user_or_exit(conn, user_id)
        sessions = SessionRepository(conn).get_for_user(user_id)

    report = build_insights_report(sessions, config=config.insights, phases=config.phases)

    typer.echo(f"Insights for {user_id} ({report.total_sessions} linked sessions):")
    if report.message:
        typer.echo(f"  {report.message}")
        return

    ins = report.insights
    if ins is None:
        typer.echo("  No sessions rated 7 or higher yet.")
    else:
        typer.echo(
            f"  Ideal waves:   {ins.ideal_wave_height_min:.1f}-{ins.ideal_wave_height_max:.1f} m, "
            f"{ins.ideal_wave_period_min:.0f}-{ins.ideal_wave_period_max:.0f} s"
        )
        typer.echo(f"  Wind:          {ins.preferred_wind.value}")
        typer.echo(f"  Time of day:   {ins.preferred_time_of_day.value}")
        typer.echo(f"  Avg rating:    {ins.avg_rating}")
        typer.echo(f"  Confidence:    {ins.model_confidence.value}")

    if report.best_spot:
        typer.echo(
            f"  Best spot:     {report.best_spot.spot_id} "
            f"({report.best_spot.avg_rating:.1f} avg over {report.best_spot.session_count})"
        )
    typer.echo(f"  Trend:         {report.trend} ({report.sessions_last_30_days} in last 30 days)")
    for rec in report.recommendations:
        typer.echo(f"  - {rec}")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
