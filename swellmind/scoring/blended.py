"""
Learned and blended scoring for users with a trained model.

Blend policy
------------
    learned = round(clamp(predicted_rating, 1, 10) * 10)
    heuristic = calculate_generic_score(...).score

    sessions < learned_threshold (10):  final = round(0.5*heuristic + 0.5*learned)
    sessions >= learned_threshold:      final = learned

Explanation format::

    "<lead>. <tier>[, <call-out>...]."

  lead:      "Based on your style + general patterns"   (blended)
             "Personalized to your preferences"         (learned)
  tier:      >= 80 "Similar to your highest-rated sessions"
             >= 60 "Conditions you tend to enjoy"
             else  "May not match your typical preferences"
  call-outs: "clean offshore winds", "ideal wave size"

Callers route users with too few sessions or no model to the heuristic
scorer instead (see ``scoring.router.score_window``).
"""

from __future__ import annotations

from swellmind.config import PhaseConfig, ScoringConfig
from swellmind.ml.predictor import learned_score
from swellmind.models.forecast import ForecastObservation
from swellmind.models.scoring import ScoringResult, UserModel
from swellmind.models.session import UserPreferences
from swellmind.scoring.heuristic import calculate_generic_score
from swellmind.taxonomy.conditions import ModelType, WindOrientation
from swellmind.utils.time_utils import round_half_up

BLENDED_LEAD = "Based on your style + general patterns"
LEARNED_LEAD = "Personalized to your preferences"


def blend_scores(
    heuristic: int,
    learned: int,
    num_sessions: int,
    scoring: ScoringConfig = ScoringConfig(),
    phases: PhaseConfig = PhaseConfig(),
) -> tuple[int, ModelType]:
    """Combine heuristic and learned scores for a session count.

    Returns:
        Tuple ``(final_score, phase)`` where phase is BLENDED or LEARNED.
    """
    if num_sessions < phases.learned_threshold:
        w = scoring.blend_heuristic_weight
        return round_half_up(heuristic * w + learned * (1.0 - w)), ModelType.BLENDED
    return learned, ModelType.LEARNED


def _tier_sentence(score: int, scoring: ScoringConfig) -> str:
    if score >= scoring.high_tier_threshold:
        return "Similar to your highest-rated sessions"
    if score >= scoring.mid_tier_threshold:
        return "Conditions you tend to enjoy"
    return "May not match your typical preferences"


def build_learned_explanation(
    final_score: int,
    phase: ModelType,
    forecast: ForecastObservation,
    prefs: UserPreferences,
    scoring: ScoringConfig = ScoringConfig(),
) -> str:
    """Lead sentence, tier sentence and condition call-outs."""
    lead = BLENDED_LEAD if phase == ModelType.BLENDED else LEARNED_LEAD

    parts = [_tier_sentence(final_score, scoring)]
    if forecast.wind_orientation == WindOrientation.OFFSHORE:
        parts.append("clean offshore winds")
    height = forecast.wave_height
    if height is not None and prefs.ideal_wave_size_min <= height <= prefs.ideal_wave_size_max:
        parts.append("ideal wave size")

    return f"{lead}. {', '.join(parts)}."


def calculate_learned_score(
    forecast: ForecastObservation,
    prefs: UserPreferences,
    model: UserModel,
    num_sessions: int,
    scoring: ScoringConfig = ScoringConfig(),
    phases: PhaseConfig = PhaseConfig(),
) -> ScoringResult:
    """Score a forecast window with the user's model, blended by session count.

    Args:
        forecast:     The window to score.
        prefs:        The user's stated preferences (for the heuristic half).
        model:        The user's fitted model.
        num_sessions: The user's linked session count.
        scoring:      Weights and thresholds.
        phases:       Session-count thresholds.

    Returns:
        ``ScoringResult`` with the final blended or learned score.
    """
    heuristic = calculate_generic_score(forecast, prefs, scoring).score
    learned = learned_score(forecast, model)

    final, phase = blend_scores(heuristic, learned, num_sessions, scoring, phases)
    final = max(0, min(100, final))

    return ScoringResult(
        score=final,
        explanation=build_learned_explanation(final, phase, forecast, prefs, scoring),
        is_recommended=final >= scoring.recommend_threshold,
    )
