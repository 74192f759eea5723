"""Rule-based coaching engine.

Each rule is evaluated independently; every rule that applies produces one
recommendation.  Two general recommendations (consistency, setup) are always
appended so that even a clean lap gets guidance.
"""

from __future__ import annotations

from collections.abc import Iterable

from lap_coach.coaching.models import RULE_BASED, AnalysisResult, Recommendation
from lap_coach.coaching.narrative import InsightsFormatter, average_corner_speed
from lap_coach.telemetry.models import LapMetrics

# Seconds of lap time each recommendation category is assumed to be worth.
IMPROVEMENT_BY_CATEGORY: dict[str, float] = {
    "cornering": 1.0,
    "braking": 0.5,
    "acceleration": 0.7,
    "speed": 1.2,
}
DEFAULT_IMPROVEMENT = 0.2

LOW_AVG_SPEED_KPH = 150.0
FULL_BRAKE_PRESSURE = 0.95
MIN_ACCELERATION_ZONES = 5
SLOW_CORNER_RATIO = 0.5

_SPEED = Recommendation(
    priority="high",
    category="speed",
    title="Increase Average Speed",
    description=(
        "Your average speed is relatively low. Focus on carrying more speed "
        "through corners and getting on throttle earlier."
    ),
)

_BRAKING = Recommendation(
    priority="medium",
    category="braking",
    title="Brake Harder Initially",
    description=(
        "You're not using maximum brake pressure. Try braking harder initially, "
        "then trail off as you approach the apex."
    ),
)

_ACCELERATION = Recommendation(
    priority="high",
    category="acceleration",
    title="Improve Acceleration Zones",
    description=(
        "Work on identifying optimal acceleration points. Get back to full "
        "throttle as early as possible while maintaining control."
    ),
)

_CORNERING = Recommendation(
    priority="high",
    category="cornering",
    title="Increase Corner Speed",
    description=(
        "Your corner speeds are significantly lower than your average speed. "
        "Focus on the racing line, proper braking points, and smooth inputs to "
        "carry more speed through corners."
    ),
)

_CONSISTENCY = Recommendation(
    priority="medium",
    category="consistency",
    title="Focus on Consistency",
    description=(
        "Upload more laps to track your consistency. The best drivers focus on "
        "repeatable, consistent laps rather than one-off fast laps."
    ),
)

_SETUP = Recommendation(
    priority="low",
    category="setup",
    title="Setup Optimization",
    description=(
        "Once you're consistent, start experimenting with setup changes. Small "
        "adjustments to tire pressure, suspension, and aero can yield "
        "significant improvements."
    ),
)


def estimate_improvement(recommendations: Iterable[Recommendation]) -> float:
    """Sum the per-category time value of *recommendations* (no deduplication)."""
    return sum(
        IMPROVEMENT_BY_CATEGORY.get(r.category, DEFAULT_IMPROVEMENT) for r in recommendations
    )


class RuleBasedAnalyzer:
    """Deterministic threshold-driven analysis of a :class:`LapMetrics`.

    Pure function of its input; never raises for well-formed metrics.
    """

    def __init__(self, formatter: InsightsFormatter | None = None) -> None:
        self._formatter = formatter if formatter is not None else InsightsFormatter()

    def recommend(self, metrics: LapMetrics) -> list[Recommendation]:
        """Return every applicable recommendation, general ones last."""
        recommendations: list[Recommendation] = []

        if metrics.avg_speed < LOW_AVG_SPEED_KPH:
            recommendations.append(_SPEED)

        if metrics.braking_events and metrics.max_brake < FULL_BRAKE_PRESSURE:
            recommendations.append(_BRAKING)

        if len(metrics.acceleration_events) < MIN_ACCELERATION_ZONES:
            recommendations.append(_ACCELERATION)

        corner_speed = average_corner_speed(metrics)
        if corner_speed is not None and corner_speed < metrics.avg_speed * SLOW_CORNER_RATIO:
            recommendations.append(_CORNERING)

        recommendations += [_CONSISTENCY, _SETUP]
        return recommendations

    def analyze(self, metrics: LapMetrics) -> AnalysisResult:
        recommendations = self.recommend(metrics)
        improvement = estimate_improvement(recommendations)
        return AnalysisResult(
            insights=self._formatter.format(metrics, improvement),
            recommendations=tuple(recommendations),
            analysis_type=RULE_BASED,
            estimated_improvement=improvement,
        )
