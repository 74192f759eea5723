"""Coaching data models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

PRIORITIES = ("high", "medium", "low")

CATEGORIES = (
    "speed",
    "braking",
    "acceleration",
    "cornering",
    "consistency",
    "setup",
    "general",
)

RULE_BASED = "rule_based"
AI_POWERED = "ai_powered"


@dataclass(frozen=True)
class Recommendation:
    """A single coaching recommendation.

    Args:
        priority: ``'high'``, ``'medium'``, or ``'low'``.
        category: One of :data:`CATEGORIES`.
        title: Short headline.
        description: Human-readable actionable advice.
    """

    priority: str
    category: str
    title: str
    description: str

    def __post_init__(self) -> None:
        if self.priority not in PRIORITIES:
            raise ValueError(f"Unknown priority {self.priority!r}")
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category {self.category!r}")


@dataclass(frozen=True)
class AnalysisResult:
    """Narrative + structured recommendations for one lap.

    ``estimated_improvement`` (seconds) is only set for rule-based analyses.
    """

    insights: str
    recommendations: tuple[Recommendation, ...]
    analysis_type: str = RULE_BASED
    estimated_improvement: float | None = None

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict (recursive via :func:`dataclasses.asdict`)."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> AnalysisResult:
        improvement = d.get("estimated_improvement")
        return cls(
            insights=str(d["insights"]),
            recommendations=tuple(Recommendation(**r) for r in d.get("recommendations", [])),
            analysis_type=str(d.get("analysis_type", RULE_BASED)),
            estimated_improvement=float(improvement) if improvement is not None else None,
        )


@dataclass(frozen=True)
class SectorResult:
    """Average-speed comparison for one index-based sector.

    Positive ``speed_difference`` means the user was *faster*;
    positive ``estimated_time_lost`` means the user was *slower*.
    """

    sector_index: int
    user_avg_speed: float
    reference_avg_speed: float
    speed_difference: float
    estimated_time_lost: float


@dataclass(frozen=True)
class SectorComparison:
    """User lap vs reference lap."""

    time_difference: float
    """``user.lap_time - reference.lap_time`` in seconds.  Positive = user slower."""

    avg_speed_difference: float
    """``user.avg_speed - reference.avg_speed`` in km/h."""

    sectors: tuple[SectorResult, ...]

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
