"""Rule-based coaching, LLM analysis and sector comparison."""

from lap_coach.coaching.analyzer import LapAnalyzer, build_analyzer
from lap_coach.coaching.comparison import DegenerateInputError, SectorComparator
from lap_coach.coaching.llm_client import OpenAIAnalyzer, extract_recommendations
from lap_coach.coaching.models import (
    AnalysisResult,
    Recommendation,
    SectorComparison,
    SectorResult,
)
from lap_coach.coaching.narrative import InsightsFormatter, format_lap_time
from lap_coach.coaching.prompt import PromptBuilder
from lap_coach.coaching.rules import RuleBasedAnalyzer, estimate_improvement

__all__ = [
    "AnalysisResult",
    "DegenerateInputError",
    "InsightsFormatter",
    "LapAnalyzer",
    "OpenAIAnalyzer",
    "PromptBuilder",
    "Recommendation",
    "RuleBasedAnalyzer",
    "SectorComparator",
    "SectorComparison",
    "SectorResult",
    "build_analyzer",
    "estimate_improvement",
    "extract_recommendations",
]
