"""Analyzer strategy selection."""

from __future__ import annotations

import os
from typing import Protocol

from lap_coach.coaching.llm_client import OpenAIAnalyzer
from lap_coach.coaching.models import AnalysisResult
from lap_coach.coaching.rules import RuleBasedAnalyzer
from lap_coach.telemetry.models import LapMetrics


class LapAnalyzer(Protocol):
    """Anything that turns :class:`LapMetrics` into an :class:`AnalysisResult`."""

    def analyze(self, metrics: LapMetrics) -> AnalysisResult: ...


def build_analyzer(use_llm: bool | None = None) -> LapAnalyzer:
    """Return :class:`OpenAIAnalyzer` if *use_llm*, else :class:`RuleBasedAnalyzer`.

    ``None`` means "use the LLM if ``OPENAI_API_KEY`` is set".
    """
    if use_llm is None:
        use_llm = bool(os.environ.get("OPENAI_API_KEY"))
    return OpenAIAnalyzer() if use_llm else RuleBasedAnalyzer()
