"""OpenAI-backed lap analyzer.

Reads the API key from the ``OPENAI_API_KEY`` environment variable by
default.  Pass ``api_key`` explicitly in tests or when integrating with
secret managers.  Any failure of the remote model falls back to
:class:`~lap_coach.coaching.rules.RuleBasedAnalyzer`, so callers always get
an :class:`AnalysisResult`.
"""

from __future__ import annotations

import logging
import os

from openai import APIError, OpenAI, OpenAIError

from lap_coach.coaching.models import AI_POWERED, AnalysisResult, Recommendation
from lap_coach.coaching.prompt import PromptBuilder
from lap_coach.coaching.rules import RuleBasedAnalyzer
from lap_coach.telemetry.models import LapMetrics

_logger = logging.getLogger(__name__)

_RECOMMENDATION_MARKERS = ("improvement", "focus", "work on")
MAX_EXTRACTED_RECOMMENDATIONS = 5

# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def extract_recommendations(text: str) -> list[Recommendation]:
    """Pick advice lines out of free-form LLM prose.

    Every line mentioning one of the marker phrases becomes a medium-priority
    ``general`` recommendation; at most :data:`MAX_EXTRACTED_RECOMMENDATIONS`
    are returned.
    """
    recommendations: list[Recommendation] = []
    for line in text.splitlines():
        if any(marker in line for marker in _RECOMMENDATION_MARKERS):
            recommendations.append(
                Recommendation(
                    priority="medium",
                    category="general",
                    title="AI Recommendation",
                    description=line.strip(),
                )
            )
    return recommendations[:MAX_EXTRACTED_RECOMMENDATIONS]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class OpenAIAnalyzer:
    """Chat-completion lap analyzer with rule-based fallback.

    Args:
        api_key: API key; falls back to ``OPENAI_API_KEY`` env variable.
        model: Model identifier; falls back to ``LAP_COACH_LLM_MODEL`` or
            :attr:`DEFAULT_MODEL`.
        timeout: Request timeout in seconds.
        fallback: Analyzer used whenever the remote call fails.
    """

    DEFAULT_MODEL = "gpt-3.5-turbo"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
        max_tokens: int = 500,
        temperature: float = 0.7,
        fallback: RuleBasedAnalyzer | None = None,
    ) -> None:
        key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self._client = OpenAI(api_key=key, timeout=timeout)
        self._model = model or os.environ.get("LAP_COACH_LLM_MODEL", self.DEFAULT_MODEL)
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._fallback = fallback if fallback is not None else RuleBasedAnalyzer()

    def generate(self, system_prompt: str, user_prompt: str) -> tuple[str, dict]:
        """Call the chat API and return ``(response_text, usage_dict)``.

        Returns ``("", {})`` on timeout or any API error.
        API token usage is logged at ``INFO`` level.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
            content = response.choices[0].message.content or ""
            usage: dict = {}
            if response.usage is not None:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens,
                    "completion_tokens": response.usage.completion_tokens,
                    "total_tokens": response.usage.total_tokens,
                }
                _logger.info(
                    "OpenAI API usage: prompt: %d, completion: %d, total: %d tokens",
                    usage["prompt_tokens"],
                    usage["completion_tokens"],
                    usage["total_tokens"],
                )
            else:
                _logger.info("OpenAI API response carried no usage data")
            return content, usage
        except (OpenAIError, APIError) as exc:
            _logger.warning("OpenAI API call failed: %s", exc)
            return "", {}
        except (AttributeError, IndexError, TypeError) as exc:
            _logger.warning("Malformed OpenAI response: %s", exc)
            return "", {}

    def analyze(self, metrics: LapMetrics, builder: PromptBuilder | None = None) -> AnalysisResult:
        """Return an ``ai_powered`` analysis of *metrics*.

        Falls back to rule-based analysis when the API is unavailable or
        returns nothing usable.
        """
        if builder is None:
            builder = PromptBuilder()

        system_prompt, user_prompt = builder.build_messages(metrics)
        raw_text, _ = self.generate(system_prompt, user_prompt)

        if raw_text.strip():
            return AnalysisResult(
                insights=raw_text,
                recommendations=tuple(extract_recommendations(raw_text)),
                analysis_type=AI_POWERED,
            )

        _logger.warning("Falling back to rule-based analysis")
        return self._fallback.analyze(metrics)
