"""Prompt construction for LLM lap analysis."""

from __future__ import annotations

from lap_coach.telemetry.models import LapMetrics

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = (
    "You are an expert sim racing coach analyzing telemetry data. Provide "
    "specific, actionable advice to help drivers improve their lap times."
)

_USER_TEMPLATE = """Analyze this sim racing lap telemetry and provide specific coaching advice:

Lap Time: {lap_time:.2f}s
Max Speed: {max_speed:.1f} km/h
Avg Speed: {avg_speed:.1f} km/h
Min Speed: {min_speed:.1f} km/h
Braking Zones: {braking_zones}
Corners: {corners}
Max Throttle: {max_throttle:.1f}%
Max Brake: {max_brake:.1f}%

Provide:
1. Key strengths in the lap
2. Top 3 areas for improvement
3. Specific techniques to implement
4. Estimated time savings possible"""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class PromptBuilder:
    """Build LLM prompts from a :class:`~lap_coach.telemetry.models.LapMetrics`."""

    @property
    def system_prompt(self) -> str:
        """Return the system role prompt string."""
        return _SYSTEM_PROMPT

    def build(self, metrics: LapMetrics) -> str:
        """Build the user-turn prompt from *metrics*."""
        return _USER_TEMPLATE.format(
            lap_time=metrics.lap_time,
            max_speed=metrics.max_speed,
            avg_speed=metrics.avg_speed,
            min_speed=metrics.min_speed,
            braking_zones=len(metrics.braking_events),
            corners=len(metrics.corner_events),
            max_throttle=metrics.max_throttle * 100,
            max_brake=metrics.max_brake * 100,
        )

    def build_messages(self, metrics: LapMetrics) -> tuple[str, str]:
        """Return ``(system_prompt, user_prompt)`` ready for the chat API."""
        return self.system_prompt, self.build(metrics)
