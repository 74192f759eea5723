"""Narrative text for rule-based analyses."""

from __future__ import annotations

from lap_coach.telemetry.models import LapMetrics


def format_lap_time(seconds: float) -> str:
    """Return *seconds* as ``M:SS.mmm`` (e.g. ``83.456`` → ``1:23.456``)."""
    minutes, millis = divmod(round(seconds * 1000), 60_000)
    return f"{minutes}:{millis // 1000:02d}.{millis % 1000:03d}"


def average_corner_speed(metrics: LapMetrics) -> float | None:
    """Mean speed over all corner events, or None when there are none."""
    if not metrics.corner_events:
        return None
    return sum(c.speed for c in metrics.corner_events) / len(metrics.corner_events)


class InsightsFormatter:
    """Compose the human-readable insights block for a lap.

    Sections appear in a fixed order: lap time, speed, braking, throttle,
    cornering, improvement.  Braking and cornering are omitted when the lap
    has no such events.
    """

    def format(self, metrics: LapMetrics, estimated_improvement: float) -> str:
        lines: list[str] = [f"📊 Lap Time: {format_lap_time(metrics.lap_time)}"]

        lines += [
            "",
            "🏎️ **Speed Analysis:**",
            f"- Maximum Speed: {metrics.max_speed:.1f} km/h",
            f"- Average Speed: {metrics.avg_speed:.1f} km/h",
            f"- Minimum Speed: {metrics.min_speed:.1f} km/h",
        ]

        if metrics.braking_events:
            lines += [
                "",
                "🛑 **Braking Analysis:**",
                f"- Braking Zones: {len(metrics.braking_events)}",
                f"- Max Brake Pressure: {metrics.max_brake * 100:.1f}%",
            ]

        lines += [
            "",
            "⚡ **Throttle Control:**",
            f"- Max Throttle: {metrics.max_throttle * 100:.1f}%",
        ]

        corner_speed = average_corner_speed(metrics)
        if corner_speed is not None:
            lines += [
                "",
                "🏁 **Corner Analysis:**",
                f"- Corner Count: {len(metrics.corner_events)}",
                f"- Avg Corner Speed: {corner_speed:.1f} km/h",
            ]

        lines += [
            "",
            "💡 **Potential Improvement:**",
            "By addressing the recommendations above, you could potentially improve "
            f"your lap time by {estimated_improvement:.2f} seconds.",
        ]
        return "\n".join(lines)
