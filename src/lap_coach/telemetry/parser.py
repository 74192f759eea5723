"""TelemetryParser: normalizes raw telemetry records to TelemetrySample."""

from __future__ import annotations

import math

from lap_coach.telemetry.models import TelemetrySample

DEFAULT_SAMPLE_RATE_HZ = 62.5
"""Capture rate assumed when a record carries no timestamp (0.016 s per sample)."""

# Canonical field → candidate raw keys, in resolution order (first match wins).
_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("speed",    ("Speed", "speed", "Velocity", "velocity")),
    ("throttle", ("Throttle", "throttle", "Gas", "gas")),
    ("brake",    ("Brake", "brake")),
    ("steering", ("Steering", "steering", "SteerAngle")),
)

_TIME_ALIASES: tuple[str, ...] = ("Time", "time", "LapTime", "laptime")


def _to_float(value: object) -> float | None:
    """Return *value* as a finite float, or None if it cannot be used."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def resolve_field(record: dict, keys: tuple[str, ...]) -> float | None:
    """Return the first usable value among *keys* in *record*, or None."""
    for key in keys:
        if key in record:
            value = _to_float(record[key])
            if value is not None:
                return value
    return None


class TelemetryParser:
    """Parses one raw record (any supported naming scheme) into a :class:`TelemetrySample`.

    Args:
        sample_rate_hz: Capture rate assumed for records without a timestamp.
    """

    def __init__(self, sample_rate_hz: float = DEFAULT_SAMPLE_RATE_HZ) -> None:
        if sample_rate_hz <= 0:
            raise ValueError(f"sample_rate_hz must be positive, got {sample_rate_hz}")
        self.sample_rate_hz = sample_rate_hz

    @property
    def sample_interval(self) -> float:
        """Seconds between two samples at the assumed capture rate."""
        return 1.0 / self.sample_rate_hz

    def estimated_time(self, index: int) -> float:
        """Return the heuristic timestamp for the sample at *index*."""
        return index * self.sample_interval

    def parse(self, record: dict, index: int) -> TelemetrySample:
        """Convert *record* (the *index*-th sample of a lap) to a :class:`TelemetrySample`."""
        kwargs: dict = {}
        for field_name, keys in _ALIASES:
            value = resolve_field(record, keys)
            kwargs[field_name] = value if value is not None else 0.0

        time = resolve_field(record, _TIME_ALIASES)
        if time is None:
            kwargs["time"] = self.estimated_time(index)
            kwargs["time_estimated"] = True
        else:
            kwargs["time"] = time

        return TelemetrySample(**kwargs)
