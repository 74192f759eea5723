"""Telemetry data models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class TelemetrySample:
    """One normalized telemetry measurement instant.

    Missing raw fields default to ``0.0``.  When the raw record carried no
    timestamp, ``time`` is derived from the sample index and the assumed
    capture rate, and ``time_estimated`` is set.
    """

    time: float
    """Elapsed lap time in seconds."""

    speed: float
    """Vehicle speed in km/h."""

    throttle: float
    """Throttle pedal position [0.0, 1.0]."""

    brake: float
    """Brake pedal position [0.0, 1.0]."""

    steering: float
    """Signed steering angle / fraction.  Positive = right."""

    time_estimated: bool = False
    """True if ``time`` is a sample-rate estimate rather than a recorded timestamp."""

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> TelemetrySample:
        return cls(
            time=float(d["time"]),
            speed=float(d["speed"]),
            throttle=float(d["throttle"]),
            brake=float(d["brake"]),
            steering=float(d["steering"]),
            time_estimated=bool(d.get("time_estimated", False)),
        )


@dataclass(frozen=True)
class BrakingEvent:
    """A sample where the brake was applied while the car slowed down."""

    time: float
    speed: float
    brake: float
    index: int
    """Position of the sample in the lap."""


@dataclass(frozen=True)
class AccelerationEvent:
    """A sample where the throttle was applied while the car sped up."""

    time: float
    speed: float
    throttle: float
    index: int


@dataclass(frozen=True)
class CornerEvent:
    """A slow, high-steering sample.

    ``steering`` holds the absolute steering magnitude that triggered the event.
    """

    time: float
    speed: float
    steering: float
    index: int


@dataclass(frozen=True)
class LapMetrics:
    """Aggregate metrics for exactly one lap.

    ``avg_speed`` is the mean over *all* samples; ``data_points`` is only a
    bounded preview (see :data:`~lap_coach.telemetry.extractor.PREVIEW_LIMIT`)
    kept for charts and sector comparison.
    """

    source: str
    total_samples: int
    lap_time: float
    max_speed: float
    min_speed: float
    avg_speed: float
    max_throttle: float
    max_brake: float
    braking_events: tuple[BrakingEvent, ...] = ()
    acceleration_events: tuple[AccelerationEvent, ...] = ()
    corner_events: tuple[CornerEvent, ...] = ()
    data_points: tuple[TelemetrySample, ...] = ()
    track_name: str | None = None
    car_name: str | None = None

    def with_labels(self, track_name: str | None, car_name: str | None) -> LapMetrics:
        """Return a copy carrying the given track / car display names."""
        return dataclasses.replace(self, track_name=track_name, car_name=car_name)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict (recursive via :func:`dataclasses.asdict`)."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> LapMetrics:
        """Rebuild a :class:`LapMetrics` from :meth:`to_dict` output."""
        return cls(
            source=str(d["source"]),
            total_samples=int(d["total_samples"]),
            lap_time=float(d["lap_time"]),
            max_speed=float(d["max_speed"]),
            min_speed=float(d["min_speed"]),
            avg_speed=float(d["avg_speed"]),
            max_throttle=float(d["max_throttle"]),
            max_brake=float(d["max_brake"]),
            braking_events=tuple(BrakingEvent(**e) for e in d.get("braking_events", [])),
            acceleration_events=tuple(
                AccelerationEvent(**e) for e in d.get("acceleration_events", [])
            ),
            corner_events=tuple(CornerEvent(**e) for e in d.get("corner_events", [])),
            data_points=tuple(TelemetrySample.from_dict(p) for p in d.get("data_points", [])),
            track_name=d.get("track_name"),
            car_name=d.get("car_name"),
        )
