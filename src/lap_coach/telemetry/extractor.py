"""Feature extraction: raw lap samples → LapMetrics.

A single pass over the lap computes:
  - max / min / average speed, max throttle and max brake
  - braking, acceleration and corner events (independent threshold rules)
  - a bounded preview of normalized samples for charts and sector comparison
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from lap_coach.telemetry.models import (
    AccelerationEvent,
    BrakingEvent,
    CornerEvent,
    LapMetrics,
    TelemetrySample,
)
from lap_coach.telemetry.parser import TelemetryParser

_logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 1000
"""Maximum number of normalized samples kept in ``LapMetrics.data_points``."""


class EmptyInputError(ValueError):
    """Raised when a lap contains no samples."""


class FeatureExtractor:
    """Aggregate a lap's raw records into :class:`LapMetrics`.

    Args:
        parser: Field normalizer; defaults to :class:`TelemetryParser` at the
            default assumed capture rate.
        brake_threshold: Brake position above which a slowing sample is a braking event.
        throttle_threshold: Throttle position above which a speeding-up sample
            is an acceleration event.
        corner_speed_ratio: A sample slower than this fraction of the running
            max speed may be a corner.
        corner_steering_threshold: Minimum ``abs(steering)`` for a corner event.
    """

    def __init__(
        self,
        parser: TelemetryParser | None = None,
        brake_threshold: float = 0.3,
        throttle_threshold: float = 0.5,
        corner_speed_ratio: float = 0.6,
        corner_steering_threshold: float = 0.3,
    ) -> None:
        self.parser = parser if parser is not None else TelemetryParser()
        self.brake_threshold = brake_threshold
        self.throttle_threshold = throttle_threshold
        self.corner_speed_ratio = corner_speed_ratio
        self.corner_steering_threshold = corner_steering_threshold

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, records: Iterable[dict], source: str) -> LapMetrics:
        """Return :class:`LapMetrics` for one lap of raw *records*.

        Raises:
            EmptyInputError: If *records* is empty.
        """
        samples = [self.parser.parse(r, i) for i, r in enumerate(records)]
        if not samples:
            raise EmptyInputError(f"No telemetry samples found for source {source!r}")
        return self.extract_samples(samples, source)

    def extract_samples(self, samples: list[TelemetrySample], source: str) -> LapMetrics:
        """Same as :meth:`extract` for already-normalized samples."""
        if not samples:
            raise EmptyInputError(f"No telemetry samples found for source {source!r}")

        max_speed = 0.0
        min_speed = float("inf")
        total_speed = 0.0
        max_throttle = 0.0
        max_brake = 0.0
        prev_speed = 0.0

        braking: list[BrakingEvent] = []
        accel: list[AccelerationEvent] = []
        corners: list[CornerEvent] = []

        for index, s in enumerate(samples):
            # Running max must include the current sample before the corner check.
            max_speed = max(max_speed, s.speed)
            min_speed = min(min_speed, s.speed)
            total_speed += s.speed
            max_throttle = max(max_throttle, s.throttle)
            max_brake = max(max_brake, s.brake)

            if s.brake > self.brake_threshold and s.speed < prev_speed:
                braking.append(BrakingEvent(s.time, s.speed, s.brake, index))

            if s.throttle > self.throttle_threshold and s.speed > prev_speed:
                accel.append(AccelerationEvent(s.time, s.speed, s.throttle, index))

            steering = abs(s.steering)
            if (
                s.speed < max_speed * self.corner_speed_ratio
                and steering > self.corner_steering_threshold
            ):
                corners.append(CornerEvent(s.time, s.speed, steering, index))

            prev_speed = s.speed

        metrics = LapMetrics(
            source=source,
            total_samples=len(samples),
            lap_time=self._lap_time(samples),
            max_speed=max_speed,
            min_speed=min_speed,
            avg_speed=total_speed / len(samples),
            max_throttle=max_throttle,
            max_brake=max_brake,
            braking_events=tuple(braking),
            acceleration_events=tuple(accel),
            corner_events=tuple(corners),
            data_points=tuple(samples[:PREVIEW_LIMIT]),
        )
        _logger.debug(
            "Extracted %s lap: %d samples, %d braking / %d accel / %d corner events",
            source,
            metrics.total_samples,
            len(braking),
            len(accel),
            len(corners),
        )
        return metrics

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _lap_time(self, samples: list[TelemetrySample]) -> float:
        """Final recorded timestamp, or ``len(samples)`` sample intervals if it was estimated."""
        last = samples[-1]
        if not last.time_estimated:
            return last.time
        return len(samples) * self.parser.sample_interval
