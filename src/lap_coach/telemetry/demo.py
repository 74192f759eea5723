"""Deterministic synthetic lap for demos.

The summary figures are fixed constants and are *not* recomputed from the
generated samples; only the preview samples are produced on each call.
"""

from __future__ import annotations

import math

from lap_coach.telemetry.extractor import PREVIEW_LIMIT
from lap_coach.telemetry.models import LapMetrics, TelemetrySample

DEMO_DURATION_S = 140
DEMO_SAMPLE_RATE_HZ = 60

DEFAULT_TRACK = "Spa-Francorchamps"
DEFAULT_CAR = "GT3"


def _demo_sample(t: float) -> TelemetrySample:
    """Closed-form channels for elapsed time *t* (speed swings 80-280 km/h, 3 cycles per lap)."""
    progress = (t / DEMO_DURATION_S) * math.pi * 2

    speed = max(80.0, min(280.0, 180 + math.sin(progress * 3) * 100))

    if speed > 200:
        throttle = 0.9
    elif speed > 150:
        throttle = 0.7
    else:
        throttle = 0.3

    if speed < 120:
        brake = 0.8
    elif speed < 160:
        brake = 0.3
    else:
        brake = 0.0

    if speed < 150:
        steering = math.sin(progress * 4) * 0.6
    else:
        steering = math.sin(progress * 2) * 0.2

    return TelemetrySample(time=t, speed=speed, throttle=throttle, brake=brake, steering=steering)


class DemoLapGenerator:
    """Produce a canned-summary :class:`LapMetrics` with freshly generated preview samples."""

    def samples(self) -> list[TelemetrySample]:
        """Return every sample of the synthetic lap (``DEMO_DURATION_S * DEMO_SAMPLE_RATE_HZ``)."""
        n = DEMO_DURATION_S * DEMO_SAMPLE_RATE_HZ
        return [_demo_sample(i / DEMO_SAMPLE_RATE_HZ) for i in range(n)]

    def generate(self, track_name: str = DEFAULT_TRACK, car_name: str = DEFAULT_CAR) -> LapMetrics:
        samples = self.samples()
        return LapMetrics(
            source="demo",
            total_samples=len(samples),
            lap_time=float(DEMO_DURATION_S),
            max_speed=280.0,
            min_speed=80.0,
            avg_speed=180.0,
            max_throttle=0.9,
            max_brake=0.8,
            data_points=tuple(samples[:PREVIEW_LIMIT]),
            track_name=track_name,
            car_name=car_name,
        )
