"""Sector comparison between a user lap and a reference lap.

Both laps are split by sample *index* (not time or distance) into
:data:`SECTOR_COUNT` contiguous sectors of ``len(user_samples) // SECTOR_COUNT``
samples.  Remainder samples at the end of the lap are left out of every sector.
"""

from __future__ import annotations

from collections.abc import Sequence

from lap_coach.coaching.models import SectorComparison, SectorResult
from lap_coach.telemetry.models import LapMetrics, TelemetrySample

SECTOR_COUNT = 3


class DegenerateInputError(ValueError):
    """Raised when a sector cannot be compared (empty slice or zero reference speed)."""


def _mean_speed(samples: Sequence[TelemetrySample]) -> float:
    return sum(s.speed for s in samples) / len(samples)


class SectorComparator:
    """Compare two laps sector by sector."""

    def compare(self, user: LapMetrics, reference: LapMetrics) -> SectorComparison:
        """Compare the preview samples of *user* against *reference*.

        Raises:
            DegenerateInputError: See :meth:`compare_samples`.
        """
        return self.compare_samples(
            user.data_points,
            reference.data_points,
            user_lap_time=user.lap_time,
            reference_lap_time=reference.lap_time,
            user_avg_speed=user.avg_speed,
            reference_avg_speed=reference.avg_speed,
        )

    def compare_samples(
        self,
        user_samples: Sequence[TelemetrySample],
        reference_samples: Sequence[TelemetrySample],
        user_lap_time: float,
        reference_lap_time: float,
        user_avg_speed: float,
        reference_avg_speed: float,
    ) -> SectorComparison:
        """Compare two sample sequences.

        Overall differences come from the laps' known aggregates, not from the
        sectors.

        Raises:
            DegenerateInputError: If a sector slice is empty on either side
                (user lap shorter than :data:`SECTOR_COUNT` samples, or
                reference lap too short), or if a reference sector averages 0.
        """
        size = len(user_samples) // SECTOR_COUNT
        sectors: list[SectorResult] = []

        for i in range(SECTOR_COUNT):
            start, end = i * size, (i + 1) * size
            user_sector = user_samples[start:end]
            ref_sector = reference_samples[start:end]
            if not user_sector or not ref_sector:
                raise DegenerateInputError(
                    f"Sector {i + 1} is empty (user: {len(user_samples)} samples, "
                    f"reference: {len(reference_samples)} samples)"
                )

            user_avg = _mean_speed(user_sector)
            ref_avg = _mean_speed(ref_sector)
            if ref_avg == 0:
                raise DegenerateInputError(f"Reference average speed is 0 in sector {i + 1}")

            sectors.append(
                SectorResult(
                    sector_index=i,
                    user_avg_speed=user_avg,
                    reference_avg_speed=ref_avg,
                    speed_difference=user_avg - ref_avg,
                    estimated_time_lost=(
                        (ref_avg - user_avg) / ref_avg * (user_lap_time / SECTOR_COUNT)
                    ),
                )
            )

        return SectorComparison(
            time_difference=user_lap_time - reference_lap_time,
            avg_speed_difference=user_avg_speed - reference_avg_speed,
            sectors=tuple(sectors),
        )
