"""Tests for AnalysisStorage."""

from __future__ import annotations

import pytest

from lap_coach.coaching.models import AnalysisResult, Recommendation
from lap_coach.telemetry.models import BrakingEvent, CornerEvent, LapMetrics, TelemetrySample
from lap_coach.telemetry.storage import AnalysisStorage


def make_metrics(lap_time: float = 90.0, track: str | None = "Monza", car: str | None = "GT3") -> LapMetrics:
    return LapMetrics(
        source="acc",
        total_samples=2,
        lap_time=lap_time,
        max_speed=200.0,
        min_speed=80.0,
        avg_speed=140.0,
        max_throttle=1.0,
        max_brake=0.9,
        braking_events=(BrakingEvent(1.0, 150.0, 0.9, 1),),
        corner_events=(CornerEvent(1.0, 80.0, 0.4, 1),),
        data_points=(
            TelemetrySample(0.0, 200.0, 1.0, 0.0, 0.0),
            TelemetrySample(1.0, 80.0, 0.0, 0.9, -0.4, time_estimated=True),
        ),
        track_name=track,
        car_name=car,
    )


def make_analysis() -> AnalysisResult:
    return AnalysisResult(
        insights="Good lap",
        recommendations=(Recommendation("high", "braking", "Brake Pressure", "Brake harder"),),
        estimated_improvement=0.7,
    )


@pytest.fixture
def storage():
    s = AnalysisStorage(":memory:")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# save / get
# ---------------------------------------------------------------------------


def test_save_returns_increasing_ids(storage):
    first = storage.save_analysis(1, make_metrics(), make_analysis())
    second = storage.save_analysis(1, make_metrics(), make_analysis())
    assert second > first


def test_get_roundtrips_metrics_and_analysis(storage):
    metrics, analysis = make_metrics(), make_analysis()
    analysis_id = storage.save_analysis(7, metrics, analysis)

    row = storage.get_analysis(analysis_id, 7)
    assert row is not None
    assert row["id"] == analysis_id
    assert row["track_name"] == "Monza"
    assert row["car_name"] == "GT3"
    assert row["lap_time"] == pytest.approx(90.0)
    assert row["created_at"]
    assert row["metrics"] == metrics
    assert row["analysis"] == analysis


def test_get_is_scoped_to_user(storage):
    analysis_id = storage.save_analysis(1, make_metrics(), make_analysis())
    assert storage.get_analysis(analysis_id, 2) is None


def test_get_missing_returns_none(storage):
    assert storage.get_analysis(999, 1) is None


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


def test_list_newest_first_with_limit(storage):
    ids = [storage.save_analysis(1, make_metrics(lap_time=90.0 + i), make_analysis()) for i in range(4)]
    storage.save_analysis(2, make_metrics(), make_analysis())

    rows = storage.list_analyses(1, limit=3)
    assert [r["id"] for r in rows] == list(reversed(ids))[:3]
    assert set(rows[0]) == {"id", "source", "track_name", "car_name", "lap_time", "created_at"}


def test_list_empty_for_new_user(storage):
    assert storage.list_analyses(42) == []


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


def test_stats_for_new_user(storage):
    assert storage.get_stats(1) == {"total_analyses": 0, "best_lap": None, "top_tracks": []}


def test_stats_best_lap_and_top_tracks(storage):
    storage.save_analysis(1, make_metrics(95.0, "Monza"), make_analysis())
    storage.save_analysis(1, make_metrics(88.5, "Spa", "GT4"), make_analysis())
    storage.save_analysis(1, make_metrics(91.0, "Monza"), make_analysis())
    storage.save_analysis(2, make_metrics(60.0, "Imola"), make_analysis())

    stats = storage.get_stats(1)
    assert stats["total_analyses"] == 3
    assert stats["best_lap"] == {"track_name": "Spa", "car_name": "GT4", "lap_time": 88.5}
    assert stats["top_tracks"] == [
        {"track_name": "Monza", "count": 2},
        {"track_name": "Spa", "count": 1},
    ]


def test_top_tracks_capped_at_five(storage):
    for i in range(7):
        storage.save_analysis(1, make_metrics(track=f"Track {i}"), make_analysis())
    assert len(storage.get_stats(1)["top_tracks"]) == 5


def test_data_persists_across_connections(tmp_path):
    db = str(tmp_path / "laps.db")
    s = AnalysisStorage(db)
    analysis_id = s.save_analysis(1, make_metrics(), make_analysis())
    s.close()

    s2 = AnalysisStorage(db)
    try:
        assert s2.get_analysis(analysis_id, 1)["metrics"] == make_metrics()
    finally:
        s2.close()
