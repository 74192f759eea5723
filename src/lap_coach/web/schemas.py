"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel

from lap_coach.telemetry.demo import DEFAULT_CAR, DEFAULT_TRACK


class HealthResponse(BaseModel):
    status: str
    version: str


class DemoRequest(BaseModel):
    user_id: int
    track_name: str = DEFAULT_TRACK
    car_name: str = DEFAULT_CAR


class CompareRequest(BaseModel):
    user_id: int
    analysis_id: int
    reference_id: int


class RecommendationSchema(BaseModel):
    priority: str
    category: str
    title: str
    description: str


class AnalysisSchema(BaseModel):
    insights: str
    recommendations: list[RecommendationSchema]
    analysis_type: str
    estimated_improvement: float | None = None


class AnalyzeResponse(BaseModel):
    id: int
    telemetry_data: dict
    analysis: AnalysisSchema


class HistoryRecord(BaseModel):
    id: int
    source: str
    track_name: str | None
    car_name: str | None
    lap_time: float | None
    created_at: str


class HistoryResponse(BaseModel):
    analyses: list[HistoryRecord]


class AnalysisDetail(BaseModel):
    id: int
    source: str
    track_name: str | None
    car_name: str | None
    lap_time: float | None
    created_at: str
    telemetry_data: dict
    analysis: AnalysisSchema


class SectorSchema(BaseModel):
    sector_index: int
    user_avg_speed: float
    reference_avg_speed: float
    speed_difference: float
    estimated_time_lost: float


class CompareResponse(BaseModel):
    time_difference: float
    avg_speed_difference: float
    sectors: list[SectorSchema]


class BestLap(BaseModel):
    track_name: str | None
    car_name: str | None
    lap_time: float | None


class TrackCount(BaseModel):
    track_name: str | None
    count: int


class StatsResponse(BaseModel):
    total_analyses: int
    best_lap: BestLap | None
    top_tracks: list[TrackCount]
