"""FastAPI Web application."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile

from lap_coach.web.schemas import (
    AnalysisDetail,
    AnalyzeResponse,
    CompareRequest,
    CompareResponse,
    DemoRequest,
    HealthResponse,
    HistoryRecord,
    HistoryResponse,
    StatsResponse,
)
from lap_coach.web.service import AnalysisNotFoundError, AnalysisService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

VERSION = "0.1.0"

app = FastAPI(title="Lap Coach", version=VERSION)

_DEFAULT_DB = os.environ.get("LAP_COACH_DB", "lap_coach.db")
_ALLOWED_SUFFIXES = frozenset({".csv", ".txt"})
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _service(db_path: str | None = None) -> AnalysisService:
    return AnalysisService(db_path or _DEFAULT_DB)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@app.post("/api/analyze/upload", response_model=AnalyzeResponse)
def analyze_upload(
    telemetry: UploadFile = File(...),
    user_id: int = Form(...),
    sim_type: str = Form("unknown"),
    track_name: str | None = Form(None),
    car_name: str | None = Form(None),
    db: str | None = None,
) -> AnalyzeResponse:
    """Analyze an uploaded CSV lap and persist the result."""
    suffix = Path(telemetry.filename or "").suffix.lower()
    if suffix not in _ALLOWED_SUFFIXES and telemetry.content_type != "text/csv":
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload a CSV telemetry file.",
        )

    content = telemetry.file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Telemetry file exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)} MB upload limit.",
        )

    try:
        analysis_id, metrics, analysis = _service(db).analyze_upload(
            user_id, content, sim_type, track_name, car_name
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return AnalyzeResponse(
        id=analysis_id,
        telemetry_data=metrics.to_dict(),
        analysis=analysis.to_dict(),
    )


@app.post("/api/analyze/demo", response_model=AnalyzeResponse)
def analyze_demo(req: DemoRequest, db: str | None = None) -> AnalyzeResponse:
    """Analyze the synthetic demo lap and persist the result."""
    try:
        analysis_id, metrics, analysis = _service(db).analyze_demo(
            req.user_id, req.track_name, req.car_name
        )
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return AnalyzeResponse(
        id=analysis_id,
        telemetry_data=metrics.to_dict(),
        analysis=analysis.to_dict(),
    )


@app.get("/api/analyze/history", response_model=HistoryResponse)
def history(
    user_id: int,
    limit: int = Query(10, ge=1, le=100),
    db: str | None = None,
) -> HistoryResponse:
    """Return the user's most recent analyses, newest first."""
    rows = _service(db).history(user_id, limit)
    return HistoryResponse(analyses=[HistoryRecord(**r) for r in rows])


@app.post("/api/analyze/compare", response_model=CompareResponse)
def compare(req: CompareRequest, db: str | None = None) -> CompareResponse:
    """Compare two of the user's stored laps sector by sector."""
    try:
        comparison = _service(db).compare(req.user_id, req.analysis_id, req.reference_id)
    except AnalysisNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return CompareResponse(**comparison.to_dict())


@app.get("/api/analyze/{analysis_id}", response_model=AnalysisDetail)
def get_analysis(analysis_id: int, user_id: int, db: str | None = None) -> AnalysisDetail:
    """Return one stored analysis with its metrics."""
    try:
        row = _service(db).get(analysis_id, user_id)
    except AnalysisNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Analysis not found") from exc

    return AnalysisDetail(
        id=row["id"],
        source=row["source"],
        track_name=row["track_name"],
        car_name=row["car_name"],
        lap_time=row["lap_time"],
        created_at=row["created_at"],
        telemetry_data=row["metrics"].to_dict(),
        analysis=row["analysis"].to_dict(),
    )


@app.get("/api/stats", response_model=StatsResponse)
def stats(user_id: int, db: str | None = None) -> StatsResponse:
    """Return per-user dashboard stats."""
    return StatsResponse(**_service(db).stats(user_id))
