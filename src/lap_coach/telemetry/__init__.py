"""Telemetry normalization, feature extraction and persistence.

Public API
----------
TelemetrySample     - one normalized measurement instant
LapMetrics          - aggregate metrics + detected events for one lap
TelemetryParser     - raw record (any alias scheme) → TelemetrySample
FeatureExtractor    - raw records → LapMetrics
EmptyInputError     - raised when a lap has no samples
DemoLapGenerator    - deterministic synthetic lap
TelemetryFileParser - CSV file → LapMetrics
ParseError          - raised on undecodable files
AnalysisStorage     - SQLite persistence for analyses
"""

from lap_coach.telemetry.csv_reader import ParseError, TelemetryFileParser, read_csv_records
from lap_coach.telemetry.demo import DemoLapGenerator
from lap_coach.telemetry.extractor import EmptyInputError, FeatureExtractor
from lap_coach.telemetry.models import (
    AccelerationEvent,
    BrakingEvent,
    CornerEvent,
    LapMetrics,
    TelemetrySample,
)
from lap_coach.telemetry.parser import DEFAULT_SAMPLE_RATE_HZ, TelemetryParser
from lap_coach.telemetry.storage import AnalysisStorage

__all__ = [
    "DEFAULT_SAMPLE_RATE_HZ",
    "AccelerationEvent",
    "AnalysisStorage",
    "BrakingEvent",
    "CornerEvent",
    "DemoLapGenerator",
    "EmptyInputError",
    "FeatureExtractor",
    "LapMetrics",
    "ParseError",
    "TelemetryFileParser",
    "TelemetryParser",
    "TelemetrySample",
    "read_csv_records",
]
