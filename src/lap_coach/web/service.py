"""AnalysisService: wraps decode → extract → analyze → persist for the Web API."""

from __future__ import annotations

import logging

from lap_coach.coaching.analyzer import LapAnalyzer, build_analyzer
from lap_coach.coaching.comparison import SectorComparator
from lap_coach.coaching.models import AnalysisResult, SectorComparison
from lap_coach.telemetry.csv_reader import ParseError, TelemetryFileParser
from lap_coach.telemetry.demo import DemoLapGenerator
from lap_coach.telemetry.models import LapMetrics
from lap_coach.telemetry.storage import AnalysisStorage

_logger = logging.getLogger(__name__)


class AnalysisNotFoundError(LookupError):
    """Raised when an analysis id does not exist for the requesting user."""


class AnalysisService:
    """Wraps the analysis pipeline and its persistence.

    Parameters
    ----------
    db_path:
        Path to the SQLite database.
    analyzer:
        Optional analyzer for testing injection.  If None one is chosen by
        :func:`~lap_coach.coaching.analyzer.build_analyzer` on first use.
    """

    def __init__(self, db_path: str, analyzer: LapAnalyzer | None = None) -> None:
        self._db_path = db_path
        self._analyzer = analyzer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_upload(
        self,
        user_id: int,
        content: bytes,
        sim_type: str = "unknown",
        track_name: str | None = None,
        car_name: str | None = None,
    ) -> tuple[int, LapMetrics, AnalysisResult]:
        """Decode an uploaded CSV lap, analyze it and persist the result.

        Returns
        -------
        tuple[int, LapMetrics, AnalysisResult]
            ``(analysis_id, metrics, analysis)``

        Raises
        ------
        ParseError
            If the upload is not UTF-8 CSV with at least one data row.
        """
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError("Uploaded telemetry is not a UTF-8 text file") from exc

        metrics = TelemetryFileParser().parse_text(text, sim_type)
        metrics = metrics.with_labels(track_name or "Unknown Track", car_name or "Unknown Car")
        return self._analyze_and_save(user_id, metrics)

    def analyze_demo(
        self, user_id: int, track_name: str, car_name: str
    ) -> tuple[int, LapMetrics, AnalysisResult]:
        """Generate the synthetic demo lap, analyze it and persist the result."""
        metrics = DemoLapGenerator().generate(track_name, car_name)
        return self._analyze_and_save(user_id, metrics)

    def history(self, user_id: int, limit: int = 10) -> list[dict]:
        storage = AnalysisStorage(self._db_path)
        try:
            return storage.list_analyses(user_id, limit)
        finally:
            storage.close()

    def get(self, analysis_id: int, user_id: int) -> dict:
        """Return a stored analysis row with decoded ``metrics`` / ``analysis``.

        Raises
        ------
        AnalysisNotFoundError
            If *analysis_id* does not exist for *user_id*.
        """
        storage = AnalysisStorage(self._db_path)
        try:
            row = storage.get_analysis(analysis_id, user_id)
        finally:
            storage.close()
        if row is None:
            raise AnalysisNotFoundError(f"Analysis {analysis_id} not found")
        return row

    def compare(self, user_id: int, analysis_id: int, reference_id: int) -> SectorComparison:
        """Compare two stored laps of *user_id* sector by sector."""
        user_metrics = self.get(analysis_id, user_id)["metrics"]
        ref_metrics = self.get(reference_id, user_id)["metrics"]
        return SectorComparator().compare(user_metrics, ref_metrics)

    def stats(self, user_id: int) -> dict:
        storage = AnalysisStorage(self._db_path)
        try:
            return storage.get_stats(user_id)
        finally:
            storage.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _analyze_and_save(
        self, user_id: int, metrics: LapMetrics
    ) -> tuple[int, LapMetrics, AnalysisResult]:
        analyzer = self._analyzer if self._analyzer is not None else build_analyzer()
        analysis = analyzer.analyze(metrics)

        storage = AnalysisStorage(self._db_path)
        try:
            analysis_id = storage.save_analysis(user_id, metrics, analysis)
        finally:
            storage.close()

        _logger.info(
            "Saved %s analysis %d for user %d (%s)",
            analysis.analysis_type,
            analysis_id,
            user_id,
            metrics.source,
        )
        return analysis_id, metrics, analysis
