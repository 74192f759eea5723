"""CSV lap-file decoding.

Files are expected to have a header row naming the channels (any of the
aliases understood by :class:`~lap_coach.telemetry.parser.TelemetryParser`)
and one row per sample.  Numeric-looking cells are cast to ``float``; other
cells are kept as stripped strings.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from lap_coach.telemetry.extractor import FeatureExtractor
from lap_coach.telemetry.models import LapMetrics

_logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """Raised when a telemetry file cannot be decoded into records."""


def _cast(cell: str) -> float | str:
    cell = cell.strip()
    try:
        return float(cell)
    except ValueError:
        return cell


def read_csv_records(text: str) -> list[dict]:
    """Decode CSV *text* into a list of ``{column: value}`` dicts.

    Blank lines are skipped.

    Raises:
        ParseError: If there is no header, a row has more cells than the
            header, or the file holds no data rows.
    """
    reader = csv.reader(io.StringIO(text))
    header: list[str] | None = None
    records: list[dict] = []

    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if header is None:
                header = [cell.strip() for cell in row]
                continue
            if len(row) > len(header):
                raise ParseError(
                    f"Line {reader.line_num}: {len(row)} cells but only {len(header)} columns"
                )
            records.append({k: _cast(v) for k, v in zip(header, row)})
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc

    if header is None:
        raise ParseError("Telemetry file is empty")
    if not records:
        raise ParseError("No data found in telemetry file")
    return records


class TelemetryFileParser:
    """Decode a lap file and extract its :class:`LapMetrics`.

    Args:
        extractor: Feature extractor to run on the decoded records.
    """

    def __init__(self, extractor: FeatureExtractor | None = None) -> None:
        self.extractor = extractor if extractor is not None else FeatureExtractor()

    def parse_text(self, text: str, source: str) -> LapMetrics:
        """Decode CSV *text* and return its metrics."""
        records = read_csv_records(text)
        return self.extractor.extract(records, source)

    def parse_file(self, path: str | Path, source: str) -> LapMetrics:
        """Read *path* (UTF-8) and return its metrics."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path}: not a UTF-8 text file") from exc
        _logger.info("Parsing telemetry file %s (%s)", path, source)
        return self.parse_text(text, source)
