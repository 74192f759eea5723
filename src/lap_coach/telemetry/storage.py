"""AnalysisStorage: persists lap metrics and analysis results to SQLite.

Schema design notes:
  - Metrics and analysis are stored as opaque JSON blobs; only the columns
    needed for listing / stats (user, labels, lap time) are broken out.
  - ``INTEGER PRIMARY KEY`` is a rowid alias, so ids are assigned in insert order.
  - Every read is scoped by ``user_id``; an analysis owned by another user is
    indistinguishable from a missing one.
"""

from __future__ import annotations

import json
import sqlite3

from lap_coach.coaching.models import AnalysisResult
from lap_coach.telemetry.models import LapMetrics

_DDL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;

CREATE TABLE IF NOT EXISTS lap_analyses (
    id            INTEGER PRIMARY KEY,
    user_id       INTEGER NOT NULL,
    source        TEXT    NOT NULL,
    track_name    TEXT,
    car_name      TEXT,
    lap_time      REAL,
    metrics_json  TEXT    NOT NULL,
    analysis_json TEXT    NOT NULL,
    created_at    TEXT    NOT NULL
                  DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_lap_analyses_user
    ON lap_analyses (user_id, created_at);
"""

_INSERT_ANALYSIS = """
INSERT INTO lap_analyses
    (user_id, source, track_name, car_name, lap_time, metrics_json, analysis_json)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

_SELECT_ANALYSIS = "SELECT * FROM lap_analyses WHERE id = ? AND user_id = ?"

_SELECT_HISTORY = """
SELECT id, source, track_name, car_name, lap_time, created_at
FROM   lap_analyses
WHERE  user_id = ?
ORDER  BY created_at DESC, id DESC
LIMIT  ?
"""

_SELECT_COUNT = "SELECT COUNT(*) FROM lap_analyses WHERE user_id = ?"

_SELECT_BEST_LAP = """
SELECT track_name, car_name, lap_time
FROM   lap_analyses
WHERE  user_id = ?
ORDER  BY lap_time ASC
LIMIT  1
"""

_SELECT_TOP_TRACKS = """
SELECT track_name, COUNT(*) AS count
FROM   lap_analyses
WHERE  user_id = ?
GROUP  BY track_name
ORDER  BY count DESC, track_name
LIMIT  5
"""


class AnalysisStorage:
    """Stores and retrieves lap analyses from a SQLite database.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    """

    def __init__(self, db_path: str = "lap_coach.db") -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        for stmt in _DDL.strip().split(";"):
            stmt = stmt.strip()
            if stmt:
                self._conn.execute(stmt)
        self._conn.commit()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save_analysis(
        self,
        user_id: int,
        metrics: LapMetrics,
        analysis: AnalysisResult,
    ) -> int:
        """Persist *metrics* + *analysis* for *user_id* and return the new row id."""
        cursor = self._conn.execute(
            _INSERT_ANALYSIS,
            (
                user_id,
                metrics.source,
                metrics.track_name,
                metrics.car_name,
                metrics.lap_time,
                json.dumps(metrics.to_dict()),
                json.dumps(analysis.to_dict()),
            ),
        )
        self._conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def get_analysis(self, analysis_id: int, user_id: int) -> dict | None:
        """Return one analysis row, or None if not found for this user.

        ``metrics`` and ``analysis`` keys hold the decoded
        :class:`LapMetrics` / :class:`AnalysisResult`.
        """
        row = self._conn.execute(_SELECT_ANALYSIS, (analysis_id, user_id)).fetchone()
        if row is None:
            return None
        d = dict(row)
        d["metrics"] = LapMetrics.from_dict(json.loads(d.pop("metrics_json")))
        d["analysis"] = AnalysisResult.from_dict(json.loads(d.pop("analysis_json")))
        return d

    def list_analyses(self, user_id: int, limit: int = 10) -> list[dict]:
        """Return the *limit* most recent analyses for *user_id*, newest first."""
        rows = self._conn.execute(_SELECT_HISTORY, (user_id, limit)).fetchall()
        return [dict(r) for r in rows]

    def get_stats(self, user_id: int) -> dict:
        """Return ``total_analyses``, ``best_lap`` (or None) and ``top_tracks`` for *user_id*."""
        total = self._conn.execute(_SELECT_COUNT, (user_id,)).fetchone()[0]
        best = self._conn.execute(_SELECT_BEST_LAP, (user_id,)).fetchone()
        tracks = self._conn.execute(_SELECT_TOP_TRACKS, (user_id,)).fetchall()
        return {
            "total_analyses": int(total),
            "best_lap": dict(best) if best else None,
            "top_tracks": [dict(r) for r in tracks],
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
