"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lap_coach.web.app import app

SAMPLE_CSV = """Time,Speed,Throttle,Brake,Steering
0.0,200,1.0,0.0,0.0
0.5,150,0.2,0.8,0.1
1.0,90,0.0,0.4,0.5
1.5,120,0.7,0.0,0.2
"""


@pytest.fixture(autouse=True)
def _no_openai_key(monkeypatch):
    """Keep every web test on the rule-based analyzer."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "web_test.db")


@pytest.fixture
def upload(client, db_path):
    """Return a helper that POSTs a CSV file to the upload endpoint as user 1."""

    def _upload(content: bytes | str = SAMPLE_CSV, filename: str = "lap.csv", **form):
        if isinstance(content, str):
            content = content.encode("utf-8")
        data = {"user_id": "1", **form}
        return client.post(
            "/api/analyze/upload",
            params={"db": db_path},
            data=data,
            files={"telemetry": (filename, content, "application/octet-stream")},
        )

    return _upload


@pytest.fixture
def demo(client, db_path):
    """Return a helper that POSTs a demo analysis request as user 1."""

    def _demo(**body):
        return client.post("/api/analyze/demo", params={"db": db_path}, json={"user_id": 1, **body})

    return _demo
