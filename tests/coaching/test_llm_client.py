"""Tests for OpenAIAnalyzer, recommendation extraction, and fallback."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

from openai import OpenAIError

from lap_coach.coaching.llm_client import (
    MAX_EXTRACTED_RECOMMENDATIONS,
    OpenAIAnalyzer,
    extract_recommendations,
)
from lap_coach.coaching.rules import RuleBasedAnalyzer
from lap_coach.telemetry.models import AccelerationEvent, BrakingEvent, LapMetrics

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

AI_TEXT = """Strengths: consistent braking into turn 1.
Biggest improvement: carry more speed through the chicane.
You should focus on earlier throttle application.
Sector 2 looks good.
work on trail braking into the hairpin."""


def _make_metrics() -> LapMetrics:
    return LapMetrics(
        source="acc",
        total_samples=400,
        lap_time=102.5,
        max_speed=245.0,
        min_speed=68.0,
        avg_speed=132.0,
        max_throttle=1.0,
        max_brake=0.82,
        braking_events=(BrakingEvent(10.0, 140.0, 0.82, 250),),
        acceleration_events=(AccelerationEvent(3.0, 120.0, 1.0, 75),),
    )


def _make_openai_response(content: str | None, prompt_tokens: int = 100, completion_tokens: int = 50):
    mock = MagicMock()
    mock.choices[0].message.content = content
    mock.usage.prompt_tokens = prompt_tokens
    mock.usage.completion_tokens = completion_tokens
    mock.usage.total_tokens = prompt_tokens + completion_tokens
    return mock


# ---------------------------------------------------------------------------
# extract_recommendations tests
# ---------------------------------------------------------------------------


def test_extract_picks_marker_lines():
    recs = extract_recommendations(AI_TEXT)
    assert [r.description for r in recs] == [
        "Biggest improvement: carry more speed through the chicane.",
        "You should focus on earlier throttle application.",
        "work on trail braking into the hairpin.",
    ]
    for r in recs:
        assert r.priority == "medium"
        assert r.category == "general"
        assert r.title == "AI Recommendation"


def test_extract_caps_at_five():
    text = "\n".join(f"  focus on corner {i}  " for i in range(8))
    recs = extract_recommendations(text)
    assert len(recs) == MAX_EXTRACTED_RECOMMENDATIONS == 5
    assert recs[0].description == "focus on corner 0"


def test_extract_no_markers_returns_empty():
    assert extract_recommendations("Great lap.\nNothing to add.") == []


# ---------------------------------------------------------------------------
# OpenAIAnalyzer.generate tests (mocked)
# ---------------------------------------------------------------------------


def test_generate_success_returns_text_and_usage():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response(
            AI_TEXT, prompt_tokens=80, completion_tokens=40
        )

        client = OpenAIAnalyzer(api_key="test-key")
        text, usage = client.generate("sys", "user")

    assert text == AI_TEXT
    assert usage == {"prompt_tokens": 80, "completion_tokens": 40, "total_tokens": 120}


def test_generate_passes_model_and_sampling_options():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response("ok")

        OpenAIAnalyzer(api_key="k", model="gpt-4o-mini").generate("sys", "user")

    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["max_tokens"] == 500
    assert kwargs["temperature"] == 0.7
    assert kwargs["messages"][0] == {"role": "system", "content": "sys"}


def test_model_from_environment(monkeypatch):
    monkeypatch.setenv("LAP_COACH_LLM_MODEL", "gpt-4o")
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response("ok")

        OpenAIAnalyzer(api_key="k").generate("sys", "user")

    assert mock_client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"


def test_generate_logs_usage(caplog):
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response(
            "ok", prompt_tokens=50, completion_tokens=20
        )

        with caplog.at_level(logging.INFO, logger="lap_coach.coaching.llm_client"):
            client = OpenAIAnalyzer(api_key="test-key")
            client.generate("sys", "user")

    assert any("50" in r.message and "20" in r.message for r in caplog.records)


def test_generate_api_error_returns_empty():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.side_effect = OpenAIError("timeout")

        client = OpenAIAnalyzer(api_key="test-key")
        text, usage = client.generate("sys", "user")

    assert text == ""
    assert usage == {}


def test_generate_malformed_response_returns_empty():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        response = MagicMock()
        response.choices = []
        mock_client.chat.completions.create.return_value = response

        client = OpenAIAnalyzer(api_key="test-key")
        text, usage = client.generate("sys", "user")

    assert text == ""
    assert usage == {}


def test_generate_without_usage_keeps_content():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        response = _make_openai_response("You should focus on braking later.")
        response.usage = None
        mock_client.chat.completions.create.return_value = response

        client = OpenAIAnalyzer(api_key="test-key")
        text, usage = client.generate("sys", "user")
        result = client.analyze(_make_metrics())

    assert text == "You should focus on braking later."
    assert usage == {}
    assert result.analysis_type == "ai_powered"
    assert len(result.recommendations) == 1


# ---------------------------------------------------------------------------
# OpenAIAnalyzer.analyze tests (mocked)
# ---------------------------------------------------------------------------


def test_analyze_returns_ai_powered_result():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response(AI_TEXT)

        result = OpenAIAnalyzer(api_key="test-key").analyze(_make_metrics())

    assert result.analysis_type == "ai_powered"
    assert result.insights == AI_TEXT
    assert result.estimated_improvement is None
    assert len(result.recommendations) == 3


def test_analyze_sends_metrics_in_prompt():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response(AI_TEXT)

        OpenAIAnalyzer(api_key="test-key").analyze(_make_metrics())

    user_msg = mock_client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Lap Time: 102.50s" in user_msg
    assert "Braking Zones: 1" in user_msg


def test_analyze_falls_back_on_api_failure(caplog):
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.side_effect = OpenAIError("down")

        metrics = _make_metrics()
        with caplog.at_level(logging.WARNING, logger="lap_coach.coaching.llm_client"):
            result = OpenAIAnalyzer(api_key="test-key").analyze(metrics)

    assert result == RuleBasedAnalyzer().analyze(metrics)
    assert result.analysis_type == "rule_based"
    assert result.estimated_improvement is not None
    assert any("rule-based" in r.message for r in caplog.records)


def test_analyze_falls_back_on_empty_content():
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.return_value = _make_openai_response(None)

        result = OpenAIAnalyzer(api_key="test-key").analyze(_make_metrics())

    assert result.analysis_type == "rule_based"


def test_analyze_uses_injected_fallback():
    fallback = MagicMock()
    sentinel = object()
    fallback.analyze.return_value = sentinel
    with patch("lap_coach.coaching.llm_client.OpenAI") as MockOpenAI:
        mock_client = MagicMock()
        MockOpenAI.return_value = mock_client
        mock_client.chat.completions.create.side_effect = OpenAIError("down")

        metrics = _make_metrics()
        result = OpenAIAnalyzer(api_key="test-key", fallback=fallback).analyze(metrics)

    assert result is sentinel
    fallback.analyze.assert_called_once_with(metrics)
