"""Tests for the console output formatter."""

from __future__ import annotations

from datetime import datetime

from screencal.exceptions import NoTextFound
from screencal.models.event import EventRecord
from screencal.output import format_event, format_pipeline_result
from screencal.pipeline import CommitResult, PipelineResult, PipelineState

START = datetime(2026, 3, 10, 9, 0)


def _ready(record: EventRecord, source_text: str = "standup 9am") -> PipelineResult:
    return PipelineResult(
        state=PipelineState.READY,
        record=record,
        source_text=source_text,
        duration_seconds=1.23,
    )


class TestFormatEvent:
    """Tests for the event detail lines."""

    def test_timed_event_same_day(self) -> None:
        record = EventRecord(title="Standup", start=START, end=datetime(2026, 3, 10, 9, 15))

        lines = format_event(record)

        assert lines[0] == "  Title: Standup"
        assert lines[1] == "  When: Tuesday 2026-03-10, 09:00 AM - 09:15 AM"
        assert "  Duration: 15 min" in lines

    def test_all_day_event(self) -> None:
        record = EventRecord(title="Holiday", start=START, is_all_day=True)

        assert format_event(record)[1] == "  When: Tuesday 2026-03-10 (all day)"

    def test_optional_fields(self) -> None:
        record = EventRecord(
            title="Talk",
            start=START,
            location="Hall B",
            notes="Slides",
            url="https://example.com/talk",
        )

        lines = format_event(record)

        assert "  Where: Hall B" in lines
        assert "  Notes: Slides" in lines
        assert "  URL: https://example.com/talk" in lines


class TestFormatPipelineResult:
    """Tests for the full report."""

    def test_success_report(self) -> None:
        output = format_pipeline_result(_ready(EventRecord(title="Standup", start=START)))

        assert "--- Input ---" in output
        assert "standup 9am" in output
        assert "--- Event ---" in output
        assert "Duration: 1.2s" in output
        assert "--- Calendar ---" not in output

    def test_long_input_truncated(self) -> None:
        output = format_pipeline_result(
            _ready(EventRecord(title="X", start=START), source_text="word " * 100)
        )

        assert "..." in output

    def test_failure_report(self) -> None:
        error = NoTextFound()
        result = PipelineResult(
            state=PipelineState.FAILED, error=error, message=error.user_message
        )

        output = format_pipeline_result(result)

        assert "--- Error ---" in output
        assert "No text found in the image" in output

    def test_commit_lines(self) -> None:
        result = _ready(EventRecord(title="Standup", start=START))

        created = format_pipeline_result(result, CommitResult(success=True, event_id="e1"))
        failed = format_pipeline_result(
            result, CommitResult(success=False, message="Failed to create event: x")
        )

        assert "[CREATED] (ID: e1)" in created
        assert "[FAILED] Failed to create event: x" in failed
