"""Console output for the screencal CLI.

Renders a :class:`~screencal.pipeline.PipelineResult` (and an optional
:class:`~screencal.pipeline.CommitResult`) as a short report: the input,
the extracted event and what happened to it.

:func:`format_pipeline_result` returns the formatted string and
:func:`print_pipeline_result` writes it to stdout.
"""

from __future__ import annotations

import sys
from datetime import datetime

from screencal.models.event import EventRecord
from screencal.pipeline import CommitResult, PipelineResult

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH
_SOURCE_PREVIEW = 120


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_pipeline_result(
    result: PipelineResult,
    commit: CommitResult | None = None,
) -> str:
    """Render an extraction run as console output.

    Args:
        result: The extraction outcome.
        commit: The commit outcome, when the event was committed.

    Returns:
        A multi-line string ready for console display.
    """
    lines: list[str] = []

    lines.append(_SEPARATOR)
    lines.append("  SCREENCAL")
    lines.append(_SEPARATOR)

    if result.source_text:
        lines.append("")
        lines.append("--- Input ---")
        lines.append(f"  {_preview(result.source_text)}")

    lines.append("")
    if result.record is not None:
        lines.append("--- Event ---")
        lines.extend(format_event(result.record))
    else:
        lines.append("--- Error ---")
        lines.append(f"  {result.message}")

    if commit is not None:
        lines.append("")
        lines.append("--- Calendar ---")
        if commit.success:
            lines.append(f"  [CREATED] (ID: {commit.event_id})")
        else:
            lines.append(f"  [FAILED] {commit.message}")

    lines.append("")
    lines.append(f"  Duration: {result.duration_seconds:.1f}s")
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def print_pipeline_result(
    result: PipelineResult,
    commit: CommitResult | None = None,
) -> None:
    """Format and print a run to stdout."""
    sys.stdout.write(format_pipeline_result(result, commit) + "\n")


def format_event(record: EventRecord) -> list[str]:
    """Return the indented detail lines for *record*."""
    lines = [f"  Title: {record.title}", f"  When: {_format_when(record)}"]

    if record.duration_minutes is not None:
        lines.append(f"  Duration: {record.duration_minutes} min")
    if record.location:
        lines.append(f"  Where: {record.location}")
    if record.notes:
        lines.append(f"  Notes: {record.notes}")
    if record.url:
        lines.append(f"  URL: {record.url}")
    if record.calendar_id:
        lines.append(f"  Calendar: {record.calendar_id}")

    return lines


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _format_when(record: EventRecord) -> str:
    """Format the start (and end) of *record* for display.

    All-day events show only the date.  An end on the same day shows only
    its time.
    """
    if record.is_all_day:
        return f"{record.start.strftime('%A %Y-%m-%d')} (all day)"

    start_str = _format_datetime(record.start)
    if record.end is None:
        return start_str

    if record.end.date() == record.start.date():
        end_str = record.end.strftime("%I:%M %p")
    else:
        end_str = _format_datetime(record.end)
    return f"{start_str} - {end_str}"


def _format_datetime(dt: datetime) -> str:
    return dt.strftime("%A %Y-%m-%d, %I:%M %p")


def _preview(text: str) -> str:
    """Collapse *text* to one line, truncated for display."""
    flat = " ".join(text.split())
    if len(flat) > _SOURCE_PREVIEW:
        return flat[: _SOURCE_PREVIEW - 3] + "..."
    return flat
