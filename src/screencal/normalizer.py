"""Decode and validate model replies into :class:`EventRecord` objects.

Every parsing backend hands its raw reply text to
:func:`parse_provider_output`.  The reply may be wrapped in prose or
markdown fences, may be an empty object, or may be missing fields; each
case maps to a distinct exception from :mod:`screencal.exceptions`.

Date and time resolution is purely mechanical here: the model is asked for
absolute ``YYYY-MM-DD`` dates and ``HH:MM`` times, and this module only
combines them in the host's local timezone.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, time, timedelta

from dateutil import tz as dateutil_tz
from pydantic import ValidationError

from screencal.exceptions import (
    EmptyModelOutput,
    MalformedResponse,
    MissingOrInvalidDate,
    MissingTitle,
)
from screencal.models.event import DEFAULT_DURATION, EventRecord
from screencal.models.response import ProviderResponse

logger = logging.getLogger(__name__)

_EMPTY_OBJECT = re.compile(r"^\{\s*\}$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{1,2})(?::\d{1,2})?$")


def extract_json_object(raw: str) -> str:
    """Return the text from the first ``{`` to the last ``}`` inclusive.

    If either brace is missing the raw text is returned unchanged, so the
    decode step fails on it.
    """
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        return raw
    return raw[start : end + 1]


def parse_provider_output(
    raw: str,
    source_text: str | None = None,
    default_duration: timedelta = DEFAULT_DURATION,
) -> EventRecord:
    """Turn a raw model reply into a validated :class:`EventRecord`.

    Args:
        raw: The model's free-form reply.
        source_text: The text the model was asked to parse.  Stored on the
            record for auditing.
        default_duration: Length of a timed event whose end time is
            missing or unparseable.

    Returns:
        The normalized event.

    Raises:
        EmptyModelOutput: If the reply is an empty JSON object.
        MalformedResponse: If the reply cannot be decoded into an object
            with the expected field types.
        MissingTitle: If the title is absent or blank.
        MissingOrInvalidDate: If the date is absent or not ``YYYY-MM-DD``.
    """
    candidate = extract_json_object(raw)
    trimmed = candidate.strip()

    if _EMPTY_OBJECT.match(trimmed):
        logger.warning("Model returned an empty JSON object")
        raise EmptyModelOutput()

    response = _decode(trimmed)

    title = (response.title or "").strip()
    if not title:
        raise MissingTitle(trimmed)

    event_date = _parse_date(response.date)
    if event_date is None:
        raise MissingOrInvalidDate(response.date, trimmed)

    start_time = _blank_to_none(response.start_time)
    end_time = _blank_to_none(response.end_time)

    if response.is_all_day is not None:
        is_all_day = response.is_all_day
    else:
        is_all_day = start_time is None

    local_tz = dateutil_tz.tzlocal()
    start = datetime.combine(event_date, time(0, 0), tzinfo=local_tz)
    end: datetime | None = None

    if not is_all_day:
        parsed_start = _parse_time(start_time)
        if parsed_start is not None:
            start = datetime.combine(event_date, parsed_start, tzinfo=local_tz)

        parsed_end = _parse_time(end_time)
        if parsed_end is not None:
            end = datetime.combine(event_date, parsed_end, tzinfo=local_tz)
        else:
            end = start + default_duration

    record = EventRecord(
        title=title,
        start=start,
        end=end,
        is_all_day=is_all_day,
        location=_blank_to_none(response.location),
        notes=_blank_to_none(response.notes),
        source_text=source_text,
    )

    logger.info(
        "Normalized event '%s' (start=%s, end=%s, all_day=%s)",
        record.title,
        record.start.isoformat(),
        record.end.isoformat() if record.end else None,
        record.is_all_day,
    )
    return record


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _decode(text: str) -> ProviderResponse:
    """Decode *text* into a :class:`ProviderResponse`.

    Raises:
        MalformedResponse: On invalid JSON, a non-object payload, or field
            values of the wrong type.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(str(exc), text) from exc

    if not isinstance(data, dict):
        raise MalformedResponse(
            f"expected a JSON object, got {type(data).__name__}", text
        )

    try:
        return ProviderResponse.model_validate(data)
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise MalformedResponse(detail, text) from exc


def _parse_date(value: str | None) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` date, returning ``None`` otherwise."""
    if value is None:
        return None
    value = value.strip()
    if not _DATE_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_time(value: str | None) -> time | None:
    """Parse an ``HH:MM`` time.

    Returns ``None`` when *value* does not look like a time at all.  An
    hour or minute component that is out of range falls back to ``0``
    instead of raising.
    """
    if value is None:
        return None
    match = _TIME_PATTERN.match(value.strip())
    if match is None:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    if not 0 <= hour <= 23:
        hour = 0
    if not 0 <= minute <= 59:
        minute = 0
    return time(hour, minute)


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value
