"""Map an :class:`EventDraft` to the Google Calendar API body format.

- **summary** from the title; **location**, **description** (notes) and
  **source.url** when present.
- Timed events use ``dateTime`` with the draft's UTC offset.
- All-day events use ``date``.  Google treats the end date as exclusive,
  so a single-day event ends on the following day.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from screencal.calendar.store import EventDraft


def map_to_google_event(draft: EventDraft) -> dict:
    """Convert *draft* into a Google Calendar event resource.

    Args:
        draft: The event to map.

    Returns:
        A ``dict`` ready for ``events().insert()``.
    """
    if draft.is_all_day:
        start_day = draft.start.date()
        end_day = max(draft.end.date(), start_day) + timedelta(days=1)
        start = {"date": start_day.isoformat()}
        end = {"date": end_day.isoformat()}
    else:
        start = _format_datetime(draft.start)
        end = _format_datetime(draft.end)

    body: dict = {
        "summary": draft.title,
        "start": start,
        "end": end,
    }

    if draft.location:
        body["location"] = draft.location
    if draft.notes:
        body["description"] = draft.notes
    if draft.url:
        body["source"] = {"title": draft.title, "url": draft.url}

    return body


def _format_datetime(dt: datetime) -> dict:
    """Format *dt* as an RFC 3339 ``dateTime`` entry.

    Naive datetimes are taken as host-local time.
    """
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return {"dateTime": dt.isoformat()}
