"""Calendar commit layer for screencal."""

from __future__ import annotations

from screencal.calendar.google_store import GoogleCalendarStore
from screencal.calendar.service import CalendarCommitService
from screencal.calendar.store import (
    CalendarInfo,
    CalendarStore,
    EventDraft,
    InMemoryCalendarStore,
)

__all__ = [
    "CalendarCommitService",
    "CalendarInfo",
    "CalendarStore",
    "EventDraft",
    "GoogleCalendarStore",
    "InMemoryCalendarStore",
]
