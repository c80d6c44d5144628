"""Calendar store abstraction used by the commit service.

A :class:`CalendarStore` exposes the four primitives the commit protocol
needs: an access request, enumeration of writable calendars, the store's
default calendar, and a save primitive.  :class:`GoogleCalendarStore`
(:mod:`screencal.calendar.google_store`) talks to Google Calendar;
:class:`InMemoryCalendarStore` keeps everything in a list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarInfo:
    """A calendar the user can pick as a destination.

    Attributes:
        identifier: Store-specific opaque identifier.
        title: Display name.
    """

    identifier: str
    title: str


@dataclass(frozen=True)
class EventDraft:
    """An event in the shape the store persists.

    For all-day events ``start`` and ``end`` fall on the same day and only
    their dates are meaningful.
    """

    calendar_id: str
    title: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    location: str | None = None
    notes: str | None = None
    url: str | None = None


class CalendarStore(Protocol):
    """External calendar store."""

    def request_access(self) -> bool:
        """Ask for access.  Idempotent; returns whether it was granted."""
        ...

    def writable_calendars(self) -> list[CalendarInfo]:
        """Return only the calendars that accept new events."""
        ...

    def default_calendar(self) -> CalendarInfo | None:
        """Return the store's default calendar for new events, if any."""
        ...

    def save_event(self, draft: EventDraft) -> str:
        """Persist *draft* and return the store-assigned event identifier.

        Raises:
            Exception: Any store-level failure.
        """
        ...


@dataclass
class InMemoryCalendarStore:
    """A :class:`CalendarStore` held in memory.

    Useful for dry runs and tests.

    Attributes:
        calendars: Writable calendars.
        default: Identifier of the default calendar, or ``None``.
        granted: What :meth:`request_access` answers.
        saved: Drafts saved so far, in order.
    """

    calendars: list[CalendarInfo] = field(default_factory=list)
    default: str | None = None
    granted: bool = True
    saved: list[EventDraft] = field(default_factory=list)

    def request_access(self) -> bool:
        return self.granted

    def writable_calendars(self) -> list[CalendarInfo]:
        return list(self.calendars)

    def default_calendar(self) -> CalendarInfo | None:
        for calendar in self.calendars:
            if calendar.identifier == self.default:
                return calendar
        return None

    def save_event(self, draft: EventDraft) -> str:
        self.saved.append(draft)
        event_id = uuid4().hex
        logger.info("Stored event '%s' in memory (id=%s)", draft.title, event_id)
        return event_id
