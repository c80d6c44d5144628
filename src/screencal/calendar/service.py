"""Commit a validated :class:`EventRecord` to a calendar store.

Protocol, in order:

1. Request access.  Denied -> :class:`CalendarAccessDenied` (terminal);
   a store error while asking -> :class:`EventCreationFailed`.
2. Resolve the destination: the record's ``calendar_id`` if it names a
   writable calendar, else the configured default calendar if writable,
   else the store's default, else :class:`EventCreationFailed`.
3. Map all-day semantics: an all-day event ends on the day it starts.
   Timed events use the record's effective end.
4. Save.  Any store failure -> :class:`EventCreationFailed`.
5. Optionally notify.  Notification failures never fail the commit.

There is no idempotency key: committing the same record twice creates two
events.  The store's own identity is the only identity an event gets.
"""

from __future__ import annotations

import logging

from screencal.calendar.store import CalendarInfo, CalendarStore, EventDraft
from screencal.exceptions import CalendarAccessDenied, EventCreationFailed
from screencal.models.event import EventRecord
from screencal.notifications import Notifier

logger = logging.getLogger(__name__)


class CalendarCommitService:
    """Persists events into a :class:`CalendarStore`.

    Args:
        store: The calendar store collaborator.
        notifier: Optional notifier called after a successful save.
        default_calendar_id: Configured default calendar, tried before the
            store's own default.
    """

    def __init__(
        self,
        store: CalendarStore,
        notifier: Notifier | None = None,
        default_calendar_id: str | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._default_calendar_id = default_calendar_id

    def create_event(self, record: EventRecord) -> str:
        """Create *record* in the store.

        Args:
            record: The validated event to persist.

        Returns:
            The identifier the store assigned to the new event.

        Raises:
            CalendarAccessDenied: If the store refuses access.
            EventCreationFailed: If no calendar is available or the save
                fails.
        """
        try:
            granted = self._store.request_access()
        except Exception as exc:
            logger.error("Failed to request calendar access: %s", exc)
            raise EventCreationFailed(str(exc)) from exc

        if not granted:
            logger.error("Calendar access denied")
            raise CalendarAccessDenied()

        try:
            calendar = self._resolve_calendar(record.calendar_id)
        except EventCreationFailed:
            raise
        except Exception as exc:
            logger.error("Failed to look up calendars: %s", exc)
            raise EventCreationFailed(str(exc)) from exc

        draft = self._build_draft(record, calendar)

        try:
            event_id = self._store.save_event(draft)
        except Exception as exc:
            logger.error("Failed to save event '%s': %s", record.title, exc)
            raise EventCreationFailed(str(exc)) from exc

        logger.info(
            "Created event '%s' in calendar '%s' (id=%s)",
            record.title,
            calendar.title,
            event_id,
        )

        if self._notifier is not None:
            try:
                self._notifier.notify("Event Created", record.title)
            except Exception as exc:
                logger.warning("Notification failed (event was saved): %s", exc)

        return event_id

    def _resolve_calendar(self, requested_id: str | None) -> CalendarInfo:
        """Pick the destination calendar, falling back to defaults."""
        writable = {c.identifier: c for c in self._store.writable_calendars()}

        for candidate in (requested_id, self._default_calendar_id):
            if candidate and candidate in writable:
                return writable[candidate]
            if candidate:
                logger.warning(
                    "Calendar '%s' is not a writable calendar, falling back",
                    candidate,
                )

        default = self._store.default_calendar()
        if default is None:
            raise EventCreationFailed("no calendar available")
        return default

    @staticmethod
    def _build_draft(record: EventRecord, calendar: CalendarInfo) -> EventDraft:
        """Translate *record* into the store's representation."""
        if record.is_all_day:
            end = record.start
        else:
            end = record.effective_end

        return EventDraft(
            calendar_id=calendar.identifier,
            title=record.title,
            start=record.start,
            end=end,
            is_all_day=record.is_all_day,
            location=record.location or None,
            notes=record.notes or None,
            url=str(record.url) if record.url is not None else None,
        )
