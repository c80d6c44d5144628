"""Tests for the in-memory calendar store."""

from __future__ import annotations

from datetime import datetime

from screencal.calendar.store import CalendarInfo, EventDraft, InMemoryCalendarStore


class TestInMemoryCalendarStore:
    """Tests for the dry-run store."""

    def test_default_calendar_lookup(self) -> None:
        home = CalendarInfo("home", "Home")
        store = InMemoryCalendarStore(calendars=[home], default="home")

        assert store.default_calendar() == home

    def test_no_default(self) -> None:
        store = InMemoryCalendarStore(calendars=[CalendarInfo("a", "A")])

        assert store.default_calendar() is None

    def test_writable_calendars_is_a_copy(self) -> None:
        store = InMemoryCalendarStore(calendars=[CalendarInfo("a", "A")])

        store.writable_calendars().clear()

        assert len(store.calendars) == 1

    def test_save_assigns_unique_ids(self) -> None:
        store = InMemoryCalendarStore()
        draft = EventDraft("a", "T", datetime(2026, 1, 1), datetime(2026, 1, 1))

        ids = {store.save_event(draft), store.save_event(draft)}

        assert len(ids) == 2
        assert store.saved == [draft, draft]
