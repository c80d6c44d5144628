"""Google Calendar implementation of :class:`CalendarStore`.

Wraps the ``googleapiclient`` service resource.  Access is "granted" once
OAuth credentials are available; writable calendars are those where the
user has at least the ``writer`` role; the default calendar is the user's
primary calendar.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from screencal.calendar.auth import get_calendar_credentials
from screencal.calendar.event_mapper import map_to_google_event
from screencal.calendar.exceptions import (
    CalendarAuthError,
    CalendarNotFoundError,
    classify_http_error,
)
from screencal.calendar.store import CalendarInfo, EventDraft

logger = logging.getLogger(__name__)

_PRIMARY_CALENDAR = "primary"
_WRITABLE_ROLES = {"writer", "owner"}


class GoogleCalendarStore:
    """Calendar store backed by the Google Calendar API.

    Args:
        credentials_path: OAuth client secrets file.
        token_path: Cached user token file.
        interactive: Allow the browser consent flow during
            :meth:`request_access`.
        service: Optional pre-built service resource.  When given, access
            is considered granted.  Pass a mock here in tests.
    """

    def __init__(
        self,
        credentials_path: Path | str = "credentials.json",
        token_path: Path | str = "token.json",
        interactive: bool = True,
        service: Any | None = None,
    ) -> None:
        self._credentials_path = Path(credentials_path)
        self._token_path = Path(token_path)
        self._interactive = interactive
        self._service = service

    def request_access(self) -> bool:
        if self._service is not None:
            return True

        try:
            creds = get_calendar_credentials(
                self._credentials_path,
                self._token_path,
                interactive=self._interactive,
            )
        except CalendarAuthError as exc:
            logger.warning("Calendar access not granted: %s", exc)
            return False

        self._service = build("calendar", "v3", credentials=creds)
        logger.info("Google Calendar access granted")
        return True

    def writable_calendars(self) -> list[CalendarInfo]:
        calendars: list[CalendarInfo] = []
        page_token: str | None = None

        while True:
            response = self._execute(
                self._require_service()
                .calendarList()
                .list(minAccessRole="writer", pageToken=page_token)
            )
            for item in response.get("items", []):
                if item.get("accessRole") in _WRITABLE_ROLES:
                    calendars.append(_to_info(item))

            page_token = response.get("nextPageToken")
            if page_token is None:
                break

        logger.debug("Found %d writable calendar(s)", len(calendars))
        return calendars

    def default_calendar(self) -> CalendarInfo | None:
        try:
            item = self._execute(
                self._require_service().calendarList().get(calendarId=_PRIMARY_CALENDAR)
            )
        except CalendarNotFoundError:
            logger.warning("No primary calendar found")
            return None
        return _to_info(item)

    def save_event(self, draft: EventDraft) -> str:
        body = map_to_google_event(draft)
        result = self._execute(
            self._require_service()
            .events()
            .insert(calendarId=draft.calendar_id, body=body)
        )
        event_id = result.get("id", "")
        logger.info("Inserted Google Calendar event '%s' (id=%s)", draft.title, event_id)
        return event_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_service(self) -> Any:
        if self._service is None:
            raise CalendarAuthError("Calendar access has not been requested")
        return self._service

    @staticmethod
    def _execute(request: Any) -> dict:
        try:
            return request.execute()
        except HttpError as exc:
            raise classify_http_error(exc) from exc


def _to_info(item: dict) -> CalendarInfo:
    identifier = item["id"]
    return CalendarInfo(identifier=identifier, title=item.get("summary", identifier))
