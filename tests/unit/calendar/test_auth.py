"""Tests for Google Calendar credential acquisition.

Exercises ``get_calendar_credentials`` through the store that uses it:
what :meth:`GoogleCalendarStore.request_access` answers for each token
state, and when the browser consent flow may start.

| Token state | Interactive | Outcome |
|---|---|---|
| valid | either | cached token, nothing written |
| expired, refresh ok | either | refreshed token saved |
| expired, refresh rejected | yes | browser flow, token saved |
| expired, refresh rejected | no | access denied, no browser |
| absent | no | access denied, no browser |
| absent, no client secrets | yes | access denied |
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError

from screencal.calendar.auth import (
    SCOPES,
    _load_cached_token,
    _refresh_token,
    _run_browser_flow,
    _save_token,
    get_calendar_credentials,
)
from screencal.calendar.exceptions import CalendarAuthError
from screencal.calendar.google_store import GoogleCalendarStore
from screencal.calendar.service import CalendarCommitService
from screencal.exceptions import CalendarAccessDenied, EventCreationFailed
from screencal.models.event import EventRecord

AUTH = "screencal.calendar.auth"


def _store(paths: tuple[Path, Path], interactive: bool = True) -> GoogleCalendarStore:
    secrets_path, token_path = paths
    return GoogleCalendarStore(secrets_path, token_path, interactive=interactive)


# ---------------------------------------------------------------------------
# Store access per token state
# ---------------------------------------------------------------------------


class TestStoreAccess:
    """request_access() answers from the credential strategy."""

    def test_valid_token_grants_without_writing(
        self, oauth_paths: tuple[Path, Path], make_credentials: Callable[..., MagicMock]
    ) -> None:
        creds = make_credentials(valid=True)

        with patch(f"{AUTH}._load_cached_token", return_value=creds), patch(
            f"{AUTH}._save_token"
        ) as mock_save, patch(
            "screencal.calendar.google_store.build"
        ) as mock_build:
            assert _store(oauth_paths).request_access() is True

        mock_save.assert_not_called()
        mock_build.assert_called_once_with("calendar", "v3", credentials=creds)

    @pytest.mark.parametrize("interactive", [True, False])
    def test_refreshed_token_saved(
        self,
        oauth_paths: tuple[Path, Path],
        make_credentials: Callable[..., MagicMock],
        interactive: bool,
    ) -> None:
        """Refreshing needs no user, so it works either way."""
        creds = make_credentials(valid=False)

        with patch(f"{AUTH}._load_cached_token", return_value=creds), patch(
            f"{AUTH}._refresh_token", return_value=creds
        ), patch(f"{AUTH}._save_token") as mock_save, patch(
            f"{AUTH}._run_browser_flow"
        ) as mock_flow, patch("screencal.calendar.google_store.build"):
            assert _store(oauth_paths, interactive).request_access() is True

        mock_save.assert_called_once_with(creds, oauth_paths[1])
        mock_flow.assert_not_called()

    def test_rejected_refresh_falls_back_to_browser(
        self, oauth_paths: tuple[Path, Path], make_credentials: Callable[..., MagicMock]
    ) -> None:
        fresh = make_credentials(valid=True)

        with patch(
            f"{AUTH}._load_cached_token", return_value=make_credentials(valid=False)
        ), patch(f"{AUTH}._refresh_token", return_value=None), patch(
            f"{AUTH}._run_browser_flow", return_value=fresh
        ) as mock_flow, patch(f"{AUTH}._save_token") as mock_save, patch(
            "screencal.calendar.google_store.build"
        ):
            assert _store(oauth_paths).request_access() is True

        mock_flow.assert_called_once_with(oauth_paths[0])
        mock_save.assert_called_once_with(fresh, oauth_paths[1])

    @pytest.mark.parametrize("refreshable", [True, False])
    def test_non_interactive_never_opens_browser(
        self,
        oauth_paths: tuple[Path, Path],
        make_credentials: Callable[..., MagicMock],
        refreshable: bool,
    ) -> None:
        with patch(
            f"{AUTH}._load_cached_token",
            return_value=make_credentials(valid=False, refreshable=refreshable),
        ), patch(f"{AUTH}._refresh_token", return_value=None), patch(
            f"{AUTH}._run_browser_flow"
        ) as mock_flow, patch(
            "screencal.calendar.google_store.build"
        ) as mock_build:
            assert _store(oauth_paths, interactive=False).request_access() is False

        mock_flow.assert_not_called()
        mock_build.assert_not_called()

    def test_no_token_non_interactive_is_denied(
        self, oauth_paths: tuple[Path, Path]
    ) -> None:
        with patch(f"{AUTH}._run_browser_flow") as mock_flow:
            assert _store(oauth_paths, interactive=False).request_access() is False

        mock_flow.assert_not_called()

    def test_missing_client_secrets_is_denied(self, tmp_path: Path) -> None:
        store = GoogleCalendarStore(tmp_path / "absent.json", tmp_path / "token.json")

        assert store.request_access() is False


class TestCommitThroughStore:
    """Credential outcomes as seen by the commit service."""

    def _record(self) -> EventRecord:
        return EventRecord(title="Dentist", start=datetime(2026, 4, 2, 8, 30))

    def test_denied_access_is_calendar_access_denied(
        self, oauth_paths: tuple[Path, Path]
    ) -> None:
        service = CalendarCommitService(_store(oauth_paths, interactive=False))

        with pytest.raises(CalendarAccessDenied):
            service.create_event(self._record())

    def test_unwritable_token_is_event_creation_failed(
        self, oauth_paths: tuple[Path, Path], make_credentials: Callable[..., MagicMock]
    ) -> None:
        """A token that cannot be saved surfaces as a typed commit error."""
        creds = make_credentials(valid=False)
        service = CalendarCommitService(_store(oauth_paths))

        with patch(f"{AUTH}._load_cached_token", return_value=creds), patch(
            f"{AUTH}._refresh_token", return_value=creds
        ), patch(
            f"{AUTH}._save_token", side_effect=PermissionError("read-only disk")
        ), pytest.raises(EventCreationFailed, match="read-only disk"):
            service.create_event(self._record())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestTokenFile:
    """Reading and writing the cached token."""

    def test_missing_token_is_none(self, oauth_paths: tuple[Path, Path]) -> None:
        assert _load_cached_token(oauth_paths[1]) is None

    def test_corrupt_token_is_none(self, tmp_path: Path) -> None:
        token_path = tmp_path / "token.json"
        token_path.write_text("not json")

        assert _load_cached_token(token_path) is None

    def test_save_creates_token_directory(
        self, oauth_paths: tuple[Path, Path], make_credentials: Callable[..., MagicMock]
    ) -> None:
        token_path = oauth_paths[1]

        _save_token(make_credentials(), token_path)

        assert token_path.read_text() == '{"token": "t"}'

    def test_corrupt_token_non_interactive_raises(self, tmp_path: Path) -> None:
        token_path = tmp_path / "token.json"
        token_path.write_text("{")

        with pytest.raises(CalendarAuthError, match="interaction is disabled"):
            get_calendar_credentials(tmp_path / "c.json", token_path, interactive=False)


class TestRefreshAndFlow:
    """The refresh call and the consent flow."""

    def test_rejected_refresh_is_none(
        self, make_credentials: Callable[..., MagicMock]
    ) -> None:
        creds = make_credentials(valid=False)
        creds.refresh.side_effect = RefreshError("invalid_grant")

        assert _refresh_token(creds) is None

    def test_flow_requests_calendar_scope(
        self, oauth_paths: tuple[Path, Path], make_credentials: Callable[..., MagicMock]
    ) -> None:
        creds = make_credentials()
        flow = MagicMock()
        flow.run_local_server.return_value = creds

        with patch(
            f"{AUTH}.InstalledAppFlow.from_client_secrets_file", return_value=flow
        ) as mock_from_secrets:
            assert _run_browser_flow(oauth_paths[0]) is creds

        mock_from_secrets.assert_called_once_with(str(oauth_paths[0]), scopes=SCOPES)
        assert SCOPES == ["https://www.googleapis.com/auth/calendar"]
