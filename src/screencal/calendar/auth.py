"""OAuth 2.0 authentication for the Google Calendar store.

Implements the desktop-application OAuth flow with
``google-auth-oauthlib``: a cached token is reused while valid, refreshed
when expired, and replaced through the browser consent flow otherwise.
The browser flow only runs when the caller allows interaction.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from screencal.calendar.exceptions import CalendarAuthError

logger = logging.getLogger(__name__)

SCOPES: list[str] = ["https://www.googleapis.com/auth/calendar"]
"""Scopes needed to list calendars and insert events."""


def get_calendar_credentials(
    credentials_path: Path | str,
    token_path: Path | str,
    interactive: bool = True,
) -> Credentials:
    """Obtain valid Google Calendar OAuth 2.0 credentials.

    1. **Cached token** -- load *token_path* and return it if still valid.
    2. **Refresh** -- refresh an expired token that has a refresh token,
       saving the result.
    3. **Browser flow** -- when *interactive*, run the consent flow and
       save the new token.

    Args:
        credentials_path: OAuth client secrets file from Google Cloud
            Console.
        token_path: Where the user token is cached.
        interactive: Allow the browser consent flow.  When ``False`` a
            missing or unrefreshable token is an error.

    Returns:
        Valid :class:`google.oauth2.credentials.Credentials`.

    Raises:
        CalendarAuthError: If no strategy yields valid credentials.
    """
    credentials_path = Path(credentials_path)
    token_path = Path(token_path)

    creds = _load_cached_token(token_path)
    if creds is not None and creds.valid:
        logger.debug("Using cached token from %s", token_path)
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        logger.info("Cached token expired, attempting refresh")
        refreshed = _refresh_token(creds)
        if refreshed is not None:
            _save_token(refreshed, token_path)
            return refreshed

    if not interactive:
        raise CalendarAuthError("No valid calendar token and interaction is disabled")

    logger.info("Starting browser-based OAuth flow")
    creds = _run_browser_flow(credentials_path)
    _save_token(creds, token_path)
    return creds


def _load_cached_token(token_path: Path) -> Credentials | None:
    """Load credentials from *token_path*, or ``None`` if absent/corrupt."""
    if not token_path.exists():
        logger.info("No cached token found at %s", token_path)
        return None

    try:
        return Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except (json.JSONDecodeError, ValueError, KeyError) as exc:
        logger.warning("Failed to parse cached token at %s: %s", token_path, exc)
        return None


def _refresh_token(creds: Credentials) -> Credentials | None:
    """Refresh *creds* in place; ``None`` if the refresh is rejected."""
    try:
        creds.refresh(Request())
    except GoogleAuthError as exc:
        logger.warning("Token refresh failed: %s", exc)
        return None
    logger.info("Token refresh succeeded")
    return creds


def _run_browser_flow(credentials_path: Path) -> Credentials:
    """Run the installed-app consent flow.

    Raises:
        CalendarAuthError: If the client secrets file is missing.
    """
    if not credentials_path.exists():
        msg = f"OAuth client secrets file not found: {credentials_path}"
        logger.error(msg)
        raise CalendarAuthError(msg)

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes=SCOPES)
    return flow.run_local_server(port=0)


def _save_token(creds: Credentials, token_path: Path) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    logger.info("Token saved to %s", token_path)
