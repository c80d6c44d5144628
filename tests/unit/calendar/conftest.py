"""Fixtures for the Google Calendar store and its OAuth helpers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, create_autospec

import pytest
from google.oauth2.credentials import Credentials


@pytest.fixture()
def make_credentials() -> Callable[..., MagicMock]:
    """Build autospec'd credentials in a given validity state."""

    def _make(valid: bool = True, refreshable: bool = True) -> MagicMock:
        creds = create_autospec(Credentials, instance=True)
        creds.valid = valid
        creds.expired = not valid
        creds.refresh_token = "refresh-me" if refreshable else None
        creds.to_json.return_value = '{"token": "t"}'
        return creds

    return _make


@pytest.fixture()
def oauth_paths(tmp_path: Path) -> tuple[Path, Path]:
    """Client secrets (present) and token (absent) paths in a temp directory."""
    secrets_path = tmp_path / "credentials.json"
    secrets_path.write_text('{"installed": {}}')
    return secrets_path, tmp_path / "tokens" / "token.json"
