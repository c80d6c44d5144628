"""Shared fixtures for model backend unit tests."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, create_autospec

import pytest
import requests


def _make_response(
    status_code: int = 200,
    body: object | None = None,
    text: str | None = None,
) -> MagicMock:
    """Build a mock :class:`requests.Response`.

    A *body* of ``None`` makes ``.json()`` raise ``ValueError`` like a
    non-JSON payload does.
    """
    response = create_autospec(requests.Response, instance=True)
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    else:
        response.json.return_value = body
        response.text = text if text is not None else json.dumps(body)
    return response


@pytest.fixture()
def make_response():
    """Return the mock response builder."""
    return _make_response


@pytest.fixture()
def mock_session() -> MagicMock:
    """Return a mock Session whose ``request`` answers 200 ``{}``."""
    session = create_autospec(requests.Session, instance=True)
    session.request.return_value = _make_response(200, {})
    return session


@pytest.fixture()
def secrets() -> MagicMock:
    """Return a secret store holding keys for both remote vendors."""
    store = MagicMock()
    store.get_api_key.side_effect = {
        "openai": "sk-test-openai",
        "anthropic": "sk-ant-test",
    }.get
    return store


@pytest.fixture()
def no_secrets() -> MagicMock:
    """Return a secret store with no keys at all."""
    store = MagicMock()
    store.get_api_key.return_value = None
    return store
