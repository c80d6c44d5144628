"""Tests for the Anthropic parsing backend."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from screencal.exceptions import ApiKeyMissing, ProviderRequestFailed, ProviderUnreachable
from screencal.prompts import SYSTEM_INSTRUCTION
from screencal.providers.anthropic import (
    API_URL,
    API_VERSION,
    MAX_TOKENS,
    AnthropicEventParser,
)

REPLY = 'Here is the event:\n{"title": "Book club", "date": "2026-06-10"}'


def _message(*blocks: dict) -> dict:
    return {"id": "msg_1", "type": "message", "role": "assistant", "content": list(blocks)}


class TestAnthropicEventParser:
    """Tests for request shape and reply handling."""

    def test_missing_key_fails_before_network(
        self, no_secrets: MagicMock, mock_session: MagicMock
    ) -> None:
        parser = AnthropicEventParser(no_secrets, session=mock_session)

        with pytest.raises(ApiKeyMissing, match="Anthropic"):
            parser.parse_event("book club")

        mock_session.request.assert_not_called()

    def test_request_shape(
        self, secrets: MagicMock, mock_session: MagicMock, make_response
    ) -> None:
        mock_session.request.return_value = make_response(
            200, _message({"type": "text", "text": REPLY})
        )
        parser = AnthropicEventParser(secrets, model="claude-test", session=mock_session)

        parser.parse_event("book club on june 10")

        args, kwargs = mock_session.request.call_args
        assert args == ("POST", API_URL)
        assert kwargs["headers"]["x-api-key"] == "sk-ant-test"
        assert kwargs["headers"]["anthropic-version"] == API_VERSION
        assert "Authorization" not in kwargs["headers"]

        payload = kwargs["json"]
        assert payload["model"] == "claude-test"
        assert payload["max_tokens"] == MAX_TOKENS
        assert payload["system"] == SYSTEM_INSTRUCTION
        assert payload["messages"][0]["content"].endswith("book club on june 10")

    def test_prose_around_json_tolerated(
        self, secrets: MagicMock, mock_session: MagicMock, make_response
    ) -> None:
        mock_session.request.return_value = make_response(
            200, _message({"type": "text", "text": REPLY})
        )
        parser = AnthropicEventParser(secrets, session=mock_session)

        record = parser.parse_event("book club on june 10")

        assert record.title == "Book club"
        assert record.is_all_day is True

    def test_first_text_block_used(
        self, secrets: MagicMock, mock_session: MagicMock, make_response
    ) -> None:
        mock_session.request.return_value = make_response(
            200,
            _message(
                {"type": "thinking", "thinking": "hmm"},
                {"type": "text", "text": REPLY},
                {"type": "text", "text": "ignored"},
            ),
        )
        parser = AnthropicEventParser(secrets, session=mock_session)

        assert parser.parse_event("x").title == "Book club"

    @pytest.mark.parametrize("body", [{}, _message(), {"content": "text"}])
    def test_unexpected_envelope(
        self, secrets: MagicMock, mock_session: MagicMock, make_response, body: dict
    ) -> None:
        mock_session.request.return_value = make_response(200, body)
        parser = AnthropicEventParser(secrets, session=mock_session)

        with pytest.raises(ProviderRequestFailed, match="Failed to parse Anthropic response"):
            parser.parse_event("x")

    def test_generic_error_without_vendor_message(
        self, secrets: MagicMock, mock_session: MagicMock, make_response
    ) -> None:
        mock_session.request.return_value = make_response(529, None, text="overloaded")
        parser = AnthropicEventParser(secrets, session=mock_session)

        with pytest.raises(ProviderRequestFailed, match=r"Anthropic error \(529\)"):
            parser.parse_event("x")

    def test_timeout_is_unreachable(
        self, secrets: MagicMock, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = requests.Timeout("timed out")
        parser = AnthropicEventParser(secrets, session=mock_session)

        with pytest.raises(ProviderUnreachable):
            parser.parse_event("x")
