"""Semantic parsing through the Anthropic messages API."""

from __future__ import annotations

import logging
from datetime import timedelta

import requests

from screencal.exceptions import ApiKeyMissing, ProviderRequestFailed
from screencal.keystore import SecretStore
from screencal.models.event import DEFAULT_DURATION, EventRecord
from screencal.normalizer import parse_provider_output
from screencal.prompts import SYSTEM_INSTRUCTION, build_event_prompt
from screencal.providers.http import ensure_success, json_body, send

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Anthropic"
API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
TIMEOUT = 30.0
MAX_TOKENS = 1024


class AnthropicEventParser:
    """Extracts events with an Anthropic model.

    The messages API has no JSON mode, so the system instruction alone asks
    for JSON; the normalizer tolerates any prose the model adds anyway.

    Args:
        secrets: Credential lookup; the key is read on every call.
        model: Model identifier.
        custom_context: Extra prompt context appended verbatim.
        default_duration: Length of timed events with no end time.
        session: Optional :class:`requests.Session` (mock in tests).
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        secrets: SecretStore,
        model: str = "claude-3-5-sonnet-latest",
        custom_context: str = "",
        default_duration: timedelta = DEFAULT_DURATION,
        session: requests.Session | None = None,
    ) -> None:
        self._secrets = secrets
        self._model = model
        self._custom_context = custom_context
        self._default_duration = default_duration
        self._session = session or requests.Session()

    def parse_event(self, text: str) -> EventRecord:
        api_key = self._secrets.get_api_key("anthropic")
        if not api_key:
            raise ApiKeyMissing(PROVIDER_NAME)

        prompt = build_event_prompt(text, custom_context=self._custom_context)
        payload = {
            "model": self._model,
            "max_tokens": MAX_TOKENS,
            "system": SYSTEM_INSTRUCTION,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": api_key,
            "anthropic-version": API_VERSION,
            "Content-Type": "application/json",
        }

        logger.info("Calling Anthropic (%s)", self._model)
        response = send(
            self._session,
            "POST",
            API_URL,
            provider=PROVIDER_NAME,
            timeout=TIMEOUT,
            json=payload,
            headers=headers,
        )
        ensure_success(response, PROVIDER_NAME)

        body = json_body(response, PROVIDER_NAME)
        blocks = body.get("content")
        if not isinstance(blocks, list):
            raise ProviderRequestFailed("Failed to parse Anthropic response")
        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict)
            and block.get("type", "text") == "text"
            and isinstance(block.get("text"), str)
        ]
        if not texts:
            raise ProviderRequestFailed("Failed to parse Anthropic response")

        reply = texts[0]
        logger.debug("Raw Anthropic reply:\n%s", reply)
        return parse_provider_output(
            reply, source_text=text, default_duration=self._default_duration
        )
