"""Semantic parsing through the OpenAI chat-completions API."""

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

PROVIDER_NAME = "OpenAI"
API_URL = "https://api.openai.com/v1/chat/completions"
TIMEOUT = 30.0


class OpenAIEventParser:
    """Extracts events with an OpenAI chat model in JSON mode.

    Args:
        secrets: Credential lookup; the key is read on every call.
        model: Chat model identifier (e.g. ``"gpt-4o-mini"``).
        custom_context: Extra prompt context appended verbatim.
        default_duration: Length of timed events with no end time.
        session: Optional :class:`requests.Session` (mock in tests).
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        secrets: SecretStore,
        model: str = "gpt-4o-mini",
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
        api_key = self._secrets.get_api_key("openai")
        if not api_key:
            raise ApiKeyMissing(PROVIDER_NAME)

        prompt = build_event_prompt(text, custom_context=self._custom_context)
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.1,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Calling OpenAI (%s)", self._model)
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
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderRequestFailed("Failed to parse OpenAI response") from exc
        if not isinstance(content, str):
            raise ProviderRequestFailed("Failed to parse OpenAI response")

        logger.debug("Raw OpenAI reply:\n%s", content)
        return parse_provider_output(
            content, source_text=text, default_duration=self._default_duration
        )
