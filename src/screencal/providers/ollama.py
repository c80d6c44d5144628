"""Backends for a locally hosted Ollama server.

- :class:`OllamaClient` -- thin wrapper over ``/api/tags`` and
  ``/api/generate``.
- :class:`OllamaEventParser` -- semantic parsing with a local text model.
- :class:`OllamaTextRecognizer` -- OCR with a local vision model.

Local models can be slow, so generation timeouts are generous (180 s for
text, 120 s for vision).  Listing models is expected to be quick (5 s).
"""

from __future__ import annotations

import base64
import io
import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import requests
from PIL import Image

from screencal.exceptions import OcrFailed, ProviderRequestFailed
from screencal.models.event import DEFAULT_DURATION, EventRecord
from screencal.normalizer import parse_provider_output
from screencal.prompts import OCR_INSTRUCTION, build_event_prompt
from screencal.providers.http import ensure_success, json_body, send

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Ollama"

GENERATE_TIMEOUT = 180.0
VISION_TIMEOUT = 120.0
LIST_TIMEOUT = 5.0

CONTEXT_WINDOW = 4096

# Images larger than this (encoded) are re-encoded as JPEG.
MAX_IMAGE_BYTES = 20 * 1024 * 1024


class OllamaClient:
    """Minimal client for the Ollama HTTP API.

    Args:
        host: Base URL, e.g. ``"http://localhost:11434"``.  Trailing
            slashes are ignored.
        session: Optional :class:`requests.Session`.  Pass a mock here in
            tests.
    """

    def __init__(self, host: str, session: requests.Session | None = None) -> None:
        self._host = host.rstrip("/")
        self._session = session or requests.Session()

    @property
    def host(self) -> str:
        return self._host

    def list_models(self) -> list[str]:
        """Return the names of installed models, in server order.

        Raises:
            ProviderUnreachable: If the server cannot be reached.
            ProviderRequestFailed: On a non-2xx answer or a bad body.
        """
        response = send(
            self._session,
            "GET",
            f"{self._host}/api/tags",
            provider=PROVIDER_NAME,
            timeout=LIST_TIMEOUT,
        )
        ensure_success(response, PROVIDER_NAME)
        body = json_body(response, PROVIDER_NAME)

        models = body.get("models", [])
        if not isinstance(models, list):
            raise ProviderRequestFailed("Failed to parse Ollama model list")
        return [m["name"] for m in models if isinstance(m, dict) and m.get("name")]

    def generate(self, payload: dict[str, Any], timeout: float) -> requests.Response:
        """POST *payload* to ``/api/generate`` and return the raw response.

        Status handling is left to the caller because the text and vision
        backends report failures differently.
        """
        return send(
            self._session,
            "POST",
            f"{self._host}/api/generate",
            provider=PROVIDER_NAME,
            timeout=timeout,
            json=payload,
        )


class OllamaEventParser:
    """Semantic parsing through a local text model.

    When no model is configured, the first installed model is used and
    reported through *on_model_selected* so it can be saved as the new
    default.

    Args:
        client: The :class:`OllamaClient` to use.
        model: Model name, or ``""`` to auto-select.
        custom_context: Extra prompt context appended verbatim.
        default_duration: Length of timed events with no end time.
        on_model_selected: Called with the auto-selected model name.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        client: OllamaClient,
        model: str = "",
        custom_context: str = "",
        default_duration: timedelta = DEFAULT_DURATION,
        on_model_selected: Callable[[str], None] | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._custom_context = custom_context
        self._default_duration = default_duration
        self._on_model_selected = on_model_selected

    def parse_event(self, text: str) -> EventRecord:
        model = self._resolve_model()
        prompt = build_event_prompt(text, custom_context=self._custom_context)

        logger.info("Using Ollama model '%s' at %s", model, self._client.host)
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"num_ctx": CONTEXT_WINDOW},
            # Reasoning traces break strict JSON output.
            "think": False,
        }
        response = self._client.generate(payload, timeout=GENERATE_TIMEOUT)

        if response.status_code == 404:
            raise ProviderRequestFailed(
                f"Model '{model}' not found. Please select a different model.",
                status_code=404,
            )
        ensure_success(response, PROVIDER_NAME)

        reply = json_body(response, PROVIDER_NAME).get("response")
        if not isinstance(reply, str):
            raise ProviderRequestFailed("Failed to parse Ollama response")

        logger.debug("Raw Ollama reply:\n%s", reply)
        return parse_provider_output(
            reply, source_text=text, default_duration=self._default_duration
        )

    def _resolve_model(self) -> str:
        """Return the configured model, auto-selecting one if unset."""
        if self._model:
            return self._model

        models = self._client.list_models()
        if not models:
            raise ProviderRequestFailed(
                "No Ollama models installed. Run 'ollama pull <model>' to install one."
            )

        self._model = models[0]
        logger.info("No Ollama model configured, auto-selected '%s'", self._model)
        if self._on_model_selected is not None:
            self._on_model_selected(self._model)
        return self._model


class OllamaTextRecognizer:
    """Text recognition through a local vision model (e.g. LLaVA).

    Args:
        client: The :class:`OllamaClient` to use.
        model: Vision model name.
    """

    name = PROVIDER_NAME

    def __init__(self, client: OllamaClient, model: str) -> None:
        self._client = client
        self._model = model

    def recognize_text(self, image: Image.Image) -> str:
        encoded = encode_image(image)
        payload = {
            "model": self._model,
            "prompt": OCR_INSTRUCTION,
            "images": [encoded],
            "stream": False,
        }

        logger.info("Recognizing text with Ollama vision model '%s'", self._model)
        response = self._client.generate(payload, timeout=VISION_TIMEOUT)

        if not 200 <= response.status_code < 300:
            raise OcrFailed(
                f"Ollama error ({response.status_code}): {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise OcrFailed("Failed to parse Ollama response") from exc

        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise OcrFailed("Failed to parse Ollama response")

        return text.strip()


def encode_image(image: Image.Image) -> str:
    """Encode *image* as base64 PNG, falling back to JPEG when too large.

    Raises:
        OcrFailed: If the image cannot be encoded.
    """
    try:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        data = buffer.getvalue()

        if len(data) > MAX_IMAGE_BYTES:
            logger.warning("PNG is %d bytes, re-encoding as JPEG", len(data))
            buffer = io.BytesIO()
            image.convert("RGB").save(buffer, format="JPEG", quality=85, optimize=True)
            data = buffer.getvalue()
    except (OSError, ValueError) as exc:
        raise OcrFailed(f"Failed to convert image: {exc}") from exc

    return base64.b64encode(data).decode("ascii")
