"""Select the active backends from a settings snapshot."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta

import requests

from screencal.config import Settings
from screencal.keystore import SecretStore
from screencal.providers.anthropic import AnthropicEventParser
from screencal.providers.base import EventParsingProvider, TextRecognitionProvider
from screencal.providers.ollama import OllamaClient, OllamaEventParser, OllamaTextRecognizer
from screencal.providers.openai import OpenAIEventParser
from screencal.providers.tesseract import TesseractTextRecognizer

logger = logging.getLogger(__name__)


def get_event_parser(
    settings: Settings,
    secrets: SecretStore,
    on_model_selected: Callable[[str], None] | None = None,
    session: requests.Session | None = None,
) -> EventParsingProvider:
    """Return the semantic-parsing backend named by ``settings.llm_provider``.

    Args:
        settings: The run's settings snapshot.
        secrets: Credential lookup for the remote vendors.
        on_model_selected: Forwarded to the local backend; called when it
            auto-selects a model.
        session: Optional shared :class:`requests.Session`.

    Raises:
        ValueError: If the provider name is unknown.
    """
    duration = timedelta(minutes=settings.default_event_duration)
    provider = settings.llm_provider

    if provider == "ollama":
        parser: EventParsingProvider = OllamaEventParser(
            OllamaClient(settings.ollama_host, session=session),
            model=settings.ollama_model,
            custom_context=settings.custom_prompt_context,
            default_duration=duration,
            on_model_selected=on_model_selected,
        )
    elif provider == "openai":
        parser = OpenAIEventParser(
            secrets,
            model=settings.openai_model,
            custom_context=settings.custom_prompt_context,
            default_duration=duration,
            session=session,
        )
    elif provider == "anthropic":
        parser = AnthropicEventParser(
            secrets,
            model=settings.anthropic_model,
            custom_context=settings.custom_prompt_context,
            default_duration=duration,
            session=session,
        )
    else:
        raise ValueError(f"Unknown LLM provider: {provider!r}")

    logger.debug("Selected event parser: %s", parser.name)
    return parser


def get_text_recognizer(
    settings: Settings,
    session: requests.Session | None = None,
) -> TextRecognitionProvider:
    """Return the text-recognition backend named by ``settings.ocr_provider``.

    Raises:
        ValueError: If the provider name is unknown.
    """
    provider = settings.ocr_provider

    if provider == "tesseract":
        return TesseractTextRecognizer(languages=settings.ocr_languages)
    if provider == "ollama":
        return OllamaTextRecognizer(
            OllamaClient(settings.ollama_host, session=session),
            model=settings.ollama_vision_model,
        )
    raise ValueError(f"Unknown OCR provider: {provider!r}")
