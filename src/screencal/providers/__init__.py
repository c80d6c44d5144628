"""Text-recognition and semantic-parsing backends for screencal."""

from __future__ import annotations

from screencal.providers.anthropic import AnthropicEventParser
from screencal.providers.base import EventParsingProvider, TextRecognitionProvider
from screencal.providers.factory import get_event_parser, get_text_recognizer
from screencal.providers.ollama import OllamaClient, OllamaEventParser, OllamaTextRecognizer
from screencal.providers.openai import OpenAIEventParser
from screencal.providers.tesseract import TesseractTextRecognizer

__all__ = [
    "AnthropicEventParser",
    "EventParsingProvider",
    "OllamaClient",
    "OllamaEventParser",
    "OllamaTextRecognizer",
    "OpenAIEventParser",
    "TesseractTextRecognizer",
    "TextRecognitionProvider",
    "get_event_parser",
    "get_text_recognizer",
]
