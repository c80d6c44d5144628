"""Capabilities implemented by the recognition and parsing backends.

Backends are plain classes that satisfy one of these protocols; there is
no shared base class.  The active backend is chosen per run from the
settings snapshot by :mod:`screencal.providers.factory`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from PIL import Image

from screencal.models.event import EventRecord


@runtime_checkable
class TextRecognitionProvider(Protocol):
    """Turns an image into plain text."""

    def recognize_text(self, image: Image.Image) -> str:
        """Return the text visible in *image*.

        An empty string is a valid result; the caller decides whether it
        is fatal.

        Raises:
            OcrFailed: On conversion failure, a non-2xx answer, or a
                malformed response.
            ProviderUnreachable: If a remote backend cannot be reached.
        """
        ...


@runtime_checkable
class EventParsingProvider(Protocol):
    """Turns plain text into an :class:`EventRecord`."""

    name: str

    def parse_event(self, text: str) -> EventRecord:
        """Extract a single event from *text*.

        Raises:
            ApiKeyMissing: If the backend needs a credential that is absent.
            ProviderUnreachable: On transport failures.
            ProviderRequestFailed: On non-2xx answers.
            ResponseError: If the reply cannot be normalized.
        """
        ...
