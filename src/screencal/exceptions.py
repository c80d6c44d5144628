"""Custom exceptions for the screencal extraction pipeline.

Every failure the pipeline can surface is a subclass of
:class:`ScreenCalError`.  Each exception carries a ``user_message`` that the
orchestrator shows to the user; nothing in the pipeline is retried
automatically.

Exception hierarchy::

    ScreenCalError
    +-- NoTextInClipboard
    +-- ScreenshotFailed
    +-- NoTextFound
    +-- OcrFailed
    +-- ApiKeyMissing
    +-- ProviderUnreachable
    +-- ProviderRequestFailed
    +-- ResponseError            (normalizer failures, carry a preview)
    |   +-- MalformedResponse
    |   +-- EmptyModelOutput
    |   +-- MissingTitle
    |   +-- MissingOrInvalidDate
    +-- CalendarAccessDenied
    +-- EventCreationFailed
"""

from __future__ import annotations

PREVIEW_LIMIT = 200
"""Maximum number of characters of raw model output kept in an error."""


def bounded_preview(text: str | None, limit: int = PREVIEW_LIMIT) -> str:
    """Return at most *limit* leading characters of *text*.

    Args:
        text: The raw text to shorten.  ``None`` yields ``""``.
        limit: Maximum length of the preview.

    Returns:
        The (possibly truncated) prefix.
    """
    if not text:
        return ""
    return text[:limit]


class ScreenCalError(Exception):
    """Base class for all pipeline failures."""

    @property
    def user_message(self) -> str:
        """Human-readable message for the presentation layer."""
        return str(self)


class NoTextInClipboard(ScreenCalError):
    """Raised when the text capture source returns nothing."""

    def __init__(self) -> None:
        super().__init__("No text found in clipboard")


class ScreenshotFailed(ScreenCalError):
    """Raised when the image capture source returns nothing."""

    def __init__(self) -> None:
        super().__init__("Failed to capture screenshot")


class NoTextFound(ScreenCalError):
    """Raised when text recognition succeeded but produced no text."""

    def __init__(self) -> None:
        super().__init__("No text found in the image")


class OcrFailed(ScreenCalError):
    """Raised when a text-recognition provider cannot produce a result.

    Attributes:
        detail: What went wrong (conversion, HTTP status, bad payload).
    """

    def __init__(self, detail: str) -> None:
        super().__init__(f"OCR failed: {detail}")
        self.detail = detail


class ApiKeyMissing(ScreenCalError):
    """Raised before any network call when a vendor credential is absent.

    Attributes:
        provider: Display name of the provider that needs the key.
    """

    def __init__(self, provider: str) -> None:
        super().__init__(f"API key missing for {provider}")
        self.provider = provider


class ProviderUnreachable(ScreenCalError):
    """Raised on transport-level failures (refused connection, timeout).

    Attributes:
        provider: Display name of the unreachable provider.
        detail: The underlying transport error text.
    """

    def __init__(self, provider: str, detail: str = "") -> None:
        message = f"{provider} is unreachable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.provider = provider
        self.detail = detail


class ProviderRequestFailed(ScreenCalError):
    """Raised when a provider answers with a non-2xx status or an
    unexpected envelope.

    Attributes:
        detail: Vendor-supplied error message, or a generic
            ``"<provider> error (<status>)"``.
        status_code: HTTP status, when there was one.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(f"Failed to parse event: {detail}")
        self.detail = detail
        self.status_code = status_code


class ResponseError(ScreenCalError):
    """Base for failures decoding a model reply.

    Attributes:
        preview: Bounded prefix of the offending text.
    """

    def __init__(self, message: str, preview: str = "") -> None:
        super().__init__(message)
        self.preview = bounded_preview(preview)


class MalformedResponse(ResponseError):
    """Raised when the model reply is not a decodable event object."""

    def __init__(self, detail: str, preview: str = "") -> None:
        super().__init__(f"Failed to decode JSON: {detail}", preview)
        self.detail = detail

    @property
    def user_message(self) -> str:
        return f"{self} Response: {self.preview}"


class EmptyModelOutput(ResponseError):
    """Raised when the model answers with an empty JSON object.

    Usually fixed by switching models rather than retrying.
    """

    def __init__(self) -> None:
        super().__init__(
            "Model returned empty response. Try a different model "
            "(reasoning models may not work well for structured extraction)."
        )


class MissingTitle(ResponseError):
    """Raised when the decoded reply has no usable ``title``."""

    def __init__(self, preview: str = "") -> None:
        super().__init__("Could not extract event title from response", preview)

    @property
    def user_message(self) -> str:
        return f"{self}: {self.preview}"


class MissingOrInvalidDate(ResponseError):
    """Raised when ``date`` is absent or not ``YYYY-MM-DD``.

    Attributes:
        received: The raw ``date`` value, or ``None``.
    """

    def __init__(self, received: str | None, preview: str = "") -> None:
        super().__init__(
            f"Could not extract event date. Got: {received!r}", preview
        )
        self.received = received

    @property
    def user_message(self) -> str:
        return f"{self} from response: {self.preview}"


class CalendarAccessDenied(ScreenCalError):
    """Raised when the calendar store refuses access.  Terminal."""

    def __init__(self) -> None:
        super().__init__(
            "Calendar access denied. Please grant permission and try again."
        )


class EventCreationFailed(ScreenCalError):
    """Raised when the calendar store cannot persist the event.

    Attributes:
        detail: The underlying store failure.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to create event: {detail}")
        self.detail = detail
