"""Exceptions for Google Calendar API operations.

Maps ``googleapiclient`` HTTP errors onto a small hierarchy so the store
adapter can tell "not found" apart from auth and other failures.  Nothing
is retried; the commit service wraps every store failure for the user.

Exception hierarchy::

    CalendarStoreError          (base for all Calendar API errors)
    +-- CalendarAuthError       (authentication / 401 / 403 failures)
    +-- CalendarNotFoundError   (HTTP 404)
"""

from __future__ import annotations

import logging

from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)


class CalendarStoreError(Exception):
    """Base exception for Google Calendar API errors.

    Attributes:
        status_code: HTTP status code from the API, or ``None`` if the
            error did not originate from an HTTP response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CalendarAuthError(CalendarStoreError):
    """Raised when authentication or authorization fails."""

    def __init__(
        self,
        message: str = "Calendar authentication failed",
        status_code: int | None = 401,
    ) -> None:
        super().__init__(message, status_code=status_code)


class CalendarNotFoundError(CalendarStoreError):
    """Raised when a calendar resource is not found (HTTP 404)."""

    def __init__(self, message: str = "Calendar resource not found") -> None:
        super().__init__(message, status_code=404)


def classify_http_error(error: HttpError) -> CalendarStoreError:
    """Map an ``HttpError`` to the matching calendar exception.

    Args:
        error: The ``googleapiclient.errors.HttpError`` to classify.

    Returns:
        A :class:`CalendarStoreError` subclass matching the status code.
    """
    status = error.resp.status
    message = _error_reason(error)

    if status == 404:
        return CalendarNotFoundError(message)
    if status in (401, 403):
        return CalendarAuthError(message, status_code=status)
    return CalendarStoreError(message, status_code=status)


def _error_reason(error: HttpError) -> str:
    """Prefer the API's own reason text over the full ``HttpError`` repr."""
    reason = getattr(error, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    return str(error)
