"""HTTP helpers shared by the model backends.

Wraps :mod:`requests` so every backend reports failures the same way:
transport problems (refused connection, DNS, timeout) become
:class:`~screencal.exceptions.ProviderUnreachable`, and non-2xx answers
surface the vendor's own error message when the body carries one.
No request is ever retried.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from screencal.exceptions import ProviderRequestFailed, ProviderUnreachable

logger = logging.getLogger(__name__)


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    provider: str,
    timeout: float,
    **kwargs: Any,
) -> requests.Response:
    """Send a request, mapping transport failures to ``ProviderUnreachable``.

    Args:
        session: Session used to send the request.
        method: HTTP method (``"GET"``, ``"POST"``).
        url: Absolute URL.
        provider: Display name used in error messages.
        timeout: Seconds before the request is abandoned.
        **kwargs: Passed through to :meth:`requests.Session.request`.

    Returns:
        The response, whatever its status code.

    Raises:
        ProviderUnreachable: On connection errors and timeouts.
    """
    logger.debug("%s %s (provider=%s, timeout=%ss)", method, url, provider, timeout)
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except (requests.ConnectionError, requests.Timeout) as exc:
        logger.error("%s unreachable at %s: %s", provider, url, exc)
        raise ProviderUnreachable(provider, str(exc)) from exc
    except requests.RequestException as exc:
        logger.error("%s request to %s failed: %s", provider, url, exc)
        raise ProviderUnreachable(provider, str(exc)) from exc

    logger.debug("%s answered HTTP %s", provider, response.status_code)
    return response


def vendor_error_message(response: requests.Response) -> str | None:
    """Return ``error.message`` from a JSON error body, if present.

    OpenAI and Anthropic both answer errors with
    ``{"error": {"message": "..."}}``; the local host answers
    ``{"error": "..."}``.  Both shapes are recognised.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    elif isinstance(error, str) and error.strip():
        return error.strip()
    return None


def ensure_success(response: requests.Response, provider: str) -> None:
    """Raise ``ProviderRequestFailed`` unless *response* is 2xx.

    Raises:
        ProviderRequestFailed: With the vendor's message when present,
            else ``"<provider> error (<status>)"``.
    """
    if 200 <= response.status_code < 300:
        return

    message = vendor_error_message(response)
    if message:
        detail = f"{provider} error: {message}"
    else:
        detail = f"{provider} error ({response.status_code})"
    logger.error("%s returned HTTP %s: %s", provider, response.status_code, detail)
    raise ProviderRequestFailed(detail, status_code=response.status_code)


def json_body(response: requests.Response, provider: str) -> dict[str, Any]:
    """Decode a successful response body as a JSON object.

    Raises:
        ProviderRequestFailed: If the body is not a JSON object.
    """
    try:
        body = response.json()
    except ValueError as exc:
        raise ProviderRequestFailed(f"Failed to parse {provider} response") from exc
    if not isinstance(body, dict):
        raise ProviderRequestFailed(f"Failed to parse {provider} response")
    return body
