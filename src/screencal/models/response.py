"""Intermediate structure decoded from a model reply.

:class:`ProviderResponse` mirrors the superset of fields any backend may
return.  Every field is optional: absence is expected and is handled by the
normalizer, which decides what is required.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ProviderResponse(BaseModel):
    """Loosely-typed event fields as returned by a model.

    Unknown keys (commentary fields some models add) are ignored.

    Attributes:
        title: Event title.
        date: Date string, expected as ``YYYY-MM-DD``.
        start_time: Start time string, expected as ``HH:MM`` (24h).
        end_time: End time string, expected as ``HH:MM`` (24h).
        location: Event location.
        notes: Additional details.
        is_all_day: Explicit all-day flag.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None
    notes: str | None = None
    is_all_day: bool | None = None
