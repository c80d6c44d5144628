"""Data models for screencal."""

from __future__ import annotations

from screencal.models.event import EventRecord
from screencal.models.response import ProviderResponse

__all__ = [
    "EventRecord",
    "ProviderResponse",
]
