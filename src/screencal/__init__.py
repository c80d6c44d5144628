"""screencal: Screenshot-and-text to calendar event extraction.

Turns free-form text, or the text recognized in a screenshot, into a
structured calendar event with a local or hosted language model, and
commits it to a calendar store after review.
"""

from __future__ import annotations

from screencal.exceptions import ScreenCalError
from screencal.models.event import EventRecord
from screencal.models.response import ProviderResponse
from screencal.normalizer import parse_provider_output
from screencal.pipeline import (
    CommitResult,
    ExtractionOrchestrator,
    PipelineResult,
    PipelineState,
)
from screencal.prompts import build_event_prompt

__version__ = "0.1.0"

__all__ = [
    "CommitResult",
    "EventRecord",
    "ExtractionOrchestrator",
    "PipelineResult",
    "PipelineState",
    "ProviderResponse",
    "ScreenCalError",
    "build_event_prompt",
    "parse_provider_output",
]
