"""Extraction orchestrator for the text/screenshot-to-calendar workflow.

:class:`ExtractionOrchestrator` runs one extraction at a time::

    IDLE -> CAPTURING -> RECOGNIZING (image only) -> PARSING -> READY | FAILED

A trigger that arrives while the orchestrator is not ``IDLE`` is rejected,
not queued.  A failed run records its error, reports a user message and
returns to ``IDLE``.  A successful run stays ``READY`` until the user
accepts (commits) or discards the event.

Settings are read once at the start of each run; the snapshot decides
which backends are used and is kept for that run's commit.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from screencal.calendar.service import CalendarCommitService
from screencal.calendar.store import CalendarStore
from screencal.config import ConfigError, Settings, load_settings, persist_setting
from screencal.exceptions import (
    NoTextFound,
    NoTextInClipboard,
    ScreenCalError,
    ScreenshotFailed,
)
from screencal.keystore import EnvSecretStore, SecretStore
from screencal.models.event import EventRecord
from screencal.notifications import DesktopNotifier, Notifier
from screencal.providers.factory import get_event_parser, get_text_recognizer

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Lifecycle of one extraction run."""

    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    PARSING = "parsing"
    READY = "ready"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one extraction run.

    Attributes:
        state: ``READY`` on success, ``FAILED`` otherwise.
        record: The extracted event when ``READY``.
        error: The failure when ``FAILED``.
        message: User-facing error message when ``FAILED``.
        source_text: The text that was parsed, if capture got that far.
        duration_seconds: Wall-clock time of the run.
    """

    state: PipelineState
    record: EventRecord | None = None
    error: Exception | None = None
    message: str | None = None
    source_text: str | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.READY


@dataclass(frozen=True)
class CommitResult:
    """Outcome of committing the ready event.

    Attributes:
        success: Whether the store saved the event.
        event_id: Store-assigned identifier on success.
        error: The failure otherwise.
        message: User-facing error message otherwise.
    """

    success: bool
    event_id: str | None = None
    error: Exception | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ExtractionOrchestrator:
    """Sequences capture, recognition, parsing and commit.

    Args:
        store: Calendar store used when an event is accepted.
        secrets: Credential lookup for the remote vendors.  Defaults to
            :class:`EnvSecretStore`.
        settings_loader: Returns a fresh settings snapshot.  Called once
            per run.
        notifier: Notifier for successful commits.  Defaults to
            :class:`DesktopNotifier`; only used when the snapshot enables
            notifications.
        on_ready: Presentation callback receiving the extracted event.
        on_error: Presentation callback receiving a user message.
        on_model_selected: Called when the local backend auto-selects a
            model.  Defaults to saving it as ``OLLAMA_MODEL``.
        parser_factory: Builds the parsing backend from a snapshot.
        recognizer_factory: Builds the recognition backend from a snapshot.
    """

    def __init__(
        self,
        store: CalendarStore,
        secrets: SecretStore | None = None,
        settings_loader: Callable[[], Settings] = load_settings,
        notifier: Notifier | None = None,
        on_ready: Callable[[EventRecord], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_model_selected: Callable[[str], None] | None = None,
        parser_factory: Callable[..., object] = get_event_parser,
        recognizer_factory: Callable[..., object] = get_text_recognizer,
    ) -> None:
        self._store = store
        self._secrets = secrets or EnvSecretStore()
        self._settings_loader = settings_loader
        self._notifier = notifier or DesktopNotifier()
        self._on_ready = on_ready
        self._on_error = on_error
        self._on_model_selected = on_model_selected or _remember_model
        self._parser_factory = parser_factory
        self._recognizer_factory = recognizer_factory

        self._lock = threading.Lock()
        self._state = PipelineState.IDLE
        self._processing_message: str | None = None
        self._settings: Settings | None = None
        self._current_record: EventRecord | None = None
        self._last_error: Exception | None = None
        self._committing = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_processing(self) -> bool:
        """Whether a run is between capture and parse."""
        return self._state in (
            PipelineState.CAPTURING,
            PipelineState.RECOGNIZING,
            PipelineState.PARSING,
        )

    @property
    def processing_message(self) -> str | None:
        return self._processing_message

    @property
    def current_record(self) -> EventRecord | None:
        return self._current_record

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def process_text(self, capture: Callable[[], str | None]) -> PipelineResult | None:
        """Capture text and extract an event from it.

        Args:
            capture: Returns the captured text (e.g. clipboard contents),
                or ``None`` when there is nothing to read.

        Returns:
            The run's result, or ``None`` if the trigger was rejected
            because another run is in flight or awaiting review.
        """
        if not self._begin():
            return None

        def run() -> str:
            self._enter(PipelineState.CAPTURING, "Reading input...")
            text = capture()
            if text is None or not text.strip():
                raise NoTextInClipboard()
            return text

        return self._run(run)

    def process_image(
        self, capture: Callable[[], Image.Image | None]
    ) -> PipelineResult | None:
        """Capture an image, recognize its text and extract an event.

        Args:
            capture: Returns the captured image, or ``None`` when the
                capture was cancelled or failed.

        Returns:
            The run's result, or ``None`` if the trigger was rejected.
        """
        if not self._begin():
            return None

        def run() -> str:
            self._enter(PipelineState.CAPTURING, "Capturing screen...")
            image = capture()
            if image is None:
                raise ScreenshotFailed()

            self._enter(PipelineState.RECOGNIZING, "Extracting text (OCR)...")
            recognizer = self._recognizer_factory(self._settings)
            text = recognizer.recognize_text(image)
            if not text.strip():
                raise NoTextFound()
            return text

        return self._run(run)

    # ------------------------------------------------------------------
    # Review outcome
    # ------------------------------------------------------------------

    def accept(self, record: EventRecord | None = None) -> CommitResult | None:
        """Commit the ready event and return to ``IDLE`` on success.

        Args:
            record: The event as edited by the user.  Defaults to the
                extracted event.

        Returns:
            The commit outcome, or ``None`` when no event is ready or a
            commit is already running.  On failure the orchestrator stays
            ``READY`` so the user can edit and try again, or discard.
        """
        with self._lock:
            if self._state is not PipelineState.READY:
                logger.warning("accept() called in state %s, ignoring", self._state.value)
                return None
            if self._committing:
                logger.warning("accept() called while a commit is running, ignoring")
                return None
            record = record or self._current_record
            if record is None:
                return None
            settings = self._settings or Settings()
            self._committing = True

        try:
            return self._commit(record, settings)
        finally:
            with self._lock:
                self._committing = False

    def discard(self) -> None:
        """Drop the ready event (or clear a stale state) and go ``IDLE``."""
        with self._lock:
            if self.is_processing or self._committing:
                logger.warning("discard() called while processing, ignoring")
                return
        logger.info("Event discarded")
        self._reset()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self) -> bool:
        """Claim the orchestrator for a new run.  ``False`` if busy."""
        with self._lock:
            if self._state is not PipelineState.IDLE:
                logger.info(
                    "Trigger rejected: pipeline is %s", self._state.value
                )
                return False
            self._state = PipelineState.CAPTURING
            self._last_error = None
            self._current_record = None
            self._settings = None
            return True

    def _enter(self, state: PipelineState, message: str) -> None:
        with self._lock:
            self._state = state
            self._processing_message = message
        logger.info("%s", message)

    def _run(self, acquire_text: Callable[[], str]) -> PipelineResult:
        """Run a claimed pipeline: acquire text, parse, settle the state."""
        started = time.monotonic()
        source_text: str | None = None

        try:
            self._settings = self._settings_loader()
            source_text = acquire_text()

            self._enter(PipelineState.PARSING, "Analyzing text...")
            parser = self._parser_factory(
                self._settings,
                self._secrets,
                on_model_selected=self._on_model_selected,
            )
            record = parser.parse_event(source_text)
        except ScreenCalError as exc:
            return self._fail(exc, exc.user_message, source_text, started)
        except ConfigError as exc:
            return self._fail(exc, str(exc), source_text, started)
        except Exception as exc:
            logger.exception("Unexpected pipeline failure")
            return self._fail(exc, f"Error: {exc}", source_text, started)

        with self._lock:
            self._state = PipelineState.READY
            self._processing_message = None
            self._current_record = record

        duration = time.monotonic() - started
        logger.info("Event ready for review: '%s' (%.1fs)", record.title, duration)
        if self._on_ready is not None:
            self._on_ready(record)

        return PipelineResult(
            state=PipelineState.READY,
            record=record,
            source_text=source_text,
            duration_seconds=duration,
        )

    def _fail(
        self,
        error: Exception,
        message: str,
        source_text: str | None,
        started: float,
    ) -> PipelineResult:
        """Record *error*, report it and return to ``IDLE``."""
        with self._lock:
            self._state = PipelineState.FAILED
            self._last_error = error
        logger.error("Pipeline failed: %s", message)
        try:
            self._report_error(message)
        finally:
            with self._lock:
                self._state = PipelineState.IDLE
                self._processing_message = None
                self._settings = None

        return PipelineResult(
            state=PipelineState.FAILED,
            error=error,
            message=message,
            source_text=source_text,
            duration_seconds=time.monotonic() - started,
        )

    def _commit(self, record: EventRecord, settings: Settings) -> CommitResult:
        """Save *record*; on failure stay ``READY`` and report the error."""
        service = CalendarCommitService(
            self._store,
            notifier=self._notifier if settings.show_notifications else None,
            default_calendar_id=settings.default_calendar_id,
        )
        try:
            event_id = service.create_event(record)
        except ScreenCalError as exc:
            return self._commit_failed(exc, exc.user_message)
        except Exception as exc:
            logger.exception("Unexpected commit failure")
            return self._commit_failed(exc, f"Error: {exc}")

        self._reset()
        return CommitResult(success=True, event_id=event_id)

    def _commit_failed(self, error: Exception, message: str) -> CommitResult:
        self._last_error = error
        self._report_error(message)
        return CommitResult(success=False, error=error, message=message)

    def _report_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)

    def _reset(self) -> None:
        with self._lock:
            self._state = PipelineState.IDLE
            self._processing_message = None
            self._current_record = None
            self._settings = None


def _remember_model(model: str) -> None:
    """Save an auto-selected local model as the new default."""
    try:
        persist_setting("OLLAMA_MODEL", model)
    except OSError as exc:
        logger.warning("Could not persist OLLAMA_MODEL=%s: %s", model, exc)
