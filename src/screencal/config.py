"""Configuration loading for screencal.

Reads settings from environment variables (with .env support via
python-dotenv) into a frozen :class:`Settings` snapshot.  A snapshot is
taken once at the start of each pipeline run and passed explicitly, so a
settings change mid-run never affects the run in progress.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv, set_key

logger = logging.getLogger(__name__)

LLM_PROVIDERS: tuple[str, ...] = ("ollama", "openai", "anthropic")
OCR_PROVIDERS: tuple[str, ...] = ("tesseract", "ollama")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot for one pipeline run.

    Attributes:
        llm_provider: Active semantic-parsing provider
            (``"ollama"``, ``"openai"`` or ``"anthropic"``).
        ocr_provider: Active text-recognition provider
            (``"tesseract"`` or ``"ollama"``).
        ollama_host: Base URL of the local model host.
        ollama_model: Local text model.  Empty means "pick the first
            installed model and remember it".
        ollama_vision_model: Local vision model used for OCR.
        openai_model: OpenAI chat model identifier.
        anthropic_model: Anthropic messages model identifier.
        default_calendar_id: Calendar used when an event names none.
        default_event_duration: Minutes added to a start time when the
            model gave no end time.
        custom_prompt_context: Free-form text appended to every prompt.
        show_notifications: Whether to notify after a successful commit.
        ocr_languages: Tesseract language hint list (``+``-separated).
        log_level: Logging level (default ``"INFO"``).
        google_credentials_path: OAuth client secrets file.
        google_token_path: Cached OAuth token file.
    """

    llm_provider: str = "ollama"
    ocr_provider: str = "tesseract"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = ""
    ollama_vision_model: str = "llava"
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-5-sonnet-latest"
    default_calendar_id: str | None = None
    default_event_duration: int = 60
    custom_prompt_context: str = ""
    show_notifications: bool = True
    ocr_languages: str = "eng+fra+deu+spa+ita"
    log_level: str = "INFO"
    google_credentials_path: str = "credentials.json"
    google_token_path: str = "token.json"


# Environment variable -> Settings field, for plain string values.
_STRING_VARS: dict[str, str] = {
    "OLLAMA_HOST": "ollama_host",
    "OLLAMA_MODEL": "ollama_model",
    "OLLAMA_VISION_MODEL": "ollama_vision_model",
    "OPENAI_MODEL": "openai_model",
    "ANTHROPIC_MODEL": "anthropic_model",
    "DEFAULT_CALENDAR_ID": "default_calendar_id",
    "OCR_LANGUAGES": "ocr_languages",
    "LOG_LEVEL": "log_level",
    "GOOGLE_CREDENTIALS_PATH": "google_credentials_path",
    "GOOGLE_TOKEN_PATH": "google_token_path",
}


def load_settings() -> Settings:
    """Load and validate a settings snapshot from the environment.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.  Unset or blank variables fall back to the
    :class:`Settings` defaults.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any variable holds an invalid value.  The message
            names **all** offending variables.
    """
    load_dotenv()

    values: dict[str, object] = {}
    errors: list[str] = []

    llm_provider = _read("SCREENCAL_LLM_PROVIDER").lower()
    if llm_provider:
        if llm_provider in LLM_PROVIDERS:
            values["llm_provider"] = llm_provider
        else:
            errors.append(
                f"SCREENCAL_LLM_PROVIDER must be one of {', '.join(LLM_PROVIDERS)}"
            )

    ocr_provider = _read("SCREENCAL_OCR_PROVIDER").lower()
    if ocr_provider:
        if ocr_provider in OCR_PROVIDERS:
            values["ocr_provider"] = ocr_provider
        else:
            errors.append(
                f"SCREENCAL_OCR_PROVIDER must be one of {', '.join(OCR_PROVIDERS)}"
            )

    for env_var, field_name in _STRING_VARS.items():
        raw = _read(env_var)
        if raw:
            values[field_name] = raw

    duration = _read("DEFAULT_EVENT_DURATION")
    if duration:
        try:
            minutes = int(duration)
        except ValueError:
            minutes = 0
        if minutes > 0:
            values["default_event_duration"] = minutes
        else:
            errors.append("DEFAULT_EVENT_DURATION must be a positive integer")

    notifications = _read("SHOW_NOTIFICATIONS").lower()
    if notifications:
        if notifications in _TRUE_VALUES:
            values["show_notifications"] = True
        elif notifications in _FALSE_VALUES:
            values["show_notifications"] = False
        else:
            errors.append("SHOW_NOTIFICATIONS must be a boolean")

    context = os.environ.get("CUSTOM_PROMPT_CONTEXT", "")
    if context.strip():
        values["custom_prompt_context"] = context

    if errors:
        raise ConfigError("Invalid configuration: " + "; ".join(errors))

    return Settings(**values)  # type: ignore[arg-type]


def persist_setting(key: str, value: str, env_path: Path | str | None = None) -> None:
    """Write *value* for *key* to the ``.env`` file and the process env.

    Used for settings the application chooses on the user's behalf, such as
    the auto-selected local model.  The next :func:`load_settings` call
    sees the new value; snapshots already taken are unaffected.

    Args:
        key: Environment variable name (e.g. ``"OLLAMA_MODEL"``).
        value: Value to store.
        env_path: ``.env`` file to update.  Defaults to the file
            :func:`dotenv.find_dotenv` locates, or ``.env`` in the working
            directory when none exists yet.
    """
    path = Path(env_path) if env_path is not None else Path(find_dotenv() or ".env")
    path.touch(exist_ok=True)
    set_key(str(path), key, value)
    os.environ[key] = value
    logger.info("Persisted %s=%s to %s", key, value, path)


def _read(env_var: str) -> str:
    return os.environ.get(env_var, "").strip()
