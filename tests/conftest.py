"""Shared fixtures for screencal tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

_SCREENCAL_VARS = (
    "SCREENCAL_LLM_PROVIDER",
    "SCREENCAL_OCR_PROVIDER",
    "OLLAMA_HOST",
    "OLLAMA_MODEL",
    "OLLAMA_VISION_MODEL",
    "OPENAI_MODEL",
    "ANTHROPIC_MODEL",
    "DEFAULT_CALENDAR_ID",
    "DEFAULT_EVENT_DURATION",
    "CUSTOM_PROMPT_CONTEXT",
    "SHOW_NOTIFICATIONS",
    "OCR_LANGUAGES",
    "LOG_LEVEL",
    "GOOGLE_CREDENTIALS_PATH",
    "GOOGLE_TOKEN_PATH",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all screencal-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("screencal.config.load_dotenv", lambda *_a, **_kw: None)
    monkeypatch.setattr("screencal.keystore.load_dotenv", lambda *_a, **_kw: None)
    for key in _SCREENCAL_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def monkeypatch_env(clean_env: None, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set a representative configuration in the environment.

    Returns the dict of variables so tests can inspect or override values.
    """
    env_vars = {
        "SCREENCAL_LLM_PROVIDER": "openai",
        "OPENAI_MODEL": "gpt-4o-mini",
        "OPENAI_API_KEY": "sk-test-12345",
        "ANTHROPIC_API_KEY": "sk-ant-test-12345",
        "DEFAULT_CALENDAR_ID": "work",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
