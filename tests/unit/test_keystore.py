"""Tests for vendor credential lookup."""

from __future__ import annotations

import pytest

from screencal.keystore import EnvSecretStore


class TestEnvSecretStore:
    """Tests for reading keys from the environment."""

    def test_reads_vendor_keys(self, monkeypatch_env: dict[str, str]) -> None:
        store = EnvSecretStore()

        assert store.get_api_key("openai") == "sk-test-12345"
        assert store.get_api_key("Anthropic") == "sk-ant-test-12345"

    def test_missing_key_is_none(self, clean_env: None) -> None:
        assert EnvSecretStore().get_api_key("openai") is None

    def test_blank_key_is_none(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "   ")

        assert EnvSecretStore().get_api_key("openai") is None

    def test_unknown_provider_is_none(self, monkeypatch_env: dict[str, str]) -> None:
        assert EnvSecretStore().get_api_key("ollama") is None

    def test_repr_hides_keys(self, monkeypatch_env: dict[str, str]) -> None:
        assert "sk-" not in repr(EnvSecretStore())
