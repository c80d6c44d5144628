"""Credential lookup for the remote model vendors.

The pipeline only ever asks for a key by provider name.  The default
:class:`EnvSecretStore` reads keys from the environment (and ``.env``);
a keychain-backed store can be swapped in by implementing
:class:`SecretStore`.
"""

from __future__ import annotations

import os
from typing import Protocol

from dotenv import load_dotenv

_ENV_KEYS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class SecretStore(Protocol):
    """Per-vendor credential lookup."""

    def get_api_key(self, provider: str) -> str | None:
        """Return the key for *provider*, or ``None`` when absent."""
        ...


class EnvSecretStore:
    """Reads ``OPENAI_API_KEY`` / ``ANTHROPIC_API_KEY`` from the environment."""

    def __init__(self) -> None:
        load_dotenv()

    def get_api_key(self, provider: str) -> str | None:
        env_var = _ENV_KEYS.get(provider.lower())
        if env_var is None:
            return None
        value = os.environ.get(env_var, "").strip()
        return value or None

    def __repr__(self) -> str:
        return "EnvSecretStore(keys='***')"
