"""
Dependency-injected secrets management.

Secrets are resolved through a chain of providers. Each provider implements
the SecretProvider protocol. The SecretsManager checks providers in order,
returning the first non-None result.

Usage:
    from daylog.core.secrets import SecretsManager, EnvProvider, YamlFileProvider

    manager = SecretsManager(providers=[
        EnvProvider("DAYLOG_"),
        YamlFileProvider("~/.daylog/secrets.yaml"),
    ])

    api_key = manager.get("store.api_key")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from loguru import logger

from daylog.core.exceptions import SecretNotFoundError


@runtime_checkable
class SecretProvider(Protocol):
    """Interface for secret providers. Implement this to add new secret sources."""

    def get(self, key_path: str) -> str | None:
        """Return a secret value for the given dot-notation key, or None."""
        ...


class EnvProvider:
    """
    Read secrets from environment variables.

    Maps dot-notation keys to env vars:
        "store.api_key" -> PREFIX_STORE__API_KEY
    """

    def __init__(self, prefix: str = "DAYLOG_"):
        self.prefix = prefix

    def get(self, key_path: str) -> str | None:
        env_key = self.prefix + key_path.replace(".", "__").upper()
        return os.environ.get(env_key)


class YamlFileProvider:
    """
    Read secrets from a YAML file.

    Expected format:
        store:
          api_key: "eyJhbGciOi..."
    """

    def __init__(self, path: str | Path):
        self._path = Path(path).expanduser()
        self._data: dict | None = None

    def _load(self) -> dict:
        if self._data is None:
            if self._path.exists():
                try:
                    with open(self._path) as f:
                        self._data = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Could not load secrets from {self._path}: {e}")
                    self._data = {}
            else:
                self._data = {}
        return self._data

    def get(self, key_path: str) -> str | None:
        current: Any = self._load()
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return str(current) if current is not None else None


class SecretsManager:
    """
    Chain-of-responsibility secrets manager.

    Queries providers in order, returning the first non-None result.
    """

    def __init__(self, providers: list[SecretProvider] | None = None):
        self._providers: list[SecretProvider] = providers or [EnvProvider()]

    def get(self, key_path: str, default: str | None = None) -> str | None:
        for provider in self._providers:
            value = provider.get(key_path)
            if value is not None:
                return value
        return default

    def require(self, key_path: str) -> str:
        """Get a secret, raising SecretNotFoundError if not found."""
        value = self.get(key_path)
        if value is None:
            providers_desc = ", ".join(type(p).__name__ for p in self._providers)
            raise SecretNotFoundError(f"Secret '{key_path}' not found in providers: [{providers_desc}]")
        return value
