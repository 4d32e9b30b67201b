"""Shared setup logic for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from loguru import logger

DAYLOG_DIR = Path.home() / ".daylog"
CONFIG_PATH = DAYLOG_DIR / "config.yaml"
SECRETS_PATH = DAYLOG_DIR / "secrets.yaml"


def load_config(config_path: str | None = None):
    """Load config from ``config_path`` or ~/.daylog/config.yaml and set up logging."""
    from daylog.core.config import Config
    from daylog.core.utils.logging import setup_logging_from_config

    config = Config(config_file=config_path or str(CONFIG_PATH), data_dir=str(DAYLOG_DIR))
    setup_logging_from_config(config)
    return config


def load_secrets():
    """Secrets from DAYLOG_* env vars, then ~/.daylog/secrets.yaml."""
    from daylog.core.secrets import EnvProvider, SecretsManager, YamlFileProvider

    return SecretsManager(providers=[EnvProvider("DAYLOG_"), YamlFileProvider(SECRETS_PATH)])


def build_store(config, secrets) -> Any:
    """Create the entry store named by ``store.backend``."""
    backend = config.get("store.backend", "memory")
    if backend == "rest":
        from daylog.journal.rest_store import RestEntryStore

        return RestEntryStore.from_config(config, secrets)
    if backend == "memory":
        from daylog.journal.memory_store import InMemoryEntryStore

        logger.warning("Using the in-memory entry store; nothing will be persisted")
        return InMemoryEntryStore()
    raise click.ClickException(f"Unknown store backend: {backend!r} (expected 'rest' or 'memory')")


def open_store(ctx: click.Context):
    """Resolve config and store for a command invocation."""
    config = load_config(ctx.obj.get("config_path") if ctx.obj else None)
    return config, build_store(config, load_secrets())
