"""Shared test fixtures for daylog."""

import os
import tempfile

import pytest

from daylog.journal.memory_store import InMemoryEntryStore


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "cache_dir": os.path.join(tmp_dir, "cache"),
        },
        "sync": {"debounce_ms": 50},
        "store": {"backend": "memory"},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def store():
    """Empty in-memory entry store."""
    return InMemoryEntryStore()


def make_row(day_key: str, **fields) -> dict:
    """A stored row for ``day_key`` with ``fields`` overriding the defaults."""
    from daylog.journal.models import DailyRecord

    row = DailyRecord.default(day_key).to_payload()
    row.update(streak_check=False)
    row.update(fields)
    return row


@pytest.fixture
def row_factory():
    return make_row
