"""Tests for daylog.core.config."""

import os

import pytest
import yaml

from daylog.core.config import Config, get_config, reset_config
from daylog.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _reset_singleton():
    """Reset config singleton between tests."""
    reset_config()
    yield
    reset_config()


class TestConfig:
    def test_defaults(self):
        config = Config()
        data_dir = config.get("paths.data_dir")
        assert data_dir.endswith(".daylog")
        assert config.get("store.backend") == "memory"
        assert config.get("sync.debounce_ms") == 800
        assert config.get("streak.lookback") == 100
        assert config.get("streak.restore_min_gap") == 2
        assert config.get("streak.restore_max_gap") == 3

    def test_custom_data_dir(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("paths.data_dir") == tmp_dir
        assert config.get("paths.cache_dir") == os.path.join(tmp_dir, "cache")

    def test_custom_env_prefix(self, monkeypatch, tmp_dir):
        monkeypatch.setenv("MYAPP_STORE__BACKEND", "rest")
        config = Config(env_prefix="MYAPP_", data_dir=tmp_dir)
        assert config.get("store.backend") == "rest"

    def test_yaml_config_file(self, tmp_config_file, tmp_dir):
        config = Config(config_file=tmp_config_file, data_dir=tmp_dir)
        assert config.get("sync.debounce_ms") == 50
        assert config.get("streak.lookback") == 100

    def test_env_overrides_file(self, tmp_config_file, tmp_dir, monkeypatch):
        monkeypatch.setenv("DAYLOG_SYNC__DEBOUNCE_MS", "250")
        config = Config(config_file=tmp_config_file, data_dir=tmp_dir)
        assert config.get("sync.debounce_ms") == "250"
        assert config.get_int("sync.debounce_ms") == 250

    def test_json_config_file(self, tmp_dir):
        import json

        config_path = os.path.join(tmp_dir, "config.json")
        with open(config_path, "w") as f:
            json.dump({"store": {"table": "entries_v2"}}, f)

        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("store.table") == "entries_v2"
        assert config.get("store.timeout") == 20

    def test_get_missing_key(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"

    def test_get_float(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("DAYLOG_SYNC__DEBOUNCE_MS", "12.5")
        config = Config(data_dir=tmp_dir)
        assert config.get_float("sync.debounce_ms") == 12.5

    def test_bad_number_raises(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("DAYLOG_STREAK__LOOKBACK", "lots")
        config = Config(data_dir=tmp_dir)
        with pytest.raises(ConfigurationError, match=r"streak\.lookback"):
            config.get_int("streak.lookback")

    def test_set(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("custom.nested.value", 42)
        assert config.get("custom.nested.value") == 42

    def test_get_data_dir(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get_data_dir() == tmp_dir

    def test_ensure_directories(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.ensure_directories()
        assert os.path.isdir(os.path.join(tmp_dir, "cache"))
        assert os.path.isdir(os.path.join(tmp_dir, "logs"))

    def test_extra_defaults(self, tmp_dir):
        config = Config(data_dir=tmp_dir, defaults={"custom": {"key": "value"}})
        assert config.get("custom.key") == "value"

    def test_file_merges_into_nested_defaults(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"streak": {"restore_max_gap": 4}}, f)

        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("streak.restore_max_gap") == 4
        assert config.get("streak.restore_min_gap") == 2


class TestGetConfig:
    def test_singleton(self, tmp_dir):
        c1 = get_config(data_dir=tmp_dir)
        c2 = get_config()
        assert c1 is c2

    def test_reset_clears_singleton(self, tmp_dir):
        c1 = get_config(data_dir=tmp_dir)
        reset_config()
        c2 = get_config(data_dir=tmp_dir)
        assert c1 is not c2
