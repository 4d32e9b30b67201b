"""Tests for the PostgREST entry store."""

import io
import json
import urllib.error
import urllib.parse
from unittest.mock import patch

import pytest

from daylog.core.config import Config
from daylog.core.exceptions import ConfigurationError, SecretNotFoundError, TransportError
from daylog.core.secrets import SecretsManager
from daylog.journal.rest_store import RestEntryStore, build_query_params
from daylog.journal.store import EntryStore, FilterOp, RecordQuery


class _DummyResp:
    def __init__(self, payload: object):
        self._payload = json.dumps(payload).encode("utf-8")

    def read(self):
        return self._payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class _DictProvider:
    def __init__(self, data):
        self._data = data

    def get(self, key, default=None):
        return self._data.get(key, default)


def _store():
    return RestEntryStore("https://example.supabase.co/", "anon-key", access_token="user-jwt")


def _query_pairs(req):
    return urllib.parse.parse_qsl(urllib.parse.urlsplit(req.full_url).query)


def test_requires_url_and_key():
    with pytest.raises(ConfigurationError):
        RestEntryStore("", "k")
    with pytest.raises(ConfigurationError):
        RestEntryStore("https://example.supabase.co", "")


def test_satisfies_protocol():
    assert isinstance(_store(), EntryStore)


def test_build_query_params():
    query = (
        RecordQuery()
        .select("date", "streak_check")
        .where("streak_check", True)
        .where("date", "2026-01-05", FilterOp.LT)
        .not_null("current_weight")
        .order("date", descending=True)
        .take(100)
    )
    assert build_query_params(query) == [
        ("select", "date,streak_check"),
        ("streak_check", "eq.true"),
        ("date", "lt.2026-01-05"),
        ("current_weight", "not.is.null"),
        ("order", "date.desc"),
        ("limit", "100"),
    ]


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_get_sends_point_lookup(mock_urlopen):
    mock_urlopen.return_value = _DummyResp([{"date": "2026-01-05", "running": True}])

    row = await _store().get("2026-01-05")

    assert row == {"date": "2026-01-05", "running": True}
    req = mock_urlopen.call_args[0][0]
    assert req.get_method() == "GET"
    assert req.full_url.startswith("https://example.supabase.co/rest/v1/daily_entries?")
    assert ("date", "eq.2026-01-05") in _query_pairs(req)
    assert req.get_header("Apikey") == "anon-key"
    assert req.get_header("Authorization") == "Bearer user-jwt"


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_get_missing_is_none(mock_urlopen):
    mock_urlopen.return_value = _DummyResp([])
    assert await _store().get("2026-01-05") is None


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_upsert_merges_on_date(mock_urlopen):
    mock_urlopen.return_value = _DummyResp([{"id": "r1", "date": "2026-01-05", "streak_check": True}])

    row = await _store().upsert({"date": "2026-01-05", "streak_check": True})

    assert row["id"] == "r1"
    req = mock_urlopen.call_args[0][0]
    assert req.get_method() == "POST"
    assert ("on_conflict", "date") in _query_pairs(req)
    assert "merge-duplicates" in req.get_header("Prefer")
    assert json.loads(req.data.decode("utf-8")) == {"date": "2026-01-05", "streak_check": True}


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_upsert_empty_response_is_transport_error(mock_urlopen):
    mock_urlopen.return_value = _DummyResp([])
    with pytest.raises(TransportError, match="no row"):
        await _store().upsert({"date": "2026-01-05"})


async def test_upsert_requires_date():
    with pytest.raises(ValueError):
        await _store().upsert({"note": "orphan"})


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_http_error_message_is_surfaced(mock_urlopen):
    body = io.BytesIO(json.dumps({"message": "JWT expired"}).encode("utf-8"))
    mock_urlopen.side_effect = urllib.error.HTTPError("https://x", 401, "Unauthorized", {}, body)

    with pytest.raises(TransportError, match="401: JWT expired"):
        await _store().query(RecordQuery())


@patch("daylog.journal.rest_store.urllib.request.urlopen")
async def test_network_error_is_transport_error(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.URLError("connection refused")
    with pytest.raises(TransportError, match="connection refused"):
        await _store().get("2026-01-05")


def test_from_config(tmp_dir, monkeypatch):
    monkeypatch.setenv("DAYLOG_STORE__URL", "https://example.supabase.co")
    secrets = SecretsManager(providers=[_DictProvider({"store.api_key": "anon-key"})])

    store = RestEntryStore.from_config(Config(data_dir=tmp_dir), secrets)

    assert store.base_url == "https://example.supabase.co"
    assert store.table == "daily_entries"
    assert store.access_token == "anon-key"


def test_from_config_missing_key(tmp_dir):
    with pytest.raises(SecretNotFoundError):
        RestEntryStore.from_config(Config(data_dir=tmp_dir), SecretsManager(providers=[_DictProvider({})]))
