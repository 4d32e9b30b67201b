"""PostgREST (Supabase) EntryStore.

Talks to the ``daily_entries`` table through the REST API with
``apikey`` + bearer auth. Requests are plain ``urllib`` calls run on the
event loop's default executor, so the async API never blocks the loop.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request
from functools import partial
from typing import Any

from loguru import logger

from daylog.core.exceptions import ConfigurationError, TransportError

from .store import FilterOp, RecordQuery, Row

DEFAULT_TABLE = "daily_entries"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(query: RecordQuery) -> list[tuple[str, str]]:
    """Translate a RecordQuery into PostgREST query-string pairs."""
    params: list[tuple[str, str]] = [("select", ",".join(query.columns) if query.columns else "*")]
    for f in query.filters:
        if f.op is FilterOp.NOT_NULL:
            params.append((f.column, "not.is.null"))
        else:
            params.append((f.column, f"{f.op.value}.{_format_value(f.value)}"))
    direction = "desc" if query.descending else "asc"
    params.append(("order", f"{query.order_by}.{direction}"))
    if query.limit is not None:
        params.append(("limit", str(query.limit)))
    return params


class RestEntryStore:
    """Small PostgREST client centered on one journal table."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = DEFAULT_TABLE,
        timeout: int = 20,
        access_token: str | None = None,
    ):
        if not base_url or not api_key:
            raise ConfigurationError("base_url and api_key are required for the REST entry store")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token or api_key
        self.table = table
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, secrets) -> RestEntryStore:
        return cls(
            base_url=config.get("store.url", ""),
            api_key=secrets.require("store.api_key"),
            table=config.get("store.table", DEFAULT_TABLE),
            timeout=config.get_int("store.timeout", 20),
            access_token=secrets.get("store.access_token"),
        )

    def _request(
        self,
        method: str,
        *,
        params: list[tuple[str, str]] | None = None,
        payload: Any = None,
        prefer: str | None = None,
    ) -> Any:
        url = f"{self.base_url}/rest/v1/{self.table}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"

        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(url=url, method=method.upper(), data=data, headers=headers)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="ignore") if hasattr(e, "read") else ""
            raise TransportError(f"Entry store {e.code}: {_error_message(body) or e.reason}") from e
        except urllib.error.URLError as e:
            raise TransportError(f"Entry store request failed: {e.reason}") from e
        except TimeoutError as e:
            raise TransportError(f"Entry store request timed out after {self.timeout}s") from e

        if not raw:
            return []
        return json.loads(raw.decode("utf-8", errors="ignore"))

    async def _call(self, method: str, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._request, method, **kwargs))

    # ── EntryStore ─────────────────────────────────────────────────

    async def get(self, day_key: str) -> Row | None:
        rows = await self._call("GET", params=[("select", "*"), ("date", f"eq.{day_key}"), ("limit", "1")])
        return rows[0] if rows else None

    async def upsert(self, payload: Row) -> Row:
        if not payload.get("date"):
            raise ValueError("upsert payload must include 'date'")
        rows = await self._call(
            "POST",
            params=[("on_conflict", "date")],
            payload=payload,
            prefer="resolution=merge-duplicates,return=representation",
        )
        if not rows:
            raise TransportError(f"Entry store returned no row for upsert of {payload['date']}")
        logger.debug(f"Upserted {payload['date']} ({len(payload) - 1} field(s))")
        return rows[0]

    async def query(self, query: RecordQuery) -> list[Row]:
        rows = await self._call("GET", params=build_query_params(query))
        return rows if isinstance(rows, list) else []


def _error_message(body: str) -> str:
    """Pull ``message`` out of a PostgREST JSON error body when present."""
    if not body:
        return ""
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or body)
    return body
