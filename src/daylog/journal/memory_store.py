"""In-process EntryStore.

Keeps rows in a dict keyed by DayKey with the same upsert-merge semantics as
the remote table. Used for offline work and as the test double for the
engines; ``fail_next`` / ``fail_on`` let tests inject transport failures and
``delay`` lets them hold a call open.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from datetime import UTC, datetime

from loguru import logger

from daylog.core.exceptions import TransportError

from .models import DailyRecord
from .store import RecordQuery, Row


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


class InMemoryEntryStore:
    """Dict-backed store. Each call is recorded in :attr:`calls` as ``(op, arg)``."""

    def __init__(self, rows: list[Row] | None = None, *, delay: float = 0.0):
        self._rows: dict[str, Row] = {}
        self.delay = delay
        self.calls: list[tuple[str, object]] = []
        self._fail_next: dict[str, str] = {}
        self._fail_days: dict[str, str] = {}
        for row in rows or []:
            self._put(dict(row))

    # ── Failure injection ──────────────────────────────────────────

    def fail_next(self, op: str, message: str = "store unavailable") -> None:
        """Make the next ``op`` call ("get", "upsert", "query") raise TransportError."""
        self._fail_next[op] = message

    def fail_on(self, day_key: str, message: str = "store unavailable") -> None:
        """Make every upsert for ``day_key`` raise TransportError."""
        self._fail_days[day_key] = message

    async def _enter(self, op: str, arg: object) -> None:
        self.calls.append((op, copy.deepcopy(arg)))
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        message = self._fail_next.pop(op, None)
        if message is not None:
            raise TransportError(message)

    def _put(self, payload: Row) -> Row:
        day_key = payload["date"]
        existing = self._rows.get(day_key)
        now = _now()
        if existing is None:
            row = DailyRecord.default(day_key).to_payload()
            row.update(streak_check=False, id=uuid.uuid4().hex, created_at=now)
        else:
            row = existing
        row.update(copy.deepcopy(payload))
        row["updated_at"] = now
        self._rows[day_key] = row
        return copy.deepcopy(row)

    # ── EntryStore ─────────────────────────────────────────────────

    async def get(self, day_key: str) -> Row | None:
        await self._enter("get", day_key)
        row = self._rows.get(day_key)
        return copy.deepcopy(row) if row is not None else None

    async def upsert(self, payload: Row) -> Row:
        await self._enter("upsert", payload)
        message = self._fail_days.get(payload.get("date", ""))
        if message is not None:
            raise TransportError(message)
        if not payload.get("date"):
            raise TransportError("upsert payload is missing 'date'")
        row = self._put(payload)
        logger.debug(f"InMemoryEntryStore upserted {row['date']}")
        return row

    async def query(self, query: RecordQuery) -> list[Row]:
        await self._enter("query", query)
        rows = [row for row in self._rows.values() if all(f.matches(row) for f in query.filters)]
        rows.sort(key=lambda r: (r.get(query.order_by) is None, r.get(query.order_by)), reverse=query.descending)
        if query.limit is not None:
            rows = rows[: query.limit]
        if query.columns:
            rows = [{c: row.get(c) for c in query.columns} for row in rows]
        return copy.deepcopy(rows)

    # ── Introspection ──────────────────────────────────────────────

    def rows(self) -> dict[str, Row]:
        return copy.deepcopy(self._rows)

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)
