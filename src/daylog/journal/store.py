"""EntryStore protocol: the contract for remote journal backends.

Any row-per-day store that can look a row up by date, upsert on the
``date`` uniqueness constraint, and run simple filtered/ordered scans can
implement this protocol and back the sync and streak engines.

Rows cross this boundary as plain dicts; :class:`~daylog.journal.models.DailyRecord`
converts them. Absence of a row is ``None``, never an exception. Transport
problems raise :class:`~daylog.core.exceptions.TransportError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]


class FilterOp(StrEnum):
    EQ = "eq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    NOT_NULL = "not_null"


@dataclass(frozen=True)
class Filter:
    column: str
    op: FilterOp
    value: Any = None

    def matches(self, row: Row) -> bool:
        """Evaluate the filter against a row (used by in-process stores)."""
        actual = row.get(self.column)
        if self.op is FilterOp.NOT_NULL:
            return actual is not None
        if self.op is FilterOp.EQ:
            return actual == self.value
        if actual is None:
            return False
        if self.op is FilterOp.LT:
            return actual < self.value
        if self.op is FilterOp.LTE:
            return actual <= self.value
        if self.op is FilterOp.GT:
            return actual > self.value
        return actual >= self.value


@dataclass
class RecordQuery:
    """A filtered, ordered, limited scan over the journal table.

    Example::

        RecordQuery().where("streak_check", True).order("date", descending=True).take(100)
    """

    filters: list[Filter] = field(default_factory=list)
    order_by: str = "date"
    descending: bool = False
    limit: int | None = None
    columns: list[str] | None = None  # None = every column

    def where(self, column: str, value: Any, op: FilterOp | str = FilterOp.EQ) -> RecordQuery:
        self.filters.append(Filter(column, FilterOp(op), value))
        return self

    def not_null(self, column: str) -> RecordQuery:
        self.filters.append(Filter(column, FilterOp.NOT_NULL))
        return self

    def order(self, column: str, *, descending: bool = False) -> RecordQuery:
        self.order_by = column
        self.descending = descending
        return self

    def take(self, limit: int) -> RecordQuery:
        self.limit = limit
        return self

    def select(self, *columns: str) -> RecordQuery:
        self.columns = list(columns)
        return self


@runtime_checkable
class EntryStore(Protocol):
    """Protocol for the remote row-per-day entry store."""

    async def get(self, day_key: str) -> Row | None:
        """Point lookup by DayKey.

        Returns:
            The stored row, or ``None`` when no row exists for the day.
        """
        ...

    async def upsert(self, payload: Row) -> Row:
        """Insert or merge a partial row keyed by its ``date`` column.

        Columns absent from ``payload`` keep their stored values.

        Returns:
            The full stored row, including server-assigned ``id`` and timestamps.
        """
        ...

    async def query(self, query: RecordQuery) -> list[Row]:
        """Run a filtered, ordered, limited scan."""
        ...
