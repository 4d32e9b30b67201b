"""Streak calculation and restoration.

The streak is the number of consecutive days, walking backward from today
(or from yesterday when today has not been checked in yet), whose record has
``streak_check`` set. A broken streak can be restored when the last check-in
is 2 or 3 days back: the days in between are back-filled with check-ins.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from loguru import logger

from daylog.core.exceptions import PartialBatchError, PreconditionError
from daylog.journal.dates import Clock, day_keys_between, days_between, shift_day_key, to_day_key
from daylog.journal.models import StreakState
from daylog.journal.store import EntryStore, RecordQuery

DEFAULT_LOOKBACK = 100
RESTORE_MIN_GAP = 2
RESTORE_MAX_GAP = 3


def compute_streak(
    checked_day_keys: Iterable[str],
    today: str,
    *,
    min_gap: int = RESTORE_MIN_GAP,
    max_gap: int = RESTORE_MAX_GAP,
) -> StreakState:
    """Derive the streak from the set of checked-in DayKeys.

    Args:
        checked_day_keys: DayKeys whose record has ``streak_check`` set, any order.
        today: The DayKey treated as today.
        min_gap / max_gap: Inclusive bounds, in days between the last
            check-in and today, within which the streak can be restored.
    """
    checked = set(checked_day_keys)
    if not checked:
        return StreakState.empty()

    is_checked_today = today in checked

    streak = 0
    cursor = today if is_checked_today else shift_day_key(today, -1)
    while cursor in checked:
        streak += 1
        cursor = shift_day_key(cursor, -1)

    last_checked = max(checked)
    can_restore = False
    missed_days = 0
    if not is_checked_today:
        gap = days_between(last_checked, today)
        if min_gap <= gap <= max_gap:
            can_restore = True
            missed_days = gap - 1

    return StreakState(
        current_streak=streak,
        last_checked_day_key=last_checked,
        is_checked_today=is_checked_today,
        can_restore=can_restore,
        missed_days=missed_days,
    )


class StreakEngine:
    """Streak state over an entry store, with restoration and check-in commands.

    The derived state is cached per today-key until a write through this
    engine invalidates it (or ``refresh=True`` is passed).

    Args:
        store: Remote entry store.
        lookback: Max number of checked rows scanned, newest first.
        min_gap / max_gap: Restoration window, see :func:`compute_streak`.
        clock: Returns the current local date; injectable for tests.
    """

    def __init__(
        self,
        store: EntryStore,
        *,
        lookback: int = DEFAULT_LOOKBACK,
        min_gap: int = RESTORE_MIN_GAP,
        max_gap: int = RESTORE_MAX_GAP,
        clock: Clock | None = None,
    ):
        self._store = store
        self._lookback = lookback
        self._min_gap = min_gap
        self._max_gap = max_gap
        self._clock = clock or date.today
        self._cache: dict[str, StreakState] = {}

    @classmethod
    def from_config(cls, store: EntryStore, config: Any, **kwargs: Any) -> StreakEngine:
        return cls(
            store,
            lookback=config.get_int("streak.lookback", DEFAULT_LOOKBACK),
            min_gap=config.get_int("streak.restore_min_gap", RESTORE_MIN_GAP),
            max_gap=config.get_int("streak.restore_max_gap", RESTORE_MAX_GAP),
            **kwargs,
        )

    def _today(self, today: str | date | None) -> str:
        return to_day_key(today) if today is not None else to_day_key(self._clock())

    async def checked_day_keys(self) -> list[str]:
        """Most recent checked-in DayKeys, newest first."""
        query = (
            RecordQuery()
            .select("date", "streak_check")
            .where("streak_check", True)
            .order("date", descending=True)
            .take(self._lookback)
        )
        rows = await self._store.query(query)
        return [to_day_key(row["date"]) for row in rows]

    async def get_state(self, today: str | date | None = None, *, refresh: bool = False) -> StreakState:
        """Current streak state; store errors propagate as TransportError."""
        key = self._today(today)
        if not refresh and key in self._cache:
            return self._cache[key]
        state = compute_streak(
            await self.checked_day_keys(),
            key,
            min_gap=self._min_gap,
            max_gap=self._max_gap,
        )
        self._cache[key] = state
        return state

    def invalidate(self) -> None:
        self._cache.clear()

    async def restore(self, today: str | date | None = None) -> list[str]:
        """Back-fill check-ins for the days missed since the last one.

        Restorability is recomputed from the store, not the cache. Only the
        ``streak_check`` column is written; other fields of an
        existing record are left as they are.

        Returns:
            The restored DayKeys, ascending.

        Raises:
            PreconditionError: The streak is not restorable right now.
            PartialBatchError: At least one day could not be written. Some
                days may have been written; re-read the state.
        """
        key = self._today(today)
        # Decide on current data; another client may have checked in since
        state = await self.get_state(key, refresh=True)
        if not state.can_restore or state.last_checked_day_key is None:
            raise PreconditionError(
                f"Cannot restore streak for {key}: last check-in {state.last_checked_day_key or 'never'} "
                f"is outside the {self._min_gap}-{self._max_gap} day restore window"
            )

        missed = day_keys_between(state.last_checked_day_key, key)
        written: list[str] = []
        failed: list[tuple[str, str]] = []
        try:
            for day_key in missed:
                try:
                    await self._store.upsert({"date": day_key, "streak_check": True})
                except Exception as e:
                    logger.warning(f"Streak restore failed for {day_key}: {e}")
                    failed.append((day_key, str(e) or type(e).__name__))
                else:
                    written.append(day_key)
        finally:
            self.invalidate()

        if failed:
            raise PartialBatchError(
                f"Restored {len(written)} of {len(missed)} day(s); failed: {', '.join(d for d, _ in failed)}",
                written=written,
                failed=failed,
            )
        logger.info(f"Restored streak check-ins for {', '.join(written)}")
        return written

    async def check_in(self, today: str | date | None = None) -> StreakState:
        """Mark today as checked in and return the recomputed state."""
        key = self._today(today)
        try:
            await self._store.upsert({"date": key, "streak_check": True})
        finally:
            self.invalidate()
        logger.info(f"Checked in for {key}")
        return await self.get_state(key)
