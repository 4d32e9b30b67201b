"""Read models for the journal home screen and history views.

These are pure reads over an :class:`EntryStore`; nothing here writes.
"""

from __future__ import annotations

import asyncio
import calendar
from dataclasses import dataclass, field
from datetime import timedelta

from .dates import day_keys_between, parse_day_key, shift_day_key, to_day_key
from .models import DailyRecord, GymType
from .store import EntryStore, FilterOp, RecordQuery


@dataclass
class WeightSample:
    date: str
    weight: float


@dataclass
class StepSample:
    date: str
    steps: int | None


@dataclass
class HomeOverview:
    """Everything the home screen shows for one day.

    Attributes:
        today: Effective today (never before the journal start date).
        today_entry: Today's record, or ``None`` if nothing stored yet.
        yesterday_entry: Yesterday's record when it falls in the current month.
        month_entries: Records for the current month from the start date on.
        weight_history: Weight samples over the trailing window, ascending.
    """

    today: str
    today_entry: DailyRecord | None
    yesterday_entry: DailyRecord | None
    month_entries: list[DailyRecord] = field(default_factory=list)
    weight_history: list[WeightSample] = field(default_factory=list)


def _month_bounds(day_key: str) -> tuple[str, str]:
    day = parse_day_key(day_key)
    last = calendar.monthrange(day.year, day.month)[1]
    return to_day_key(day.replace(day=1)), to_day_key(day.replace(day=last))


async def load_home_overview(
    store: EntryStore,
    today: str,
    *,
    start_date: str,
    weight_days: int = 30,
) -> HomeOverview:
    """Fetch today's entry, the month, and weight history concurrently."""
    start = to_day_key(start_date)
    effective_today = max(to_day_key(today), start)
    month_start, month_end = _month_bounds(effective_today)
    month_start = max(month_start, start)
    weight_start = max(shift_day_key(effective_today, -weight_days), start)

    month_query = (
        RecordQuery().where("date", month_start, FilterOp.GTE).where("date", month_end, FilterOp.LTE).order("date")
    )
    weight_query = (
        RecordQuery()
        .select("date", "current_weight")
        .where("date", weight_start, FilterOp.GTE)
        .where("date", effective_today, FilterOp.LTE)
        .not_null("current_weight")
        .order("date")
    )
    today_row, month_rows, weight_rows = await asyncio.gather(
        store.get(effective_today),
        store.query(month_query),
        store.query(weight_query),
    )

    month_entries = [DailyRecord.from_row(row) for row in month_rows]
    yesterday_key = shift_day_key(effective_today, -1)
    yesterday_entry = next((e for e in month_entries if e.date == yesterday_key), None)

    return HomeOverview(
        today=effective_today,
        today_entry=DailyRecord.from_row(today_row) if today_row else None,
        yesterday_entry=yesterday_entry,
        month_entries=month_entries,
        weight_history=[WeightSample(row["date"], float(row["current_weight"])) for row in weight_rows],
    )


async def load_step_history(store: EntryStore, today: str, *, start_date: str) -> list[StepSample]:
    """Daily step counts from the start date to today, newest first."""
    query = (
        RecordQuery()
        .select("date", "daily_steps")
        .where("date", to_day_key(start_date), FilterOp.GTE)
        .where("date", to_day_key(today), FilterOp.LTE)
        .order("date", descending=True)
    )
    rows = await store.query(query)
    return [StepSample(row["date"], row.get("daily_steps")) for row in rows]


@dataclass
class WeeklySummary:
    perfect_days: int
    total_possible_days: int
    current_streak: int
    completion_rate: int  # percent
    best_habit: str
    running_days: int
    work_days: int
    gym_days: int


def week_start(day_key: str) -> str:
    """The Sunday on or before ``day_key``."""
    day = parse_day_key(day_key)
    # date.weekday(): Monday=0 .. Sunday=6
    return to_day_key(day - timedelta(days=(day.weekday() + 1) % 7))


async def load_week_records(store: EntryStore, today: str) -> list[DailyRecord]:
    """Records from the start of today's week through today."""
    query = (
        RecordQuery()
        .where("date", week_start(today), FilterOp.GTE)
        .where("date", to_day_key(today), FilterOp.LTE)
        .order("date")
    )
    return [DailyRecord.from_row(row) for row in await store.query(query)]


def _is_perfect(record: DailyRecord | None) -> bool:
    return bool(record and record.running and record.work_done and record.gym_type is not GymType.REST)


def weekly_summary(records: list[DailyRecord], today: str) -> WeeklySummary:
    """Summarize the Sunday-start week containing ``today``, up to today.

    A perfect day has running, work, and a non-rest workout. The streak here
    counts consecutive perfect days backward from today within the week.
    """
    first = week_start(today)
    days = [first, *day_keys_between(first, today), today] if first != today else [today]
    by_date = {r.date: r for r in records}

    running_days = work_days = gym_days = perfect_days = 0
    for key in days:
        record = by_date.get(key)
        if record is None:
            continue
        running_days += record.running
        work_days += record.work_done
        gym_days += record.gym_type is not GymType.REST
        perfect_days += _is_perfect(record)

    streak = 0
    for key in reversed(days):
        if not _is_perfect(by_date.get(key)):
            break
        streak += 1

    habit_counts = [("Running", running_days), ("Work", work_days), ("Gym", gym_days)]
    best_habit = habit_counts[0]
    for candidate in habit_counts[1:]:
        if candidate[1] > best_habit[1]:
            best_habit = candidate

    total = len(days)
    return WeeklySummary(
        perfect_days=perfect_days,
        total_possible_days=total,
        current_streak=streak,
        completion_rate=round(perfect_days / total * 100) if total else 0,
        best_habit=best_habit[0],
        running_days=running_days,
        work_days=work_days,
        gym_days=gym_days,
    )
