"""Core data models for the daily journal.

One :class:`DailyRecord` exists per DayKey. Drafts held by the sync engine
are plain ``DailyRecord`` instances; the store boundary speaks ``dict`` rows
(see :meth:`DailyRecord.from_row` and :meth:`DailyRecord.to_payload`).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import Any

from .dates import to_day_key


class GymType(StrEnum):
    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    CARDIO = "cardio"
    REST = "rest"  # neutral: no workout


class WeightUnit(StrEnum):
    KG = "kg"
    LBS = "lbs"


class SyncStatus(StrEnum):
    """Lifecycle of the active draft relative to the store."""

    LOADING = "loading"
    SYNCED = "synced"
    SAVING = "saving"
    ERROR = "error"


BOOLEAN_FLAGS = ("running", "work_done", "is_highlighted")
"""Draft fields that :meth:`EntryDraftManager.toggle` may flip."""

SERVER_FIELDS = ("id", "created_at", "updated_at")
"""Columns assigned by the store and never sent in a payload."""


@dataclass
class ExerciseSet:
    reps: int = 0
    weight: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExerciseSet:
        return cls(reps=int(data.get("reps") or 0), weight=float(data.get("weight") or 0))

    def to_dict(self) -> dict[str, Any]:
        return {"reps": self.reps, "weight": self.weight}


@dataclass
class Exercise:
    """A single exercise with its ordered sets."""

    name: str
    sets: list[ExerciseSet] = field(default_factory=list)
    unit: WeightUnit = WeightUnit.KG
    id: str | None = None  # client-side tracking id

    @classmethod
    def from_dict(cls, data: dict[str, Any] | Exercise) -> Exercise:
        if isinstance(data, Exercise):
            return data
        return cls(
            name=str(data.get("name") or ""),
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets") or []],
            unit=WeightUnit(data.get("unit") or WeightUnit.KG),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
            "unit": self.unit.value,
        }
        if self.id:
            data["id"] = self.id
        return data


def _opt_float(value: Any) -> float | None:
    return None if value is None or value == "" else float(value)


def _opt_int(value: Any) -> int | None:
    return None if value is None or value == "" else int(value)


def _opt_text(value: Any) -> str | None:
    return value if value else None


@dataclass
class DailyRecord:
    """One day of the journal.

    Attributes:
        date: DayKey (``YYYY-MM-DD``), the record's identity.
        id: Server-assigned identifier, empty until first persisted.
        running / work_done: Habit flags, each with a free-text note.
        gym_type: Workout category; ``rest`` means no workout.
        exercises: Structured workout for the day.
        current_weight / daily_steps / sleep_hours / energy_level: Optional metrics.
        note / gratitude: Free-text reflection.
        is_highlighted: User marked the day as special.
        streak_check: Day counts toward the streak. Owned by the streak engine.
    """

    date: str
    id: str = ""
    running: bool = False
    running_note: str = ""
    work_done: bool = False
    work_note: str = ""
    gym_type: GymType = GymType.REST
    exercises: list[Exercise] = field(default_factory=list)
    current_weight: float | None = None
    daily_steps: int | None = None
    sleep_hours: float | None = None
    energy_level: int | None = None
    note: str = ""
    gratitude: str = ""
    is_highlighted: bool = False
    streak_check: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self):
        self.date = to_day_key(self.date)
        self.gym_type = GymType(self.gym_type)
        self.exercises = [Exercise.from_dict(e) for e in self.exercises]
        self.current_weight = _opt_float(self.current_weight)
        self.daily_steps = _opt_int(self.daily_steps)
        self.sleep_hours = _opt_float(self.sleep_hours)
        self.energy_level = _opt_int(self.energy_level)

    @classmethod
    def default(cls, day_key: str) -> DailyRecord:
        """Blank record for a day nothing has been stored for yet."""
        return cls(date=day_key)

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> DailyRecord:
        """Build a record from a store row, tolerating NULLs and unknown columns."""
        data = dict(row)
        # Column was renamed from book_reading to running
        if "running" not in data and "book_reading" in data:
            data["running"] = data["book_reading"]
        return cls(
            date=data["date"],
            id=str(data.get("id") or ""),
            running=bool(data.get("running")),
            running_note=data.get("running_note") or "",
            work_done=bool(data.get("work_done")),
            work_note=data.get("work_note") or "",
            gym_type=data.get("gym_type") or GymType.REST,
            exercises=list(data.get("exercises") or []),
            current_weight=data.get("current_weight"),
            daily_steps=data.get("daily_steps"),
            sleep_hours=data.get("sleep_hours"),
            energy_level=data.get("energy_level"),
            note=data.get("note") or "",
            gratitude=data.get("gratitude") or "",
            is_highlighted=bool(data.get("is_highlighted")),
            streak_check=bool(data.get("streak_check")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_payload(self) -> dict[str, Any]:
        """Upsert body for this record, keyed by ``date``.

        Server-assigned columns and ``streak_check`` are left out so a draft
        save never overwrites a check-in written by the streak engine.
        """
        return {
            "date": self.date,
            "running": self.running,
            "running_note": _opt_text(self.running_note),
            "work_done": self.work_done,
            "work_note": _opt_text(self.work_note),
            "gym_type": self.gym_type.value,
            "exercises": [e.to_dict() for e in self.exercises],
            "current_weight": self.current_weight,
            "daily_steps": self.daily_steps,
            "sleep_hours": self.sleep_hours,
            "energy_level": self.energy_level,
            "note": _opt_text(self.note),
            "gratitude": _opt_text(self.gratitude),
            "is_highlighted": self.is_highlighted,
        }

    def merge(self, **updates: Any) -> DailyRecord:
        """Return a copy with ``updates`` shallow-merged in."""
        unknown = set(updates) - self.field_names()
        if unknown:
            raise ValueError(f"Unknown record field(s): {', '.join(sorted(unknown))}")
        if "date" in updates and to_day_key(updates["date"]) != self.date:
            raise ValueError("A record's date cannot be changed")
        return replace(self, **updates)


def serialize_record(record: DailyRecord) -> str:
    """Canonical form used for snapshots and dirty checks."""
    return json.dumps(record.to_payload(), sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True)
class StreakState:
    """Derived streak view; never persisted."""

    current_streak: int = 0
    last_checked_day_key: str | None = None
    is_checked_today: bool = False
    can_restore: bool = False
    missed_days: int = 0

    @classmethod
    def empty(cls) -> StreakState:
        return cls()
