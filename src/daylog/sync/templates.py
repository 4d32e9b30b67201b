"""Workout template lookup: reuse the last workout of the same category."""

from __future__ import annotations

from loguru import logger

from daylog.core.exceptions import TransportError
from daylog.journal.models import Exercise, GymType
from daylog.journal.store import EntryStore, FilterOp, RecordQuery


class WorkoutTemplateLookup:
    """Read-only helper that finds the most recent prior workout for a category."""

    def __init__(self, store: EntryStore):
        self._store = store

    async def find_last(self, gym_type: GymType | str, before_day_key: str) -> list[Exercise] | None:
        """Exercises of the latest record before ``before_day_key`` with this category.

        Returns ``None`` for the rest category (without querying), when no
        such record exists, when its exercise list is empty, or when the
        store cannot be reached.
        """
        category = GymType(gym_type)
        if category is GymType.REST:
            return None

        query = (
            RecordQuery()
            .select("date", "exercises")
            .where("gym_type", category.value)
            .where("date", before_day_key, FilterOp.LT)
            .order("date", descending=True)
            .take(1)
        )
        try:
            rows = await self._store.query(query)
        except TransportError as e:
            logger.warning(f"Failed to copy {category} workout before {before_day_key}: {e}")
            return None

        exercises = rows[0].get("exercises") if rows else None
        if not exercises or not isinstance(exercises, list):
            return None
        logger.debug(f"Found {category} template from {rows[0].get('date')}")
        return [Exercise.from_dict(e) for e in exercises]
