"""Tests for workout template lookup and EntryDraftManager.copy_last_workout."""

import asyncio

import pytest

from daylog.journal.memory_store import InMemoryEntryStore
from daylog.journal.models import Exercise, GymType
from daylog.sync.draft_manager import EntryDraftManager
from daylog.sync.templates import WorkoutTemplateLookup

BENCH = {"name": "Bench press", "unit": "kg", "sets": [{"reps": 5, "weight": 80}, {"reps": 5, "weight": 82.5}]}
SQUAT = {"name": "Squat", "unit": "lbs", "sets": [{"reps": 3, "weight": 225}]}


@pytest.fixture
def workout_store(row_factory):
    return InMemoryEntryStore(
        [
            row_factory("2026-01-28", gym_type="push", exercises=[{"name": "Old press", "sets": []}]),
            row_factory("2026-01-30", gym_type="push", exercises=[BENCH]),
            row_factory("2026-01-31", gym_type="legs", exercises=[SQUAT]),
            row_factory("2026-02-03", gym_type="push", exercises=[{"name": "Future", "sets": []}]),
            row_factory("2026-01-29", gym_type="pull", exercises=[]),
        ]
    )


@pytest.mark.smoke
class TestWorkoutTemplateLookup:
    async def test_rest_never_queries(self, workout_store):
        lookup = WorkoutTemplateLookup(workout_store)
        assert await lookup.find_last(GymType.REST, "2026-02-01") is None
        assert workout_store.count("query") == 0

    async def test_most_recent_strictly_before(self, workout_store):
        lookup = WorkoutTemplateLookup(workout_store)
        exercises = await lookup.find_last("push", "2026-02-01")
        assert [e.name for e in exercises] == ["Bench press"]
        assert exercises[0].sets[1].weight == 82.5

        query = workout_store.calls[-1][1]
        assert query.limit == 1
        assert query.descending is True

    async def test_same_day_is_excluded(self, workout_store):
        lookup = WorkoutTemplateLookup(workout_store)
        exercises = await lookup.find_last("push", "2026-01-30")
        assert [e.name for e in exercises] == ["Old press"]

    async def test_empty_workout_is_not_found(self, workout_store):
        lookup = WorkoutTemplateLookup(workout_store)
        assert await lookup.find_last("pull", "2026-02-01") is None

    async def test_no_match(self, workout_store):
        lookup = WorkoutTemplateLookup(workout_store)
        assert await lookup.find_last("cardio", "2026-02-01") is None

    async def test_transport_error_is_not_found(self, workout_store):
        workout_store.fail_next("query")
        lookup = WorkoutTemplateLookup(workout_store)
        assert await lookup.find_last("push", "2026-02-01") is None


@pytest.mark.smoke
class TestCopyLastWorkout:
    async def test_copies_into_draft_and_saves(self, workout_store):
        manager = EntryDraftManager(workout_store, debounce_seconds=0.01)
        await manager.select_day("2026-02-01")
        manager.set_gym_type("legs")

        assert await manager.copy_last_workout() is True
        assert manager.draft.exercises == [Exercise.from_dict(SQUAT)]

        await manager.flush()
        stored = workout_store.rows()["2026-02-01"]
        assert stored["gym_type"] == "legs"
        assert stored["exercises"][0]["name"] == "Squat"

    async def test_explicit_category(self, workout_store):
        manager = EntryDraftManager(workout_store, debounce_seconds=10)
        await manager.select_day("2026-02-01")
        assert await manager.copy_last_workout("push") is True
        assert manager.draft.exercises[0].name == "Bench press"
        await manager.close()

    async def test_rest_reports_not_found(self, workout_store):
        manager = EntryDraftManager(workout_store, debounce_seconds=0.01)
        await manager.select_day("2026-02-01")
        assert await manager.copy_last_workout("rest") is False
        assert workout_store.count("query") == 0
        assert manager.draft.exercises == []

    async def test_not_found_leaves_draft_untouched(self, workout_store):
        manager = EntryDraftManager(workout_store, debounce_seconds=0.01)
        await manager.select_day("2026-02-01")
        assert await manager.copy_last_workout("cardio") is False
        await asyncio.sleep(0.05)
        assert workout_store.count("upsert") == 0

    async def test_result_for_superseded_day_is_discarded(self, workout_store):
        workout_store.delay = 0.05
        manager = EntryDraftManager(workout_store, debounce_seconds=0.01)
        await manager.select_day("2026-02-01")

        copy_task = asyncio.ensure_future(manager.copy_last_workout("push"))
        await asyncio.sleep(0.01)
        await manager.select_day("2026-02-02")

        assert await copy_task is False
        assert manager.draft.exercises == []
