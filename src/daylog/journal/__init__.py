"""Journal data layer.

Provides the DailyRecord model, DayKey helpers, the EntryStore protocol
with in-memory and PostgREST backends, and read models for history views.
"""

from .memory_store import InMemoryEntryStore
from .models import DailyRecord, Exercise, ExerciseSet, GymType, StreakState, SyncStatus, serialize_record
from .store import EntryStore, Filter, FilterOp, RecordQuery

__all__ = [
    "DailyRecord",
    "EntryStore",
    "Exercise",
    "ExerciseSet",
    "Filter",
    "FilterOp",
    "GymType",
    "InMemoryEntryStore",
    "RecordQuery",
    "StreakState",
    "SyncStatus",
    "serialize_record",
]
