"""Per-day sync state.

A :class:`DaySession` is the explicit state machine behind one draft:
``{draft, snapshot, status, loaded, timer, resave}``. The draft manager owns
the sessions and is the only thing that mutates them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from daylog.journal.models import DailyRecord, SyncStatus, serialize_record


@dataclass
class DaySession:
    """Sync state for a single DayKey.

    Attributes:
        day_key: The day this draft belongs to.
        generation: Manager generation the session was (re)loaded under.
        draft: Editable record; never ``None``.
        snapshot: Serialized form of the last value acknowledged by the store.
        status: Current :class:`SyncStatus`.
        error: Human-readable message when ``status`` is ``error``.
        loaded: Initial fetch has completed (found or not).
        timer: Pending debounce handle, if armed.
        load_task: Task running the initial fetch.
        resave: A save was requested while another was in flight.
    """

    day_key: str
    generation: int
    draft: DailyRecord
    snapshot: str = ""
    status: SyncStatus = SyncStatus.LOADING
    error: str | None = None
    loaded: bool = False
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    load_task: asyncio.Task | None = field(default=None, repr=False)
    resave: bool = False

    @classmethod
    def fresh(cls, day_key: str, generation: int) -> DaySession:
        draft = DailyRecord.default(day_key)
        return cls(day_key=day_key, generation=generation, draft=draft, snapshot=serialize_record(draft))

    @property
    def dirty(self) -> bool:
        return serialize_record(self.draft) != self.snapshot

    @property
    def timer_armed(self) -> bool:
        return self.timer is not None

    @property
    def can_schedule(self) -> bool:
        """Debounce may arm: loaded, not loading, and diverged from the snapshot."""
        return self.loaded and self.status is not SyncStatus.LOADING and self.dirty

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def acknowledge(self, persisted: DailyRecord) -> None:
        """Record a successful load or save of ``persisted``."""
        self.snapshot = serialize_record(persisted)
        self.status = SyncStatus.SYNCED
        self.error = None

    def fail(self, message: str) -> None:
        self.status = SyncStatus.ERROR
        self.error = message
