"""Entry draft manager: load, edit, debounce, persist one day at a time.

Holds one :class:`DaySession` per selected DayKey and guarantees that the
store eventually reflects the latest draft:

* an unchanged draft (serialized form equal to the last acknowledged
  snapshot) never issues an upsert, so loading a missing day writes nothing;
* edits restart a trailing-edge debounce timer; only the state after the
  last edit in a quiet period is persisted;
* at most one upsert per DayKey is in flight; a save requested meanwhile
  runs once the current one settles;
* every async completion is tagged with ``(day_key, generation)`` and is
  dropped if the user has moved to another day since it was issued.

Store failures are caught here and surfaced as ``SyncStatus.ERROR`` with a
message; they never propagate to callers of ``update``/``toggle``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import date
from typing import Any

from loguru import logger

from daylog.core.exceptions import PreconditionError, TransportError
from daylog.journal.dates import to_day_key
from daylog.journal.models import BOOLEAN_FLAGS, DailyRecord, GymType, SyncStatus, serialize_record
from daylog.journal.store import EntryStore

from .session import DaySession
from .templates import WorkoutTemplateLookup

DEFAULT_DEBOUNCE_SECONDS = 0.8

ChangeListener = Callable[[DaySession], None]
"""Sync callback invoked with the active session after any state change."""


def _describe(exc: Exception, fallback: str) -> str:
    return str(exc) or fallback


class EntryDraftManager:
    """Single authoritative in-memory draft for the selected day.

    Args:
        store: Remote entry store.
        debounce_seconds: Quiet period before a changed draft is persisted.
        on_change: Optional listener notified on draft/status/error changes.

    Usage::

        manager = EntryDraftManager(store)
        await manager.select_day("2026-02-01")
        manager.toggle("running")
        manager.update(note="felt good")
        await manager.flush()
    """

    def __init__(
        self,
        store: EntryStore,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_change: ChangeListener | None = None,
    ):
        self._store = store
        self._templates = WorkoutTemplateLookup(store)
        self._debounce = debounce_seconds
        self._on_change = on_change
        self._sessions: dict[str, DaySession] = {}
        self._active_key: str | None = None
        self._generation = 0
        self._inflight: dict[str, asyncio.Task] = {}

    @classmethod
    def from_config(cls, store: EntryStore, config: Any, **kwargs: Any) -> EntryDraftManager:
        debounce_ms = config.get_float("sync.debounce_ms", DEFAULT_DEBOUNCE_SECONDS * 1000)
        return cls(store, debounce_seconds=debounce_ms / 1000, **kwargs)

    # ── State ──────────────────────────────────────────────────────

    @property
    def active_key(self) -> str | None:
        return self._active_key

    @property
    def session(self) -> DaySession | None:
        if self._active_key is None:
            return None
        return self._sessions.get(self._active_key)

    @property
    def draft(self) -> DailyRecord | None:
        session = self.session
        return session.draft if session else None

    @property
    def status(self) -> SyncStatus:
        session = self.session
        return session.status if session else SyncStatus.LOADING

    @property
    def error(self) -> str | None:
        session = self.session
        return session.error if session else None

    def _is_current(self, day_key: str, generation: int) -> bool:
        return self._active_key == day_key and self._generation == generation

    def _require_session(self) -> DaySession:
        session = self.session
        if session is None:
            raise PreconditionError("No day selected; call select_day() first")
        return session

    def _notify(self, session: DaySession) -> None:
        if self._on_change is None or session.day_key != self._active_key:
            return
        try:
            self._on_change(session)
        except Exception:
            logger.exception(f"Change listener failed for {session.day_key}")

    # ── Selection & loading ────────────────────────────────────────

    def select_day(self, day: str | date) -> asyncio.Task:
        """Make ``day`` the active draft and start loading it.

        Resets the day to a fresh default draft in ``loading`` state and
        supersedes every load or pending save issued for the previous day.
        Must be called from a running event loop; returns the load task.
        """
        key = to_day_key(day)
        previous = self.session
        if previous is not None:
            previous.cancel_timer()
            if previous.load_task is not None and not previous.load_task.done():
                previous.load_task.cancel()
            del self._sessions[previous.day_key]

        self._generation += 1
        session = DaySession.fresh(key, self._generation)
        self._sessions[key] = session
        self._active_key = key
        logger.debug(f"Selected {key} (generation {self._generation})")
        self._notify(session)

        session.load_task = asyncio.ensure_future(self._load(session, self._generation))
        return session.load_task

    async def load(self, day: str | date | None = None) -> None:
        """Fetch ``day`` (default: the active day) from the store.

        Loading a day other than the active one selects it first. Reloading
        the active day discards unsaved edits and clears an error state.
        """
        key = to_day_key(day) if day is not None else self._require_session().day_key
        session = self.session
        if session is None or session.day_key != key:
            await self.select_day(key)
            return

        session.cancel_timer()
        self._generation += 1
        session.generation = self._generation
        session.status = SyncStatus.LOADING
        session.error = None
        self._notify(session)
        session.load_task = asyncio.ensure_future(self._load(session, self._generation))
        await session.load_task

    async def _load(self, session: DaySession, generation: int) -> None:
        key = session.day_key
        pending = self._inflight.get(key)
        if pending is not None and not pending.done():
            # Read after our own write lands, not before
            await asyncio.wait({pending})

        logger.debug(f"Loading entry for {key}")
        try:
            row = await self._store.get(key)
            record = DailyRecord.from_row(row) if row else DailyRecord.default(key)
        except Exception as e:
            if not self._is_current(key, generation):
                logger.debug(f"Discarding stale load failure for {key}")
                return
            if not isinstance(e, TransportError):
                logger.exception(f"Unexpected error loading {key}")
            else:
                logger.warning(f"Load failed for {key}: {e}")
            session.fail(_describe(e, "Failed to load"))
            self._notify(session)
            return

        if not self._is_current(key, generation):
            logger.debug(f"Discarding stale load result for {key}")
            return

        if row:
            logger.debug(f"Loaded existing entry for {key}")
        else:
            logger.debug(f"No entry for {key}, using defaults")
        session.draft = record
        session.acknowledge(record)
        session.loaded = True
        self._notify(session)

    # ── Editing ────────────────────────────────────────────────────

    def update(self, **fields: Any) -> DailyRecord:
        """Shallow-merge ``fields`` into the active draft. No immediate network effect."""
        session = self._require_session()
        session.draft = session.draft.merge(**fields)
        self._notify(session)
        self._schedule_save(session)
        return session.draft

    def toggle(self, flag: str) -> DailyRecord:
        """Flip a boolean habit flag on the active draft."""
        if flag not in BOOLEAN_FLAGS:
            raise ValueError(f"Not a toggleable flag: {flag!r} (expected one of {', '.join(BOOLEAN_FLAGS)})")
        session = self._require_session()
        return self.update(**{flag: not getattr(session.draft, flag)})

    def set_gym_type(self, gym_type: GymType | str) -> DailyRecord:
        return self.update(gym_type=GymType(gym_type))

    async def copy_last_workout(self, gym_type: GymType | str | None = None) -> bool:
        """Copy the latest earlier workout of ``gym_type`` into the draft.

        Defaults to the draft's own category. Returns ``False`` for the rest
        category, when nothing is found, or when the day changed meanwhile.
        """
        session = self._require_session()
        key, generation = session.day_key, self._generation
        category = GymType(gym_type or session.draft.gym_type)

        exercises = await self._templates.find_last(category, key)
        if not exercises:
            return False
        if not self._is_current(key, generation):
            logger.debug(f"Discarding {category} template for superseded day {key}")
            return False
        self.update(exercises=exercises)
        return True

    # ── Debounced persistence ──────────────────────────────────────

    def _schedule_save(self, session: DaySession) -> None:
        """Cancel-and-restart the debounce timer if the draft needs saving."""
        session.cancel_timer()
        if not session.can_schedule:
            return
        loop = asyncio.get_running_loop()
        session.timer = loop.call_later(self._debounce, self._on_timer, session, self._generation)

    def _on_timer(self, session: DaySession, generation: int) -> None:
        session.timer = None
        if not self._is_current(session.day_key, generation):
            return
        self._start_save(session)

    def _start_save(self, session: DaySession) -> None:
        key = session.day_key
        inflight = self._inflight.get(key)
        if inflight is not None and not inflight.done():
            session.resave = True
            logger.debug(f"Save for {key} already in flight, queued another")
            return
        session.resave = False
        if not session.dirty:
            return

        payload = session.draft.to_payload()
        session.status = SyncStatus.SAVING
        session.error = None
        self._notify(session)
        self._inflight[key] = asyncio.ensure_future(
            self._save(session, payload, serialize_record(session.draft), self._generation)
        )

    async def _save(self, session: DaySession, payload: dict[str, Any], sent: str, generation: int) -> None:
        """Upsert ``payload``; ``sent`` is the draft's serialized form when it was issued."""
        key = session.day_key
        logger.debug(f"Saving entry for {key}")
        try:
            row = await self._store.upsert(payload)
            persisted = DailyRecord.from_row(row)
        except Exception as e:
            if self._is_current(key, generation):
                if not isinstance(e, TransportError):
                    logger.exception(f"Unexpected error saving {key}")
                else:
                    logger.warning(f"Save failed for {key}: {e}")
                # Draft keeps the user's edits; the next change re-arms the save
                session.fail(_describe(e, "Failed to save"))
                self._notify(session)
            else:
                logger.debug(f"Discarding stale save failure for {key}")
        else:
            if self._is_current(key, generation):
                if serialize_record(session.draft) == sent:
                    # Adopt the stored row so server-side rounding settles the draft
                    session.draft = persisted
                    session.acknowledge(persisted)
                else:
                    # Edited mid-save: the acknowledged state is what was sent
                    session.acknowledge(persisted)
                    session.snapshot = sent
                    session.draft = session.draft.merge(
                        id=persisted.id,
                        created_at=persisted.created_at,
                        updated_at=persisted.updated_at,
                        streak_check=persisted.streak_check,
                    )
                logger.debug(f"Saved entry for {key}")
                self._notify(session)
            else:
                logger.debug(f"Discarding stale save result for {key}")
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
            self._after_save(key)

    def _after_save(self, day_key: str) -> None:
        """Run any save that was requested while one was in flight."""
        session = self.session
        if session is None or session.day_key != day_key:
            return
        if session.resave:
            self._start_save(session)
        elif not session.timer_armed and session.status is SyncStatus.SYNCED:
            self._schedule_save(session)

    # ── Lifecycle ──────────────────────────────────────────────────

    async def flush(self) -> None:
        """Persist the active draft now instead of waiting for the debounce.

        Waits for the initial load and every in-flight save to settle.
        """
        session = self.session
        if session is not None and session.load_task is not None and not session.load_task.done():
            await asyncio.wait({session.load_task})

        while True:
            session = self.session
            if session is not None and session.timer_armed:
                session.cancel_timer()
                self._start_save(session)
            pending = [t for t in self._inflight.values() if not t.done()]
            if not pending:
                break
            await asyncio.wait(pending)

    async def close(self) -> None:
        """Drop pending timers and loads; let in-flight saves finish."""
        for session in self._sessions.values():
            session.cancel_timer()
            if session.load_task is not None and not session.load_task.done():
                session.load_task.cancel()
        pending = [t for t in self._inflight.values() if not t.done()]
        if pending:
            await asyncio.wait(pending)
