"""Entry synchronization: per-day drafts with debounced persistence."""

from .draft_manager import EntryDraftManager
from .session import DaySession
from .templates import WorkoutTemplateLookup

__all__ = ["DaySession", "EntryDraftManager", "WorkoutTemplateLookup"]
