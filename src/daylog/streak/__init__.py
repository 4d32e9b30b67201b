"""Streak calculation and restoration."""

from .engine import StreakEngine, compute_streak

__all__ = ["StreakEngine", "compute_streak"]
