"""Daily activity streaks."""

from .manager import StreakTracker, advance_streak
from .schemas import StreakPing

__all__ = [
    "StreakTracker",
    "StreakPing",
    "advance_streak",
]
