"""Streak tracker for daily activity pings.

The streak counts distinct active calendar days. It grows by exactly one on
the first ping of a new day, whatever the gap since the last active day,
and never resets.
"""

import logging
from datetime import date
from typing import Optional

from ..db.models import User
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError
from .schemas import StreakPing

logger = logging.getLogger(__name__)


def advance_streak(
    streak_days: Optional[int],
    last_active_date: Optional[date],
    today: date,
) -> tuple[int, date]:
    """Apply one ping to a streak state.

    Args:
        streak_days: Stored streak count (missing or <1 is floored to 1)
        last_active_date: Last day a ping was counted, if any
        today: Calendar day of this ping

    Returns:
        Tuple of (streak_days, last_active_date) after the ping
    """
    if not streak_days or streak_days < 1:
        streak_days = 1

    if last_active_date is None:
        # First ping ever only starts the clock
        return streak_days, today

    if last_active_date == today:
        return streak_days, last_active_date

    return streak_days + 1, today


class StreakTracker:
    """Manages per-user streak state."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize streak tracker.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def ping(self, user_id: str, today: Optional[date] = None) -> StreakPing:
        """Record user activity for the current calendar day.

        Args:
            user_id: User sending the ping
            today: Calendar day of the ping (default: today, local clock)

        Returns:
            StreakPing with the current streak and registration date

        Raises:
            NotFoundError: If the user does not exist
        """
        if today is None:
            today = date.today()

        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")

            last_active = (
                date.fromisoformat(user.last_active_date) if user.last_active_date else None
            )
            streak_days, last_active = advance_streak(user.streak_days, last_active, today)

            if streak_days != user.streak_days:
                logger.info("Streak for user %s is now %d day(s)", user_id, streak_days)

            user.streak_days = streak_days
            user.last_active_date = last_active.isoformat()

            return StreakPing(
                streak_days=streak_days,
                last_active_date=last_active,
                registration_date=user.created_at,
            )

    def get_streak(self, user_id: str) -> StreakPing:
        """Get a user's streak without registering activity.

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")

            return StreakPing(
                streak_days=max(user.streak_days or 1, 1),
                last_active_date=(
                    date.fromisoformat(user.last_active_date) if user.last_active_date else None
                ),
                registration_date=user.created_at,
            )
