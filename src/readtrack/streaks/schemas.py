"""Pydantic schemas for activity streaks."""

from datetime import date
from typing import Optional

from pydantic import Field

from ..db.schemas import CamelModel


class StreakPing(CamelModel):
    """Streak state returned by a ping."""

    streak_days: int = Field(..., ge=1)
    last_active_date: Optional[date] = None
    registration_date: str
