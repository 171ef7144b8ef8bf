"""Schemas for user settings.

Settings are stored as nullable columns on the user row. ``UserSettings``
is the value object handed to callers, with defaults filled in on read so
nobody sees a partially populated settings blob.
"""

from datetime import date
from typing import Optional

from pydantic import Field, StrictInt

from ..db.models import User
from ..db.schemas import CamelModel

DEFAULT_TIMEZONE = "America/Chicago"


class UserSettings(CamelModel):
    """A user's preferences and streak state."""

    timezone: str = DEFAULT_TIMEZONE
    daily_page_goal: int = Field(default=0, ge=0)
    daily_minutes_goal: int = Field(default=0, ge=0)
    streak_days: int = Field(default=1, ge=1)
    last_active_date: Optional[date] = None

    @classmethod
    def from_user(cls, user: User) -> "UserSettings":
        """Read settings off a user row, applying defaults for unset values."""
        values = {
            "timezone": user.timezone,
            "daily_page_goal": user.daily_page_goal,
            "daily_minutes_goal": user.daily_minutes_goal,
            "streak_days": user.streak_days if user.streak_days and user.streak_days >= 1 else None,
            "last_active_date": user.last_active_date,
        }
        return cls(**{key: value for key, value in values.items() if value is not None})


class SettingsResponse(UserSettings):
    """Settings plus the user's registration date."""

    registration_date: str


class SettingsUpdate(CamelModel):
    """Schema for updating settings. Only supplied fields are written."""

    timezone: Optional[str] = Field(None, min_length=1)
    daily_page_goal: Optional[StrictInt] = Field(None, ge=0)
    daily_minutes_goal: Optional[StrictInt] = Field(None, ge=0)
