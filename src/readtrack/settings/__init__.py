"""User settings and preferences."""

from .manager import SettingsManager
from .schemas import DEFAULT_TIMEZONE, SettingsResponse, SettingsUpdate, UserSettings

__all__ = [
    "SettingsManager",
    "SettingsResponse",
    "SettingsUpdate",
    "UserSettings",
    "DEFAULT_TIMEZONE",
]
