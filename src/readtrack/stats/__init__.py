"""Derived reading statistics."""

from .analytics import (
    DailyPages,
    ItemProgress,
    LibrarySummary,
    ReadingStatsService,
    classify_status,
    progress_percent,
    summarize,
)

__all__ = [
    "DailyPages",
    "ItemProgress",
    "LibrarySummary",
    "ReadingStatsService",
    "classify_status",
    "progress_percent",
    "summarize",
]
