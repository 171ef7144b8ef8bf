"""Reading statistics derived from the item registry and progress log.

Nothing here is stored: every figure is computed from the current items and
log entries when asked for.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from ..db.models import ReadingItem
from ..db.schemas import ItemStatus
from ..db.sqlite import Database, get_db
from ..errors import ValidationError
from ..library.registry import ItemRegistry
from ..reading.progress import ProgressLog

logger = logging.getLogger(__name__)

MAX_DAILY_WINDOW = 366


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress_percent(current_page: Optional[int], total_pages: Optional[int]) -> int:
    """Percentage of a book read, rounded half up.

    Returns 0 when the page count is unknown. Not capped at 100.
    """
    if not total_pages or total_pages <= 0:
        return 0
    return _round_half_up((current_page or 0) / total_pages * 100)


def classify_status(current_page: Optional[int], total_pages: Optional[int]) -> ItemStatus:
    """Classify an item as completed, reading or want-to-read."""
    current_page = current_page or 0
    if total_pages and total_pages > 0 and current_page >= total_pages:
        return ItemStatus.COMPLETED
    if current_page > 0:
        return ItemStatus.READING
    return ItemStatus.WANT_TO_READ


@dataclass
class ItemProgress:
    """Progress of a single item."""

    item_id: str
    title: str
    author: str
    current_page: int
    total_pages: int
    progress_percent: int
    status: ItemStatus

    @classmethod
    def from_item(cls, item: ReadingItem) -> "ItemProgress":
        """Create from ReadingItem model."""
        return cls(
            item_id=item.id,
            title=item.title,
            author=item.author,
            current_page=item.current_page or 0,
            total_pages=item.total_pages or 0,
            progress_percent=progress_percent(item.current_page, item.total_pages),
            status=classify_status(item.current_page, item.total_pages),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "id": self.item_id,
            "title": self.title,
            "author": self.author,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "progress": self.progress_percent,
            "status": self.status.value,
        }


@dataclass
class LibrarySummary:
    """Cross-library totals."""

    total_books: int = 0
    total_pages: int = 0
    current_pages: int = 0
    overall_progress: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "totalBooks": self.total_books,
            "totalPages": self.total_pages,
            "currentPages": self.current_pages,
            "overallProgress": self.overall_progress,
        }


@dataclass
class DailyPages:
    """Pages read on each day of a window, oldest first."""

    days: list[tuple[date, int]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(pages for _, pages in self.days)

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "days": [{"date": day.isoformat(), "pagesRead": pages} for day, pages in self.days],
            "total": self.total,
        }


def summarize(items: Iterable[ReadingItem]) -> LibrarySummary:
    """Compute library totals from a user's items."""
    items = list(items)
    total_pages = sum(item.total_pages or 0 for item in items)
    current_pages = sum(item.current_page or 0 for item in items)

    return LibrarySummary(
        total_books=len(items),
        total_pages=total_pages,
        current_pages=current_pages,
        overall_progress=progress_percent(current_pages, total_pages),
    )


class ReadingStatsService:
    """Computes reading statistics for a user."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize stats service.

        Args:
            db: Database instance
        """
        self.db = db or get_db()
        self.registry = ItemRegistry(self.db)
        self.log = ProgressLog(self.db)

    def get_summary(self, user_id: str) -> LibrarySummary:
        """Get totals across all of a user's items."""
        return summarize(self.registry.list_for_user(user_id))

    def get_item_progress(self, user_id: str) -> list[ItemProgress]:
        """Get progress and status for each item, most recently updated first."""
        progress = []
        for item in self.registry.list_for_user(user_id):
            entry = ItemProgress.from_item(item)
            if entry.progress_percent > 100:
                logger.warning(
                    "'%s' is at %d%% (page %d of %d)",
                    entry.title,
                    entry.progress_percent,
                    entry.current_page,
                    entry.total_pages,
                )
            progress.append(entry)
        return progress

    def get_daily_pages(
        self, user_id: str, days: int = 7, end_date: Optional[date] = None
    ) -> DailyPages:
        """Get pages read per day for the last ``days`` days.

        Days without log entries are included with zero pages.

        Args:
            user_id: Owning user
            days: Window length, including ``end_date``
            end_date: Last day of the window (default: today)

        Raises:
            ValidationError: If ``days`` exceeds MAX_DAILY_WINDOW
        """
        if end_date is None:
            end_date = date.today()
        if days > MAX_DAILY_WINDOW:
            raise ValidationError(f"days must be at most {MAX_DAILY_WINDOW}")
        days = max(1, days)
        start_date = end_date - timedelta(days=days - 1)

        totals = self.log.pages_by_day(user_id, start_date, end_date)
        window = [start_date + timedelta(days=i) for i in range(days)]
        return DailyPages(days=[(day, totals.get(day, 0)) for day in window])
