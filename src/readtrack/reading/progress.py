"""Reading progress tracking.

A page update moves an item's current page and appends one dated entry to
the progress log. Entries are never merged or edited: several updates on the
same day produce several entries.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import ReadingItem, ReadingLog
from ..db.schemas import ProgressUpdate
from ..db.sqlite import Database, get_db
from ..library.registry import ItemRegistry

logger = logging.getLogger(__name__)


@dataclass
class ProgressResult:
    """Outcome of one page update."""

    item: ReadingItem
    log: ReadingLog

    @property
    def pages_read(self) -> int:
        return self.log.pages_read


class ProgressLog:
    """Append-only log of page deltas."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize progress log.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def append(
        self,
        user_id: str,
        item: ReadingItem,
        pages_read: int,
        current_page_after: int,
        on_date: Optional[date] = None,
        session: Optional[Session] = None,
    ) -> ReadingLog:
        """Record one update as a new log entry.

        Args:
            user_id: Owning user
            item: The item that was updated
            pages_read: Pages read by the update (already clamped at zero)
            current_page_after: Item's page after the update
            on_date: Calendar day of the entry (default: today, local clock)
            session: Optional session to join

        Returns:
            The new log entry
        """
        if on_date is None:
            on_date = date.today()

        def _append(s: Session) -> ReadingLog:
            entry = ReadingLog(
                user_id=user_id,
                reading_item_id=item.id,
                date=on_date.isoformat(),
                pages_read=max(0, pages_read),
                current_page_after=current_page_after,
            )
            s.add(entry)
            s.flush()
            return entry

        if session:
            return _append(session)
        with self.db.get_session() as s:
            entry = _append(s)
            s.expunge(entry)
            return entry

    def list_for_user(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[ReadingLog]:
        """Get a user's log entries, newest first.

        Args:
            user_id: Owning user
            start_date: Earliest day to include (optional)
            end_date: Latest day to include (optional)
            limit: Maximum entries to return (optional)
        """
        with self.db.get_session() as session:
            stmt = select(ReadingLog).where(ReadingLog.user_id == user_id)

            if start_date:
                stmt = stmt.where(ReadingLog.date >= start_date.isoformat())
            if end_date:
                stmt = stmt.where(ReadingLog.date <= end_date.isoformat())

            stmt = stmt.order_by(ReadingLog.date.desc(), ReadingLog.created_at.desc())
            if limit:
                stmt = stmt.limit(limit)

            logs = list(session.execute(stmt).scalars().all())
            for log in logs:
                session.expunge(log)
            return logs

    def list_for_item(self, user_id: str, item_id: str) -> list[ReadingLog]:
        """Get the log entries of one item, newest first."""
        with self.db.get_session() as session:
            stmt = (
                select(ReadingLog)
                .where(ReadingLog.user_id == user_id, ReadingLog.reading_item_id == item_id)
                .order_by(ReadingLog.date.desc(), ReadingLog.created_at.desc())
            )
            logs = list(session.execute(stmt).scalars().all())
            for log in logs:
                session.expunge(log)
            return logs

    def pages_by_day(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[date, int]:
        """Total pages read per calendar day."""
        totals: dict[date, int] = defaultdict(int)
        for log in self.list_for_user(user_id, start_date, end_date):
            totals[date.fromisoformat(log.date)] += log.pages_read or 0
        return dict(totals)


class ProgressTracker:
    """Turns page updates into item state plus log entries."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize progress tracker.

        Args:
            db: Database instance
        """
        self.db = db or get_db()
        self.registry = ItemRegistry(self.db)
        self.log = ProgressLog(self.db)

    def record_progress(
        self,
        user_id: str,
        update: ProgressUpdate,
        on_date: Optional[date] = None,
    ) -> ProgressResult:
        """Apply a page update and log it.

        Item upsert and log append share one transaction.

        Args:
            user_id: Owning user
            update: Validated page update
            on_date: Calendar day to log under (default: today)

        Returns:
            ProgressResult with the updated item and the new log entry
        """
        with self.db.get_session() as session:
            item, pages_read = self.registry.upsert_on_progress(
                user_id,
                update.title,
                update.current_page_after,
                author=update.author,
                topic=update.topic,
                school=update.school,
                total_pages=update.total_pages,
                session=session,
            )
            entry = self.log.append(
                user_id,
                item,
                pages_read,
                update.current_page_after,
                on_date=on_date,
                session=session,
            )
            session.expunge(item)
            session.expunge(entry)

        logger.info(
            "Logged %d page(s) for '%s' (now on page %d)",
            pages_read,
            item.title,
            item.current_page,
        )
        return ProgressResult(item=item, log=entry)
