"""Reading item registry.

Owns one record per (user, title, author) and keeps its page counters.
Progress updates go through ``upsert_on_progress``; manual add/edit from
the library page goes through ``create_or_update_direct``.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.models import Note, ReadingItem, ReadingLog, utc_now
from ..db.schemas import ReadingItemCreate, ReadingItemUpdate
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def compute_pages_read(previous_page: Optional[int], current_page_after: int) -> int:
    """Pages read by one update. Backwards moves count as zero."""
    return max(0, current_page_after - (previous_page or 0))


def _clean_author(author: Optional[str]) -> str:
    return (author or "").strip()


class ItemRegistry:
    """Manages reading items for each user."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize item registry.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    # ========================================================================
    # Lookup
    # ========================================================================

    def find_item(
        self,
        user_id: str,
        title: str,
        author: Optional[str] = None,
        session: Optional[Session] = None,
    ) -> Optional[ReadingItem]:
        """Find an item by its (user, title, author) identity."""

        def _find(s: Session) -> Optional[ReadingItem]:
            stmt = select(ReadingItem).where(
                ReadingItem.user_id == user_id,
                ReadingItem.title == title.strip(),
                ReadingItem.author == _clean_author(author),
            )
            return s.execute(stmt).scalar_one_or_none()

        if session:
            return _find(session)
        with self.db.get_session() as s:
            item = _find(s)
            if item:
                s.expunge(item)
            return item

    def get_item(
        self, user_id: str, item_id: str, session: Optional[Session] = None
    ) -> ReadingItem:
        """Get one of the user's items by id.

        Raises:
            NotFoundError: If the item does not exist or belongs to another user
        """

        def _get(s: Session) -> ReadingItem:
            item = s.get(ReadingItem, item_id)
            if item is None or item.user_id != user_id:
                raise NotFoundError("Reading item not found")
            return item

        if session:
            return _get(session)
        with self.db.get_session() as s:
            item = _get(s)
            s.expunge(item)
            return item

    def list_for_user(self, user_id: str) -> list[ReadingItem]:
        """Get all of a user's items, most recently updated first."""
        with self.db.get_session() as session:
            stmt = (
                select(ReadingItem)
                .where(ReadingItem.user_id == user_id)
                .order_by(ReadingItem.updated_at.desc(), ReadingItem.created_at.desc())
            )
            items = list(session.execute(stmt).scalars().all())
            for item in items:
                session.expunge(item)
            return items

    # ========================================================================
    # Mutations
    # ========================================================================

    def upsert_on_progress(
        self,
        user_id: str,
        title: str,
        current_page_after: int,
        author: Optional[str] = None,
        topic: Optional[str] = None,
        school: Optional[str] = None,
        total_pages: Optional[int] = None,
        session: Optional[Session] = None,
    ) -> tuple[ReadingItem, int]:
        """Apply a page update to an item, creating the item if needed.

        The current page is always set to ``current_page_after``, even when it
        moves backwards; only the returned page delta is clamped at zero.
        ``total_pages`` is written only when a positive value is supplied.

        Args:
            user_id: Owning user
            title: Book title (required)
            current_page_after: Page the reader is on now
            author: Book author
            topic: Topic, used only when the item is created
            school: Category tag, used only when the item is created
            total_pages: Page count of the book
            session: Optional session to join

        Returns:
            Tuple of (updated item, pages read by this update)

        Raises:
            ValidationError: If the title is blank
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")

        def _upsert(s: Session) -> tuple[ReadingItem, int]:
            item = self.find_item(user_id, title, author, session=s)
            if item is None:
                item = ReadingItem(
                    user_id=user_id,
                    title=title.strip(),
                    author=_clean_author(author),
                    topic=topic,
                    school=school,
                    total_pages=total_pages if total_pages and total_pages > 0 else 0,
                    current_page=0,
                )
                s.add(item)
                logger.debug("Created reading item '%s' for user %s", item.title, user_id)

            pages_read = compute_pages_read(item.current_page, current_page_after)

            item.current_page = current_page_after
            if total_pages is not None and total_pages > 0:
                item.total_pages = total_pages
            item.updated_at = utc_now()
            s.flush()

            if item.total_pages and item.current_page > item.total_pages:
                logger.warning(
                    "Current page %s exceeds total pages %s for '%s'",
                    item.current_page,
                    item.total_pages,
                    item.title,
                )

            return item, pages_read

        if session:
            return _upsert(session)
        with self.db.get_session() as s:
            item, pages_read = _upsert(s)
            s.expunge(item)
            return item, pages_read

    def create_or_update_direct(self, user_id: str, data: ReadingItemCreate) -> ReadingItem:
        """Add an item manually, or edit the existing one with the same identity.

        On update only the fields present in ``data`` are written; fields the
        caller left out keep their stored values.

        Raises:
            ValidationError: If the title is blank
        """
        if not data.title or not data.title.strip():
            raise ValidationError("Title is required")

        with self.db.get_session() as session:
            item = self.find_item(user_id, data.title, data.author, session=session)
            if item is None:
                item = ReadingItem(
                    user_id=user_id,
                    title=data.title.strip(),
                    author=_clean_author(data.author),
                    topic=data.topic,
                    school=data.school,
                    total_pages=data.total_pages or 0,
                    current_page=data.current_page or 0,
                )
                session.add(item)
            else:
                supplied = data.model_dump(exclude_unset=True)
                for field in ("topic", "school"):
                    if field in supplied:
                        setattr(item, field, supplied[field])
                for field in ("total_pages", "current_page"):
                    if supplied.get(field) is not None:
                        setattr(item, field, supplied[field])
                item.updated_at = utc_now()

            session.flush()
            session.expunge(item)
            return item

    def update_item(self, user_id: str, item_id: str, data: ReadingItemUpdate) -> ReadingItem:
        """Update an item by id with the supplied fields only.

        Raises:
            NotFoundError: If the item does not exist for this user
            ValidationError: If the new title and author belong to another item
        """
        supplied = data.model_dump(exclude_unset=True)

        with self.db.get_session() as session:
            item = self.get_item(user_id, item_id, session=session)

            new_title = supplied.get("title") or item.title
            new_author = item.author
            if "author" in supplied:
                new_author = _clean_author(supplied["author"])
            if (new_title, new_author) != (item.title, item.author):
                holder = self.find_item(user_id, new_title, new_author, session=session)
                if holder is not None and holder.id != item.id:
                    raise ValidationError("Another reading item already has this title and author")

            for field, value in supplied.items():
                if field == "author":
                    value = _clean_author(value)
                elif value is None:
                    continue
                setattr(item, field, value)
            item.updated_at = utc_now()

            session.flush()
            session.expunge(item)
            return item

    def delete_item(self, user_id: str, item_id: str) -> None:
        """Delete an item and its progress log.

        Raises:
            NotFoundError: If the item does not exist for this user
        """
        with self.db.get_session() as session:
            item = self.get_item(user_id, item_id, session=session)
            session.delete(item)

    def delete_all_for_user(self, user_id: str, session: Optional[Session] = None) -> int:
        """Remove every item, log entry and note a user owns.

        Returns:
            Number of reading items removed
        """

        def _delete(s: Session) -> int:
            s.execute(delete(ReadingLog).where(ReadingLog.user_id == user_id))
            s.execute(delete(Note).where(Note.user_id == user_id))
            result = s.execute(delete(ReadingItem).where(ReadingItem.user_id == user_id))
            return result.rowcount or 0

        if session:
            return _delete(session)
        with self.db.get_session() as s:
            return _delete(s)
