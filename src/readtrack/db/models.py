"""SQLAlchemy ORM models for the local SQLite database.

Tables:
- users: Registered users and their settings/streak columns
- reading_items: One record per (user, title, author)
- reading_logs: Append-only page deltas per reading item
- notes: Free-text reading notes
"""

import json
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def utc_now() -> str:
    """Current UTC time as an ISO string."""
    return datetime.now(timezone.utc).isoformat()


class User(Base):
    """User model - account identity plus the settings blob as columns."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))

    # Settings (nullable, defaults applied when read)
    timezone: Mapped[Optional[str]] = mapped_column(String(64))
    daily_page_goal: Mapped[Optional[int]] = mapped_column(Integer)
    daily_minutes_goal: Mapped[Optional[int]] = mapped_column(Integer)

    # Streak state
    streak_days: Mapped[Optional[int]] = mapped_column(Integer, default=1)
    last_active_date: Mapped[Optional[str]] = mapped_column(String(10))  # ISO date

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class ReadingItem(Base):
    """Reading item model - a book on a user's shelf with page progress."""

    __tablename__ = "reading_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    # Empty string rather than NULL so the unique key treats "no author" as a value
    author: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    topic: Mapped[Optional[str]] = mapped_column(String(200))
    school: Mapped[Optional[str]] = mapped_column(String(200))

    total_pages: Mapped[int] = mapped_column(Integer, default=0)
    current_page: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now, onupdate=utc_now)

    # Relationships
    reading_logs: Mapped[list["ReadingLog"]] = relationship(
        "ReadingLog", back_populates="reading_item", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "title", "author", name="uq_reading_item_user_title_author"),
    )

    def __repr__(self) -> str:
        return f"<ReadingItem(id={self.id}, title='{self.title}', page={self.current_page})>"


class ReadingLog(Base):
    """Reading log model - one immutable entry per progress update."""

    __tablename__ = "reading_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    reading_item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reading_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    pages_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_page_after: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)

    # Relationships
    reading_item: Mapped["ReadingItem"] = relationship(
        "ReadingItem", back_populates="reading_logs"
    )

    __table_args__ = (Index("ix_reading_logs_user_date", "user_id", "date"),)

    def __repr__(self) -> str:
        return f"<ReadingLog(id={self.id}, item={self.reading_item_id}, date={self.date})>"


class Note(Base):
    """Note model - a user's note about a book."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(500))
    note: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    date: Mapped[str] = mapped_column(String(32), default=utc_now)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, book_title='{self.book_title}')>"

    def get_tags(self) -> list[str]:
        """Get tags as list."""
        if self.tags:
            return json.loads(self.tags)
        return []

    def set_tags(self, tags: list[str]) -> None:
        """Set tags from list."""
        self.tags = json.dumps(tags) if tags else None
