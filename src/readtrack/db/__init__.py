"""Database module for local SQLite storage."""

from .models import Note, ReadingItem, ReadingLog, User
from .schemas import (
    ItemStatus,
    ProgressUpdate,
    ReadingItemCreate,
    ReadingItemResponse,
    ReadingItemUpdate,
    ReadingLogResponse,
    parse_payload,
)
from .sqlite import Database, get_db

__all__ = [
    "User",
    "ReadingItem",
    "ReadingLog",
    "Note",
    "ItemStatus",
    "ProgressUpdate",
    "ReadingItemCreate",
    "ReadingItemResponse",
    "ReadingItemUpdate",
    "ReadingLogResponse",
    "parse_payload",
    "Database",
    "get_db",
]
