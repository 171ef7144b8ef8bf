"""Pydantic schemas for reading notes."""

from typing import Any, Optional, Union

from pydantic import Field, field_validator

from ..db.models import Note
from ..db.schemas import CamelModel


def split_tags(value: Any) -> list[str]:
    """Accept tags as a list or a comma-separated string."""
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    if isinstance(value, (list, tuple)):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    return []


class NoteCreate(CamelModel):
    """Schema for creating a note."""

    book_title: str = Field(..., min_length=1)
    author: Optional[str] = None
    note: str = Field(..., min_length=1)
    tags: Union[list[str], str, None] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Split and trim tags."""
        return split_tags(v)


class NoteUpdate(CamelModel):
    """Schema for updating a note. Only supplied fields are written."""

    book_title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = None
    note: Optional[str] = None
    tags: Union[list[str], str, None] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Split and trim tags."""
        return split_tags(v)


class NoteResponse(CamelModel):
    """Schema for note responses."""

    id: str
    book_title: str
    author: Optional[str] = None
    note: str
    tags: list[str] = Field(default_factory=list)
    date: str
    created_at: str
    updated_at: str

    @classmethod
    def from_note(cls, note: Note) -> "NoteResponse":
        """Create from Note model."""
        return cls(
            id=note.id,
            book_title=note.book_title,
            author=note.author,
            note=note.note or "",
            tags=note.get_tags(),
            date=note.date,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
