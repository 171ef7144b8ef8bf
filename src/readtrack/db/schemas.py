"""Pydantic schemas for data validation.

Request payloads arrive with camelCase keys (``totalPages``,
``currentPageAfter``) and responses are serialized the same way; Python code
uses the snake_case field names.
"""

from enum import Enum
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from ..errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ItemStatus(str, Enum):
    """Derived reading status of an item."""

    WANT_TO_READ = "want-to-read"
    READING = "reading"
    COMPLETED = "completed"


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self, **kwargs: Any) -> dict:
        """Dump with camelCase keys for a JSON response."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


def parse_payload(model: type[ModelT], data: Optional[dict]) -> ModelT:
    """Validate a raw payload, raising readtrack's ValidationError on failure."""
    if data is None:
        raise ValidationError("Request body is required")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        raise ValidationError(f"{field}: {first['msg']}") from e


# ============================================================================
# Reading Items
# ============================================================================


class ReadingItemCreate(CamelModel):
    """Schema for explicitly adding or editing a reading item."""

    title: str = Field(..., min_length=1, description="Book title")
    author: Optional[str] = None
    topic: Optional[str] = None
    school: Optional[str] = Field(None, description="School of thought / category tag")
    total_pages: Optional[int] = Field(None, ge=0)
    current_page: Optional[int] = Field(None, ge=0)


class ReadingItemUpdate(CamelModel):
    """Schema for updating an item by id. Only supplied fields are written."""

    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = None
    topic: Optional[str] = None
    school: Optional[str] = None
    total_pages: Optional[int] = Field(None, ge=0)
    current_page: Optional[int] = Field(None, ge=0)


class ReadingItemResponse(CamelModel):
    """Schema for reading item responses."""

    id: str
    title: str
    author: str
    topic: Optional[str] = None
    school: Optional[str] = None
    total_pages: int
    current_page: int
    created_at: str
    updated_at: str


# ============================================================================
# Progress Log
# ============================================================================


class ProgressUpdate(CamelModel):
    """A page update: where the reader is now in a book."""

    title: str = Field(..., min_length=1)
    author: Optional[str] = None
    topic: Optional[str] = None
    school: Optional[str] = None
    total_pages: Optional[int] = None  # ignored unless positive
    current_page_after: StrictInt = Field(..., ge=0)

    @field_validator("current_page_after", mode="before")
    @classmethod
    def integral_number(cls, v: Any) -> Any:
        """Accept whole-number floats such as 100.0."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v


class ReadingLogResponse(CamelModel):
    """Schema for reading log responses."""

    id: str
    reading_item_id: str
    date: str
    pages_read: int
    current_page_after: int
    created_at: str
