"""Pydantic schemas for users."""

from typing import Optional

from pydantic import Field, field_validator

from ..db.schemas import CamelModel


class UserCreate(CamelModel):
    """Schema for registering a user."""

    email: str = Field(..., min_length=3, max_length=320)
    name: Optional[str] = Field(None, max_length=200)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case the address and require an @."""
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class UserResponse(CamelModel):
    """Schema for user responses."""

    id: str
    email: str
    name: Optional[str] = None
    created_at: str
