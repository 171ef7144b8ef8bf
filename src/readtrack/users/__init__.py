"""User accounts."""

from .manager import UserManager
from .schemas import UserCreate, UserResponse

__all__ = [
    "UserManager",
    "UserCreate",
    "UserResponse",
]
