"""Reading notes."""

from .manager import NotesManager
from .schemas import NoteCreate, NoteResponse, NoteUpdate

__all__ = [
    "NotesManager",
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
]
