"""Notes manager for per-user reading notes."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import Note, utc_now
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError
from .schemas import NoteCreate, NoteUpdate


class NotesManager:
    """Manages reading notes."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize notes manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def _get_owned(self, session: Session, user_id: str, note_id: str) -> Note:
        note = session.get(Note, note_id)
        if note is None or note.user_id != user_id:
            raise NotFoundError("Note not found")
        return note

    def list_notes(self, user_id: str, tag: Optional[str] = None) -> list[Note]:
        """List a user's notes, most recently updated first.

        Args:
            user_id: Owning user
            tag: Only return notes carrying this tag (optional)
        """
        with self.db.get_session() as session:
            stmt = (
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(Note.updated_at.desc(), Note.created_at.desc())
            )
            notes = list(session.execute(stmt).scalars().all())
            for note in notes:
                session.expunge(note)

        if tag:
            notes = [note for note in notes if tag in note.get_tags()]
        return notes

    def get_note(self, user_id: str, note_id: str) -> Note:
        """Get one of the user's notes.

        Raises:
            NotFoundError: If the note does not exist for this user
        """
        with self.db.get_session() as session:
            note = self._get_owned(session, user_id, note_id)
            session.expunge(note)
            return note

    def create_note(self, user_id: str, data: NoteCreate) -> Note:
        """Create a new note."""
        with self.db.get_session() as session:
            note = Note(
                user_id=user_id,
                book_title=data.book_title,
                author=data.author,
                note=data.note,
            )
            note.set_tags(data.tags or [])

            session.add(note)
            session.flush()
            session.expunge(note)
            return note

    def update_note(self, user_id: str, note_id: str, data: NoteUpdate) -> Note:
        """Update a note with the supplied fields.

        Raises:
            NotFoundError: If the note does not exist for this user
        """
        with self.db.get_session() as session:
            note = self._get_owned(session, user_id, note_id)

            supplied = data.model_dump(exclude_unset=True)
            for field in ("book_title", "author", "note"):
                if isinstance(supplied.get(field), str):
                    setattr(note, field, supplied[field])
            if "tags" in supplied:
                note.set_tags(supplied["tags"] or [])
            note.updated_at = utc_now()

            session.flush()
            session.expunge(note)
            return note

    def delete_note(self, user_id: str, note_id: str) -> None:
        """Delete a note.

        Raises:
            NotFoundError: If the note does not exist for this user
        """
        with self.db.get_session() as session:
            note = self._get_owned(session, user_id, note_id)
            session.delete(note)
