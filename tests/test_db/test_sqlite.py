"""Tests for database setup and session handling."""

import pytest
from sqlalchemy import inspect, select

from readtrack.db.models import Note, ReadingItem, User
from readtrack.db.sqlite import Database
from readtrack.errors import PersistenceError


class TestDatabase:
    """Tests for Database."""

    def test_create_tables(self, db: Database):
        """Test that all tables are created."""
        tables = set(inspect(db.engine).get_table_names())

        assert {"users", "reading_items", "reading_logs", "notes"} <= tables

    def test_file_database_creates_directory(self, tmp_path):
        """Test that a file database creates its parent directory."""
        path = tmp_path / "nested" / "readtrack.db"
        database = Database(str(path))
        database.create_tables()

        assert path.parent.exists()

    def test_session_commits(self, db: Database):
        """Test that changes are committed when the block exits."""
        with db.get_session() as session:
            session.add(User(email="a@example.com"))

        with db.get_session() as session:
            found = session.execute(select(User)).scalars().all()
            assert [u.email for u in found] == ["a@example.com"]

    def test_session_rolls_back_on_error(self, db: Database):
        """Test that an exception discards the session's changes."""
        with pytest.raises(RuntimeError):
            with db.get_session() as session:
                session.add(User(email="a@example.com"))
                session.flush()
                raise RuntimeError("boom")

        with db.get_session() as session:
            assert session.execute(select(User)).scalars().all() == []

    def test_store_failure_becomes_persistence_error(self, db: Database):
        """Test that a rejected write surfaces as PersistenceError."""
        with db.get_session() as session:
            session.add(User(email="dup@example.com"))

        with pytest.raises(PersistenceError):
            with db.get_session() as session:
                session.add(User(email="dup@example.com"))

    def test_foreign_keys_enforced(self, db: Database):
        """Test that an item cannot reference a missing user."""
        with pytest.raises(PersistenceError):
            with db.get_session() as session:
                session.add(ReadingItem(user_id="missing", title="Orphan"))


class TestNoteTags:
    """Tests for the Note tag helpers."""

    def test_tags_roundtrip(self):
        """Test that tags are stored as JSON."""
        note = Note(book_title="Sapiens", note="Good")
        note.set_tags(["history", "anthropology"])

        assert note.get_tags() == ["history", "anthropology"]

    def test_empty_tags(self):
        """Test that no tags are stored as NULL."""
        note = Note(book_title="Sapiens", note="Good")
        note.set_tags([])

        assert note.tags is None
        assert note.get_tags() == []
