"""Tests for UserManager."""

import pytest
from pydantic import ValidationError as SchemaError
from sqlalchemy import func, select

from readtrack.db.models import Note, ReadingItem, ReadingLog
from readtrack.db.schemas import ProgressUpdate
from readtrack.errors import NotFoundError, ValidationError
from readtrack.notes.manager import NotesManager
from readtrack.notes.schemas import NoteCreate
from readtrack.reading.progress import ProgressTracker
from readtrack.users.manager import UserManager
from readtrack.users.schemas import UserCreate


@pytest.fixture
def manager(db):
    """Create a UserManager with test database."""
    return UserManager(db)


def count(db, model) -> int:
    with db.get_session() as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


class TestRegister:
    """Tests for register."""

    def test_register(self, manager):
        """Test registering a user."""
        user = manager.register(UserCreate(email="  Reader@Example.com ", name="Reader"))

        assert user.id is not None
        assert user.email == "reader@example.com"
        assert user.streak_days == 1
        assert user.last_active_date is None

    def test_duplicate_email(self, manager, user):
        """Test that an email can only be registered once."""
        with pytest.raises(ValidationError, match="already registered"):
            manager.register(UserCreate(email="READER@example.com"))

    def test_invalid_email(self):
        """Test that an address without @ is rejected."""
        with pytest.raises(SchemaError):
            UserCreate(email="not-an-email")


class TestLookup:
    """Tests for user lookup."""

    def test_get_user(self, manager, user):
        """Test getting a user by id."""
        assert manager.get_user(user.id).email == user.email

    def test_get_missing_user(self, manager):
        """Test getting a user that does not exist."""
        with pytest.raises(NotFoundError):
            manager.get_user("missing")

    def test_find_user(self, manager, user):
        """Test optional lookup."""
        assert manager.find_user(user.id) is not None
        assert manager.find_user("missing") is None
        assert manager.find_user(None) is None

    def test_get_by_email(self, manager, user):
        """Test lookup by email."""
        assert manager.get_by_email("Reader@Example.com").id == user.id


class TestDeleteAccount:
    """Tests for delete_account."""

    def test_removes_owned_data(self, manager, db, user_id, other_user_id):
        """Test that deleting a user removes only their data."""
        tracker = ProgressTracker(db)
        tracker.record_progress(user_id, ProgressUpdate(title="Sapiens", current_page_after=10))
        tracker.record_progress(
            other_user_id, ProgressUpdate(title="Sapiens", current_page_after=20)
        )
        NotesManager(db).create_note(user_id, NoteCreate(book_title="Sapiens", note="Good."))

        manager.delete_account(user_id)

        assert manager.find_user(user_id) is None
        assert count(db, ReadingItem) == 1
        assert count(db, ReadingLog) == 1
        assert count(db, Note) == 0

    def test_delete_missing_user(self, manager):
        """Test deleting a user that does not exist."""
        with pytest.raises(NotFoundError):
            manager.delete_account("missing")
