"""Pytest configuration and shared fixtures.

This module provides fixtures for testing readtrack, including an
in-memory database and registered users.
"""

from typing import Generator

import pytest

from readtrack.config import reset_config
from readtrack.db.models import User
from readtrack.db.sqlite import Database, reset_db
from readtrack.users.manager import UserManager
from readtrack.users.schemas import UserCreate


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Generator[Database, None, None]:
    """Create an in-memory database for testing."""
    reset_db()
    reset_config()

    database = Database(":memory:")
    database.create_tables()
    yield database

    reset_db()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def user(db: Database) -> User:
    """Register and return a user."""
    return UserManager(db).register(UserCreate(email="reader@example.com", name="Reader"))


@pytest.fixture
def user_id(user: User) -> str:
    """Id of the registered user."""
    return user.id


@pytest.fixture
def other_user_id(db: Database) -> str:
    """Id of a second, unrelated user."""
    return UserManager(db).register(UserCreate(email="other@example.com")).id
