"""User registration, lookup and account deletion.

Credentials are handled by whatever sits in front of the API; users here
are identified by id only.
"""

import logging
from typing import Optional

from sqlalchemy import select

from ..db.models import User
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError, ValidationError
from ..library.registry import ItemRegistry
from .schemas import UserCreate

logger = logging.getLogger(__name__)


class UserManager:
    """Manages user accounts."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize user manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()
        self.registry = ItemRegistry(self.db)

    def register(self, data: UserCreate) -> User:
        """Register a new user.

        Raises:
            ValidationError: If the email is already registered
        """
        with self.db.get_session() as session:
            existing = session.execute(
                select(User).where(User.email == data.email)
            ).scalar_one_or_none()
            if existing:
                raise ValidationError("Email already registered")

            user = User(email=data.email, name=data.name, streak_days=1)
            session.add(user)
            session.flush()
            session.expunge(user)

        logger.info("Registered user %s", user.id)
        return user

    def get_user(self, user_id: str) -> User:
        """Get a user by id.

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")
            session.expunge(user)
            return user

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        """Get a user by id, or None."""
        if not user_id:
            return None
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user:
                session.expunge(user)
            return user

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        with self.db.get_session() as session:
            user = session.execute(
                select(User).where(User.email == email.strip().lower())
            ).scalar_one_or_none()
            if user:
                session.expunge(user)
            return user

    def delete_account(self, user_id: str) -> None:
        """Delete a user together with their items, logs and notes.

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")

            removed = self.registry.delete_all_for_user(user_id, session=session)
            session.delete(user)

        logger.info("Deleted user %s and %d reading item(s)", user_id, removed)
