"""Manager for user settings and preferences."""

from typing import Optional

from ..db.models import User, utc_now
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError
from .schemas import SettingsResponse, SettingsUpdate, UserSettings


class SettingsManager:
    """Reads and writes user settings."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize settings manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def get_settings(self, user_id: str) -> SettingsResponse:
        """Get a user's settings with defaults applied.

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")

            settings = UserSettings.from_user(user)
            return SettingsResponse(
                **settings.model_dump(),
                registration_date=user.created_at,
            )

    def update_settings(self, user_id: str, update: SettingsUpdate) -> UserSettings:
        """Update timezone and daily goals.

        Streak fields are owned by the streak tracker and cannot be set here.

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError("User not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(user, field, value)
            user.updated_at = utc_now()
            session.flush()

            return UserSettings.from_user(user)
