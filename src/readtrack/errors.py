"""Typed failures raised by readtrack operations.

Every error carries the HTTP status the web layer answers with, so the
Flask app can turn any of them into a JSON failure with one handler.
"""


class ReadTrackError(Exception):
    """Base exception for readtrack errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Serialize for a JSON error response."""
        return {"message": self.message}


class ValidationError(ReadTrackError):
    """A required field is missing or has the wrong type."""

    status_code = 400


class AuthenticationError(ReadTrackError):
    """The request carries no resolvable user identity."""

    status_code = 401


class NotFoundError(ReadTrackError):
    """A referenced item, note or user does not exist for this user."""

    status_code = 404


class UpstreamServiceError(ReadTrackError):
    """The external text generation service failed."""

    status_code = 502


class PersistenceError(ReadTrackError):
    """The underlying store is unavailable or rejected the write."""

    status_code = 500
