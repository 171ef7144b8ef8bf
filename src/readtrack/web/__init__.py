"""JSON HTTP API."""

from .app import USER_ID_HEADER, create_app, run_server

__all__ = [
    "USER_ID_HEADER",
    "create_app",
    "run_server",
]
