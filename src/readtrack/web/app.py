"""Flask JSON API for readtrack.

Every route resolves the calling user first, runs one manager operation and
returns JSON. Typed readtrack errors become ``{"message": ...}`` responses
with the error's status code.
"""

import logging
from typing import Callable, Optional

import pydantic
from flask import Flask, Request, jsonify, request

from ..db.schemas import (
    ProgressUpdate,
    ReadingItemCreate,
    ReadingItemResponse,
    ReadingItemUpdate,
    ReadingLogResponse,
    parse_payload,
)
from ..db.sqlite import Database, get_db
from ..discovery.recommendations import RecommendationGateway
from ..errors import AuthenticationError, ReadTrackError
from ..library.registry import ItemRegistry
from ..notes.manager import NotesManager
from ..notes.schemas import NoteCreate, NoteResponse, NoteUpdate
from ..reading.progress import ProgressLog, ProgressTracker
from ..settings.manager import SettingsManager
from ..settings.schemas import SettingsUpdate
from ..stats.analytics import ReadingStatsService
from ..streaks.manager import StreakTracker
from ..users.manager import UserManager
from ..users.schemas import UserCreate, UserResponse

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"

IdentityResolver = Callable[[Request], Optional[str]]


def header_identity_resolver(req: Request) -> Optional[str]:
    """Read the authenticated user id set by the fronting auth layer."""
    user_id = req.headers.get(USER_ID_HEADER, "").strip()
    return user_id or None


def create_app(
    db: Optional[Database] = None,
    gateway: Optional[RecommendationGateway] = None,
    identity_resolver: Optional[IdentityResolver] = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        db: Database instance (default: global database)
        gateway: Recommendation gateway (default: built from config on first use)
        identity_resolver: Maps a request to a user id (default: X-User-Id header)
    """
    app = Flask(__name__)

    db = db or get_db()
    resolve_identity = identity_resolver or header_identity_resolver

    users = UserManager(db)
    settings = SettingsManager(db)
    registry = ItemRegistry(db)
    progress = ProgressTracker(db)
    progress_log = ProgressLog(db)
    streaks = StreakTracker(db)
    stats = ReadingStatsService(db)
    notes = NotesManager(db)
    gateways: dict = {"default": gateway}

    def get_gateway() -> RecommendationGateway:
        if gateways["default"] is None:
            gateways["default"] = RecommendationGateway()
        return gateways["default"]

    def current_user_id() -> str:
        """Resolve the calling user or fail with 401."""
        user_id = resolve_identity(request)
        if not user_id:
            raise AuthenticationError("Missing user identity")
        if users.find_user(user_id) is None:
            raise AuthenticationError("Unknown user")
        return user_id

    def json_body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.errorhandler(ReadTrackError)
    def handle_readtrack_error(error: ReadTrackError):
        """Turn typed failures into JSON responses."""
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(pydantic.ValidationError)
    def handle_schema_error(error: pydantic.ValidationError):
        first = error.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        return jsonify({"message": f"{field}: {first['msg']}"}), 400

    # ------------------------------------------------------------------------
    # Health & users
    # ------------------------------------------------------------------------

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/users", methods=["POST"])
    def register_user():
        """Register a user. Credentials are checked upstream."""
        data = parse_payload(UserCreate, request.get_json(silent=True))
        user = users.register(data)
        return jsonify(UserResponse.model_validate(user).to_json_dict()), 201

    @app.route("/api/user", methods=["DELETE"])
    def delete_user():
        """Delete the account and everything it owns."""
        users.delete_account(current_user_id())
        return jsonify({"success": True})

    @app.route("/api/user/settings", methods=["GET"])
    def get_settings():
        return jsonify(settings.get_settings(current_user_id()).to_json_dict())

    @app.route("/api/user/settings", methods=["PUT"])
    def update_settings():
        user_id = current_user_id()
        update = parse_payload(SettingsUpdate, json_body())
        return jsonify(settings.update_settings(user_id, update).to_json_dict())

    @app.route("/api/user/streak-ping", methods=["POST"])
    def streak_ping():
        """Register activity for today and return the streak."""
        result = streaks.ping(current_user_id())
        return jsonify(result.to_json_dict())

    # ------------------------------------------------------------------------
    # Reading items
    # ------------------------------------------------------------------------

    @app.route("/api/reading-items", methods=["GET"])
    def list_items():
        items = registry.list_for_user(current_user_id())
        return jsonify([ReadingItemResponse.model_validate(i).to_json_dict() for i in items])

    @app.route("/api/reading-items", methods=["POST"])
    def create_or_update_item():
        """Add a book, or edit the one with the same title and author."""
        user_id = current_user_id()
        data = parse_payload(ReadingItemCreate, request.get_json(silent=True))
        item = registry.create_or_update_direct(user_id, data)
        return jsonify(ReadingItemResponse.model_validate(item).to_json_dict()), 201

    @app.route("/api/reading-items/<item_id>", methods=["GET"])
    def get_item(item_id: str):
        item = registry.get_item(current_user_id(), item_id)
        return jsonify(ReadingItemResponse.model_validate(item).to_json_dict())

    @app.route("/api/reading-items/<item_id>", methods=["PUT"])
    def update_item(item_id: str):
        user_id = current_user_id()
        data = parse_payload(ReadingItemUpdate, json_body())
        item = registry.update_item(user_id, item_id, data)
        return jsonify(ReadingItemResponse.model_validate(item).to_json_dict())

    @app.route("/api/reading-items/<item_id>", methods=["DELETE"])
    def delete_item(item_id: str):
        registry.delete_item(current_user_id(), item_id)
        return jsonify({"success": True})

    # ------------------------------------------------------------------------
    # Progress log & stats
    # ------------------------------------------------------------------------

    @app.route("/api/reading-logs", methods=["POST"])
    def create_reading_log():
        """Record where the reader is now in a book."""
        user_id = current_user_id()
        update = parse_payload(ProgressUpdate, request.get_json(silent=True))
        result = progress.record_progress(user_id, update)
        return (
            jsonify({
                "item": ReadingItemResponse.model_validate(result.item).to_json_dict(),
                "log": ReadingLogResponse.model_validate(result.log).to_json_dict(),
            }),
            201,
        )

    @app.route("/api/reading-logs", methods=["GET"])
    def list_reading_logs():
        limit = request.args.get("limit", type=int)
        logs = progress_log.list_for_user(current_user_id(), limit=limit)
        return jsonify([ReadingLogResponse.model_validate(log).to_json_dict() for log in logs])

    @app.route("/api/reading-stats/summary")
    def stats_summary():
        return jsonify(stats.get_summary(current_user_id()).to_dict())

    @app.route("/api/reading-stats/items")
    def stats_items():
        return jsonify([entry.to_dict() for entry in stats.get_item_progress(current_user_id())])

    @app.route("/api/reading-stats/daily")
    def stats_daily():
        days = request.args.get("days", default=7, type=int)
        return jsonify(stats.get_daily_pages(current_user_id(), days=days).to_dict())

    # ------------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------------

    @app.route("/api/notes", methods=["GET"])
    def list_notes():
        found = notes.list_notes(current_user_id(), tag=request.args.get("tag"))
        return jsonify([NoteResponse.from_note(note).to_json_dict() for note in found])

    @app.route("/api/notes", methods=["POST"])
    def create_note():
        user_id = current_user_id()
        data = parse_payload(NoteCreate, request.get_json(silent=True))
        note = notes.create_note(user_id, data)
        return jsonify(NoteResponse.from_note(note).to_json_dict()), 201

    @app.route("/api/notes/<note_id>", methods=["PUT"])
    def update_note(note_id: str):
        user_id = current_user_id()
        data = parse_payload(NoteUpdate, json_body())
        note = notes.update_note(user_id, note_id, data)
        return jsonify(NoteResponse.from_note(note).to_json_dict())

    @app.route("/api/notes/<note_id>", methods=["DELETE"])
    def delete_note(note_id: str):
        notes.delete_note(current_user_id(), note_id)
        return jsonify({"success": True})

    # ------------------------------------------------------------------------
    # AI discovery
    # ------------------------------------------------------------------------

    @app.route("/api/ai/search-book", methods=["POST"])
    def ai_search_book():
        """Suggest books for a free-text query."""
        current_user_id()
        result = get_gateway().search_books(json_body().get("query"))
        return jsonify(result.to_dict())

    @app.route("/api/ai/reading-plan", methods=["POST"])
    def ai_reading_plan():
        """Generate a reading plan for a topic."""
        current_user_id()
        result = get_gateway().reading_plan(json_body().get("topic"))
        return jsonify(result.to_dict())

    return app


def run_server(host: str = "127.0.0.1", port: int = 4000, debug: bool = False) -> None:
    """Run the API server."""
    app = create_app()
    logger.info("API server listening on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
