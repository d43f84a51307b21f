"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables:
           - Multiple isolated test app instances
           - Clean separation between app creation and app startup
           - Alembic to import the metadata without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure logging from LOG_LEVEL
  3. Initialise extensions (SQLAlchemy, Marshmallow, password hasher,
     token service) via init_app()
  4. Register route blueprints under /api/v1
  5. Register global error handlers, so every response is either the
     success envelope or the error envelope
  6. Register CORS headers for the configured origins
"""

from __future__ import annotations

import logging
import traceback

from flask import Flask, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from tasklist.config import config_by_name, validate_config, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development", overrides: dict | None = None) -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
        overrides:   Extra config values applied after the config class,
                     mainly for tests (e.g. a different refresh policy).

    Returns:
        A fully configured Flask app ready to serve requests.

    Raises:
        ValueError:   a setting is invalid, or production configuration is
                      missing or insecure.
        RuntimeError: JWT_SECRET_KEY is empty.
    """
    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    validate_config(app)  # raises ValueError on an unknown TODAY_BUCKET_BASIS
    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    app.json.sort_keys = app.config.get("JSON_SORT_KEYS", False)
    _configure_logging(app)

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from tasklist.app.extensions import db, hasher, ma, tokens
    db.init_app(app)
    ma.init_app(app)
    hasher.init_app(app)
    tokens.init_app(app)  # raises RuntimeError without a JWT secret

    # ── Model registration ─────────────────────────────────────────────────
    # Populates SQLAlchemy's MetaData for create_all() and Alembic.
    with app.app_context():
        from tasklist.app.models import task, user  # noqa: F401

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)

    app.logger.debug("Application created with config %r", config_name)
    return app


def _configure_logging(app: Flask) -> None:
    """
    Sets the level of the application logger.

    Service modules log through logging.getLogger(__name__); their names sit
    under the app logger ("tasklist.app") so they share its level and
    handler.
    """
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")))
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    Individual route files only specify the path relative to their resource.
    """
    from tasklist.app.responses import respond
    from tasklist.app.routes.auth import auth_bp
    from tasklist.app.routes.todos import todos_bp

    app.register_blueprint(auth_bp,  url_prefix="/api/v1/auth")
    app.register_blueprint(todos_bp, url_prefix="/api/v1/todos")

    @app.route("/", methods=["GET"])
    def index():
        """GET / — liveness check."""
        return respond({"service": "tasklist"}, "Hello world!")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → its own error envelope and status
      ValidationError → 400, every marshmallow message listed in `errors`
      HTTPException   → werkzeug's status (404 unknown route, 405, 413, ...)
      Exception       → generic 500; full traceback logged

    Stack traces and internal messages never leave the server.
    """
    from tasklist.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (middleware, service, route) into the error envelope.
        """
        if error.http_status >= 500:
            app.logger.error(
                "%s on %s %s: %s\n%s",
                error.code, request.method, request.path, error.message,
                traceback.format_exc(),
            )
        else:
            app.logger.info(
                "%s on %s %s (%s)",
                error.code, request.method, request.path, error.http_status,
            )
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Converts a marshmallow ValidationError into a 400 envelope.

        Every message is reported, prefixed with the wire field name
        (e.g. "dueDate: Missing data for required field.").
        """
        messages = flatten_validation_messages(error.messages)
        return jsonify(
            AppError(ErrorCode.VALIDATION_FAILED, "Invalid input data", 400, messages).to_dict()
        ), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        code = {
            404: ErrorCode.ROUTE_NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
            413: ErrorCode.PAYLOAD_TOO_LARGE,
        }.get(error.code, ErrorCode.HTTP_ERROR)
        status = error.code or 500
        return jsonify(
            AppError(code, error.description or error.name, status).to_dict()
        ), status

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.

        The full traceback is logged to the application logger. The session
        is rolled back so the next request starts clean.
        """
        from tasklist.app.extensions import db

        db.session.rollback()
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify(AppError(
            ErrorCode.INTERNAL_ERROR,
            "An unexpected error occurred. Please try again later.",
            500,
        ).to_dict()), 500


def flatten_validation_messages(messages, prefix: str = "") -> list[str]:
    """
    Flattens marshmallow's nested messages into "field: message" strings.

    {"title": ["Too long."], "tags": {1: ["Not a valid string."]}}
      → ["title: Too long.", "tags.1: Not a valid string."]
    """
    if isinstance(messages, str):
        return [f"{prefix}: {messages}" if prefix else messages]
    if isinstance(messages, list):
        flat: list[str] = []
        for item in messages:
            flat.extend(flatten_validation_messages(item, prefix))
        return flat
    if isinstance(messages, dict):
        flat = []
        for key, value in messages.items():
            if key == "_schema":
                child = prefix
            else:
                child = f"{prefix}.{key}" if prefix else str(key)
            flat.extend(flatten_validation_messages(value, child))
        return flat
    return [str(messages)]


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser clients.

    Origins listed in CORS_ALLOWED_ORIGINS are reflected with credentials
    allowed (token cookies). In DEBUG/TESTING any origin is reflected so a
    frontend on another local port can call the API.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if not origin:
            return response

        allowed = app.config.get("CORS_ALLOWED_ORIGINS") or []
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all or origin in allowed:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response
