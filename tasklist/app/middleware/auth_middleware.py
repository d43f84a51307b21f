"""
middleware/auth_middleware.py — the authentication gate.

The @require_auth decorator:
  1. Reads the access token from the `accessToken` cookie, or failing that
     from the Authorization header ("Bearer <token>")
  2. Verifies signature, expiry and token type via the token service
  3. Resolves the subject to an existing user
  4. Attaches an AuthContext to flask.g.identity for the rest of the request

Outcomes are binary: the view runs with g.identity set, or an AppError is
raised and the global error handler renders it. The gate only reads from
the database; it never writes.

Error codes:
  TOKEN_MISSING  (403) — neither cookie nor Authorization header present
  TOKEN_INVALID  (401) — malformed header, bad signature, wrong token type,
                         or the subject no longer exists
  TOKEN_EXPIRED  (401) — valid token whose exp claim is in the past

Ownership is not checked here. Services receive the AuthContext and scope
every query to identity.user_id.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable

from flask import current_app, g, request

from tasklist.app.errors import forbidden, unauthorized
from tasklist.app.extensions import db, tokens
from tasklist.app.models.user import User
from tasklist.app.services.token_service import ACCESS


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, as seen by route handlers and services."""

    user_id: int
    username: str


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces token authentication.

    Usage:
        @todos_bp.route("/today", methods=["GET"])
        @require_auth
        def today():
            identity = g.identity  # always an AuthContext when this runs
            ...
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        g.identity = authenticate_request()
        return f(*args, **kwargs)

    return decorated


def extract_token() -> str | None:
    """
    Returns the raw bearer token for the current request, or None.

    The cookie wins when both are present. A bare "Bearer" with nothing
    after it carries no token and counts as absent; any other header that
    is not "Bearer <token>" is an error.
    """
    cookie_name = current_app.config.get("ACCESS_TOKEN_COOKIE", "accessToken")
    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token

    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return None

    parts = auth_header.split()
    if not parts or (len(parts) == 1 and parts[0].lower() == "bearer"):
        return None
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise unauthorized(
            "Authorization header must be in the format: Bearer <token>."
        )
    return parts[1]


def authenticate_request() -> AuthContext:
    """
    Performs the full authentication sequence and returns the caller.

    Separated from the decorator so tests can call it inside a request
    context without wrapping a real view function.
    """
    raw_token = extract_token()
    if raw_token is None:
        raise forbidden(
            "Authentication required. Provide a Bearer token or the access token cookie."
        )

    claims = tokens.verify(raw_token, expected_type=ACCESS)

    user = db.session.get(User, claims.subject)
    if user is None:
        raise unauthorized("The token refers to a user that does not exist.")

    return AuthContext(user_id=user.id, username=user.username)
