"""
routes/auth.py — Authentication route handlers.

Layer rules:
  - Parse request body
  - Validate with the appropriate schema (raises ValidationError on bad input)
  - Call exactly ONE service function
  - Commit the DB session
  - Return the success envelope via respond()

No business logic here. No DB queries.
AppError propagates to the global error handler in app/__init__.py — routes
never catch it.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/signup          → 201
  POST   /auth/login           → 200
  POST   /auth/logout          → 200  (auth)
  POST   /auth/password-reset  → 200  (auth)
  POST   /auth/refresh-token   → 200  (auth)
"""

from __future__ import annotations

from flask import Blueprint, current_app, g

from tasklist.app.extensions import db
from tasklist.app.middleware.auth_middleware import require_auth
from tasklist.app.responses import json_body, respond
from tasklist.app.schemas.auth_schema import (
    LoginSchema,
    PasswordResetSchema,
    RefreshTokenSchema,
    SignupSchema,
)
from tasklist.app.services import auth_service

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/signup", methods=["POST"])
def signup():
    """POST /auth/signup — Create an account. (No auth required.)"""
    data = SignupSchema().load(json_body())
    result = auth_service.signup_user(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return respond({"user": result}, "User created successfully", 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login — Authenticate; return tokens. (No auth required.)"""
    data = LoginSchema().load(json_body())
    result = auth_service.login_user(
        username=data["username"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return respond(result, "Login successful")


@auth_bp.route("/logout", methods=["POST"])
@require_auth
def logout():
    """POST /auth/logout — Clear stored tokens and token cookies. Idempotent."""
    auth_service.logout_user(user_id=g.identity.user_id, session=db.session)
    db.session.commit()

    response, status = respond({"message": "Logout successful"}, "Logout successful")
    response.delete_cookie(current_app.config.get("ACCESS_TOKEN_COOKIE", "accessToken"))
    response.delete_cookie(current_app.config.get("REFRESH_TOKEN_COOKIE", "refreshToken"))
    return response, status


@auth_bp.route("/password-reset", methods=["POST"])
@require_auth
def password_reset():
    """POST /auth/password-reset — Change password after re-checking the old one."""
    data = PasswordResetSchema().load(json_body())
    auth_service.reset_password(
        user_id=g.identity.user_id,
        old_password=data["old_password"],
        new_password=data["new_password"],
        session=db.session,
    )
    db.session.commit()
    return respond({"message": "Password reset successful"}, "Password reset successful")


@auth_bp.route("/refresh-token", methods=["POST"])
@require_auth
def refresh_token():
    """POST /auth/refresh-token — Exchange a refresh token for a new access token."""
    data = RefreshTokenSchema().load(json_body())
    result = auth_service.refresh_access_token(
        user_id=g.identity.user_id,
        raw_refresh_token=data["token"],
        session=db.session,
        verify_signature=current_app.config.get("JWT_VERIFY_REFRESH_SIGNATURE", True),
    )
    db.session.commit()
    return respond(result, "Token refreshed")
