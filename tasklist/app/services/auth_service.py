"""
services/auth_service.py — Account lifecycle business logic.

Responsibilities:
  - Signup: uniqueness checks, password hashing, user creation
  - Login: credential check, access + refresh token issuance
  - Logout: clearing the stored tokens (idempotent)
  - Password reset: old-password check, single re-hash of the new password
  - Refresh: exchanging a refresh token for a new access token

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request, flask.g, or HTTP response objects
  - Commits are the route's responsibility — only flush here

Password storage:
  - Hashed with bcrypt through the shared PasswordHasher (extensions.hasher)
  - The hash is computed exactly once per plaintext change
  - Raw passwords and tokens are never logged
"""

from __future__ import annotations

import hmac
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasklist.app.errors import (
    AppError,
    ErrorCode,
    conflict,
    not_found,
    unauthorized,
)
from tasklist.app.extensions import hasher, tokens
from tasklist.app.models.user import User
from tasklist.app.services.token_service import REFRESH
from tasklist.utils.timestamps import as_utc

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _build_user_dict(user: User) -> dict:
    """Public projection of a user. Never includes the hash or tokens."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "createdAt": as_utc(user.created_at).isoformat(),
    }


def _get_user_or_401(user_id: int, session: Session) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise unauthorized(
            "The authenticated user no longer exists.",
            ErrorCode.TOKEN_INVALID,
        )
    return user


def _find_by_username(username: str, session: Session) -> User | None:
    return session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()


def _find_by_email(email: str, session: Session) -> User | None:
    return session.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()


# ── Public service functions ───────────────────────────────────────────────

def signup_user(
        username: str,
        email: str,
        password: str,
        session: Session,
) -> dict:
    """
    Creates a new user account.

    `username` arrives already trimmed and lowercased by SignupSchema.

    Raises:
      AppError(DUPLICATE_USERNAME, 409) — username already taken
      AppError(DUPLICATE_EMAIL, 409)    — email already registered

    Returns: the public user projection.
    """
    if _find_by_username(username, session) is not None:
        raise conflict("Username is already in use.", ErrorCode.DUPLICATE_USERNAME)

    if _find_by_email(email, session) is not None:
        raise conflict("Email is already in use.", ErrorCode.DUPLICATE_EMAIL)

    user = User(
        username=username,
        email=email,
        password_hash=hasher.hash(password),
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same username/email.
        session.rollback()
        raise conflict(
            "Username or email is already in use.",
            ErrorCode.DUPLICATE_USERNAME,
        )

    logger.info("Signed up user id=%s username=%s", user.id, user.username)
    return _build_user_dict(user)


def login_user(
        username: str,
        password: str,
        session: Session,
) -> dict:
    """
    Validates credentials and issues a new access + refresh token pair.

    Both tokens are stored on the user record, replacing any previous pair.

    Raises:
      AppError(USER_NOT_FOUND, 404)      — no user with that username
      AppError(INVALID_CREDENTIALS, 401) — password does not match

    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    user = _find_by_username(username, session)
    if user is None:
        raise not_found("User not found.", ErrorCode.USER_NOT_FOUND)

    if not hasher.verify(password, user.password_hash):
        logger.info("Rejected login for user id=%s: wrong password", user.id)
        raise unauthorized(
            "The username or password is incorrect.",
            ErrorCode.INVALID_CREDENTIALS,
        )

    user.access_token = tokens.issue_access_token(user.id)
    user.refresh_token = tokens.issue_refresh_token(user.id)
    session.flush()

    logger.info("Logged in user id=%s", user.id)
    return {
        "user": _build_user_dict(user),
        "accessToken": user.access_token,
        "refreshToken": user.refresh_token,
    }


def logout_user(user_id: int, session: Session) -> None:
    """
    Clears the stored access and refresh tokens.

    Idempotent: logging out an already logged-out user succeeds and leaves
    both tokens null.
    """
    user = _get_user_or_401(user_id, session)
    user.access_token = None
    user.refresh_token = None
    session.flush()
    logger.info("Logged out user id=%s", user_id)


def reset_password(
        user_id: int,
        old_password: str,
        new_password: str,
        session: Session,
) -> None:
    """
    Replaces the password of an authenticated user.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) — old password does not match
    """
    user = _get_user_or_401(user_id, session)

    if not hasher.verify(old_password, user.password_hash):
        raise unauthorized(
            "Old password is incorrect.",
            ErrorCode.INVALID_CREDENTIALS,
        )

    user.password_hash = hasher.hash(new_password)
    session.flush()
    logger.info("Password reset for user id=%s", user_id)


def refresh_access_token(
        user_id: int,
        raw_refresh_token: str,
        session: Session,
        verify_signature: bool = True,
) -> dict:
    """
    Exchanges a refresh token for a new access token.

    With verify_signature=True (the default) the refresh token must carry a
    valid signature, be unexpired and be of type "refresh". With
    verify_signature=False its claims are only decoded, which is the legacy
    behaviour and must not be enabled in production.

    In both modes the token must belong to the authenticated caller and be
    the refresh token currently stored for them, so a logout revokes it.
    The refresh token is not rotated.

    Raises:
      AppError(REFRESH_TOKEN_INVALID, 401) — any of the checks above fails

    Returns: {"accessToken": "..."}
    """
    try:
        if verify_signature:
            claims = tokens.verify(raw_refresh_token, expected_type=REFRESH)
        else:
            claims = tokens.decode(raw_refresh_token)
    except AppError:
        raise unauthorized(
            "Invalid or expired refresh token.",
            ErrorCode.REFRESH_TOKEN_INVALID,
        )

    user = session.get(User, claims.subject)
    if user is None or user.id != user_id:
        raise unauthorized(
            "Invalid or expired refresh token.",
            ErrorCode.REFRESH_TOKEN_INVALID,
        )

    if user.refresh_token is None or not hmac.compare_digest(
            user.refresh_token.encode("utf-8"),
            raw_refresh_token.encode("utf-8"),
    ):
        raise unauthorized(
            "The refresh token has been revoked.",
            ErrorCode.REFRESH_TOKEN_INVALID,
        )

    user.access_token = tokens.issue_access_token(user.id)
    session.flush()

    logger.info("Refreshed access token for user id=%s", user.id)
    return {"accessToken": user.access_token}
