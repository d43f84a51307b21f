"""
schemas/auth_schema.py — Marshmallow schemas for authentication endpoints.

Validation responsibility:
  - This file: field presence, types, lengths, formats, regex patterns, and
    username normalisation (trim + lowercase).
  - services/auth_service.py: username / email uniqueness (needs a DB lookup)
    and credential checks.

IMPORTANT: All schemas inherit from marshmallow.Schema directly.
           Do NOT use ma.Schema — it requires an active Flask app context
           and breaks unit tests. See extensions.py.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, pre_load, validate

from tasklist.app.services.password_hasher import MAX_PASSWORD_BYTES

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
MIN_PASSWORD_LENGTH = 8


def _normalise_username(data):
    """Trims and lowercases `username` in a raw payload before validation."""
    if isinstance(data, dict) and isinstance(data.get("username"), str):
        data = dict(data)
        data["username"] = data["username"].strip().lower()
    return data


def validate_password(value: str) -> None:
    """Password rules shared by signup and password reset."""
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long."
        )


class SignupSchema(Schema):
    """
    POST /auth/signup

    Field rules:
      username : 3–20 chars, letters, numbers and underscores; lowercased
      email    : valid email format
      password : at least 8 chars, at most 72 bytes (bcrypt input limit)
    """

    username = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=3,
                max=20,
                error="Username must be between 3 and 20 characters.",
            ),
            validate.Regexp(
                USERNAME_PATTERN,
                error="Username can only contain letters, numbers, and underscores.",
            ),
        ],
    )

    email = fields.Email(
        required=True,
        validate=validate.Length(max=255),
        error_messages={"invalid": "Invalid email address."},
    )

    password = fields.Str(required=True, load_only=True, validate=validate_password)

    @pre_load
    def normalise(self, data, **kwargs):
        data = _normalise_username(data)
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data)
            data["email"] = data["email"].strip()
        return data


class LoginSchema(Schema):
    """
    POST /auth/login

    Only presence is checked here. Whether the user exists and the password
    matches is decided in auth_service.py.
    """

    username = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalise(self, data, **kwargs):
        return _normalise_username(data)


class PasswordResetSchema(Schema):
    """POST /auth/password-reset — both passwords are required and non-empty."""

    old_password = fields.Str(
        required=True,
        load_only=True,
        data_key="oldPassword",
        validate=validate.Length(min=1),
    )
    new_password = fields.Str(
        required=True,
        load_only=True,
        data_key="newPassword",
        validate=validate_password,
    )


class RefreshTokenSchema(Schema):
    """
    POST /auth/refresh-token

    Expects the refresh token string as `token`. Its validity is checked in
    auth_service.py.
    """

    token = fields.Str(required=True, validate=validate.Length(min=1))
