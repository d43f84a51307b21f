"""
services/token_service.py — JWT issuance and decoding.

Token design:
  - HS256, signed with JWT_SECRET_KEY.
  - Payload: sub (user_id as str), type ("access" | "refresh"), iat, exp, jti.
  - Access tokens are short-lived (JWT_ACCESS_TOKEN_EXPIRES, default 1 hour),
    refresh tokens long-lived (JWT_REFRESH_TOKEN_EXPIRES, default 7 days).
  - The `type` claim stops a refresh token from being replayed as an access
    token at the authentication gate, and vice versa.

Like the password hasher, TokenService is a Flask extension object. Secret,
algorithm and lifetimes are read once in init_app(); an empty secret is a
fatal startup error.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from tasklist.app.errors import ErrorCode, unauthorized

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """The parts of a token payload the application cares about."""

    subject: int
    token_type: str | None
    expires_at: datetime | None


class TokenService:

    def __init__(
            self,
            secret: str | None = None,
            algorithm: str = "HS256",
            access_ttl: timedelta = timedelta(hours=1),
            refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def init_app(self, app) -> None:
        secret = app.config.get("JWT_SECRET_KEY")
        if not secret:
            raise RuntimeError(
                "JWT_SECRET_KEY is not configured. The API cannot issue or "
                "verify tokens without it."
            )
        self.secret = secret
        self.algorithm = app.config.get("JWT_ALGORITHM", self.algorithm)
        self.access_ttl = app.config.get("JWT_ACCESS_TOKEN_EXPIRES", self.access_ttl)
        self.refresh_ttl = app.config.get("JWT_REFRESH_TOKEN_EXPIRES", self.refresh_ttl)
        app.extensions["token_service"] = self

    # ── Issuance ───────────────────────────────────────────────────────────

    def issue_access_token(self, user_id: int) -> str:
        return self._issue(user_id, ACCESS, self.access_ttl)

    def issue_refresh_token(self, user_id: int) -> str:
        return self._issue(user_id, REFRESH, self.refresh_ttl)

    def _issue(self, user_id: int, token_type: str, ttl: timedelta) -> str:
        if not self.secret:
            raise RuntimeError("TokenService used before init_app().")
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            # Guarantees each issued token is unique even within the same second.
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    # ── Reading ────────────────────────────────────────────────────────────

    def decode(self, token: str) -> TokenClaims:
        """
        Reads the claims WITHOUT checking the signature or expiry.

        Only used by the legacy refresh flow when
        JWT_VERIFY_REFRESH_SIGNATURE is disabled. Never trust the result for
        authentication.
        """
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            raise unauthorized("The token could not be decoded.")
        return self._claims(payload)

    def verify(self, token: str, expected_type: str = ACCESS) -> TokenClaims:
        """
        Full signature, expiry and type check.

        Raises AppError(TOKEN_EXPIRED, 401) for an expired token and
        AppError(TOKEN_INVALID, 401) for anything else that is wrong.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise unauthorized("The token has expired.", ErrorCode.TOKEN_EXPIRED)
        except jwt.InvalidTokenError:
            # Covers: bad signature, malformed token, missing claims, etc.
            raise unauthorized("The token is invalid or has been tampered with.")

        claims = self._claims(payload)
        if claims.token_type != expected_type:
            raise unauthorized(f"Expected a token of type '{expected_type}'.")
        return claims

    @staticmethod
    def _claims(payload: dict) -> TokenClaims:
        try:
            subject = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise unauthorized("The token does not carry a valid subject.")

        exp = payload.get("exp")
        expires_at = (
            datetime.fromtimestamp(exp, tz=timezone.utc)
            if isinstance(exp, (int, float)) else None
        )
        return TokenClaims(
            subject=subject,
            token_type=payload.get("type"),
            expires_at=expires_at,
        )
