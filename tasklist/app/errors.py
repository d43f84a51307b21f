"""
errors.py — AppError base class and error code registry.

Every error returned by the task-list API is raised as an AppError (or a
subclass) carrying one of the codes defined here. Do not raise strings or
generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - 403 means "no credential was presented"; 401 means "a credential was
    presented and rejected". See the AUTH section of ErrorCode.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.errors      = list(errors) if errors else []

    def to_dict(self) -> dict:
        """Renders the error envelope sent to the client."""
        return {
            "success": False,
            "status":  self.http_status,
            "message": self.message,
            "errors":  self.errors,
        }

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


class HashingError(AppError):
    """The password hashing primitive itself failed (not a wrong password)."""

    def __init__(self, message: str = "Password hashing failed.") -> None:
        super().__init__(ErrorCode.HASHING_FAILED, message, 500)


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# Codes are used for logging and tests; the wire envelope carries the
# status and message only.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Input Errors (400) ─────────────────────────────────────────────────
    VALIDATION_FAILED          = "VALIDATION_FAILED"
    INVALID_BODY               = "INVALID_BODY"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    DUPLICATE_USERNAME         = "DUPLICATE_USERNAME"
    DUPLICATE_EMAIL            = "DUPLICATE_EMAIL"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    USER_NOT_FOUND             = "USER_NOT_FOUND"
    TASK_NOT_FOUND             = "TASK_NOT_FOUND"
    ROUTE_NOT_FOUND            = "ROUTE_NOT_FOUND"

    # ── Auth Errors ────────────────────────────────────────────────────────
    # 403 = nothing was presented to authenticate with
    # 401 = something was presented and it was rejected
    TOKEN_MISSING              = "TOKEN_MISSING"          # 403
    TOKEN_INVALID              = "TOKEN_INVALID"          # 401
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"          # 401
    REFRESH_TOKEN_INVALID      = "REFRESH_TOKEN_INVALID"  # 401
    INVALID_CREDENTIALS        = "INVALID_CREDENTIALS"    # 401

    # ── Transport Errors ───────────────────────────────────────────────────
    METHOD_NOT_ALLOWED         = "METHOD_NOT_ALLOWED"     # 405
    PAYLOAD_TOO_LARGE          = "PAYLOAD_TOO_LARGE"      # 413
    HTTP_ERROR                 = "HTTP_ERROR"             # any other werkzeug status

    # ── System Errors (500) ────────────────────────────────────────────────
    HASHING_FAILED             = "HASHING_FAILED"
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Taxonomy constructors ──────────────────────────────────────────────────
#
# Thin helpers so services read as `raise not_found(...)` rather than
# repeating status codes.
# ──────────────────────────────────────────────────────────────────────────

def bad_request(message: str, errors: list[str] | None = None,
                code: str = ErrorCode.VALIDATION_FAILED) -> AppError:
    return AppError(code, message, 400, errors)


def unauthorized(message: str, code: str = ErrorCode.TOKEN_INVALID) -> AppError:
    return AppError(code, message, 401)


def forbidden(message: str, code: str = ErrorCode.TOKEN_MISSING) -> AppError:
    return AppError(code, message, 403)


def not_found(message: str, code: str) -> AppError:
    return AppError(code, message, 404)


def conflict(message: str, code: str) -> AppError:
    return AppError(code, message, 409)
