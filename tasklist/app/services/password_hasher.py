"""
services/password_hasher.py — bcrypt password hashing.

The hasher is a Flask extension object: created once in extensions.py and
bound to an app with init_app(), which reads BCRYPT_LOG_ROUNDS a single time.
Outside an app (unit tests) it can be constructed with an explicit cost.

Guarantees:
  - hash() generates a fresh salt on every call, so the same plaintext never
    yields the same digest twice.
  - verify() returns False for a wrong password and never raises for it.
    HashingError is raised only when bcrypt itself fails (for example a
    malformed stored digest or a password longer than bcrypt accepts).
  - Plaintext passwords are never logged.
"""

from __future__ import annotations

import bcrypt

from tasklist.app.errors import HashingError

# bcrypt only consumes the first 72 bytes of its input; longer passwords are
# rejected by the schemas before they reach the hasher.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def init_app(self, app) -> None:
        self.rounds = int(app.config.get("BCRYPT_LOG_ROUNDS", self.rounds))
        app.extensions["password_hasher"] = self

    def hash(self, plaintext: str) -> str:
        try:
            digest = bcrypt.hashpw(
                plaintext.encode("utf-8"),
                bcrypt.gensalt(rounds=self.rounds),
            )
        except (TypeError, ValueError) as exc:
            raise HashingError("Password could not be hashed.") from exc
        return digest.decode("utf-8")

    def verify(self, plaintext: str, password_hash: str) -> bool:
        if not password_hash:
            raise HashingError("Stored password hash is empty.")
        candidate = plaintext.encode("utf-8")
        # Nothing longer than the limit was ever hashed, so it cannot match.
        if len(candidate) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(candidate, password_hash.encode("utf-8"))
        except (TypeError, ValueError) as exc:
            raise HashingError("Password could not be verified.") from exc
