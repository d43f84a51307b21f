"""
Unit tests for PasswordHasher.

A low bcrypt cost keeps these fast; the cost factor does not change any of
the behaviour under test.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from tasklist.app.errors import HashingError
from tasklist.app.services.password_hasher import MAX_PASSWORD_BYTES, PasswordHasher


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def test_hash_is_not_the_plaintext(hasher):
    digest = hasher.hash("Password1")
    assert digest != "Password1"
    assert digest.startswith("$2b$04$")


def test_same_plaintext_hashes_differently(hasher):
    assert hasher.hash("Password1") != hasher.hash("Password1")


def test_verify_accepts_correct_password(hasher):
    assert hasher.verify("Password1", hasher.hash("Password1")) is True


def test_verify_rejects_wrong_password(hasher):
    assert hasher.verify("Password2", hasher.hash("Password1")) is False


def test_verify_handles_multibyte_passwords(hasher):
    digest = hasher.hash("pässwörd-ñ")
    assert hasher.verify("pässwörd-ñ", digest) is True
    assert hasher.verify("passwörd-ñ", digest) is False


def test_verify_rejects_overlong_candidate_without_raising(hasher):
    digest = hasher.hash("a" * MAX_PASSWORD_BYTES)
    # bcrypt would only look at the first 72 bytes; this must still fail.
    assert hasher.verify("a" * (MAX_PASSWORD_BYTES + 1), digest) is False


def test_verify_with_empty_hash_raises(hasher):
    with pytest.raises(HashingError):
        hasher.verify("Password1", "")


def test_verify_with_malformed_hash_raises(hasher):
    with pytest.raises(HashingError):
        hasher.verify("Password1", "not-a-bcrypt-hash")


def test_init_app_reads_cost_and_registers_extension():
    app = SimpleNamespace(config={"BCRYPT_LOG_ROUNDS": 5}, extensions={})
    hasher = PasswordHasher()
    hasher.init_app(app)

    assert hasher.rounds == 5
    assert app.extensions["password_hasher"] is hasher
    assert hasher.hash("Password1").startswith("$2b$05$")
