"""
tests/unit/test_validation_schemas.py — Unit tests for all marshmallow schemas.

What this file proves:
  - Every schema accepts valid input without raising
  - Every schema rejects invalid input with a ValidationError keyed by the
    wire field name
  - Normalisation (username case, tag de-duplication, UTC due dates) happens
    in the schema, before any service sees the data

Unit test constraints:
  - No database and no Flask application context. Schemas inherit from
    marshmallow.Schema directly (not ma.Schema) so they can be instantiated
    without one.
  - Uniqueness and credential checks are NOT tested here; they belong in
    services.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from marshmallow import ValidationError

from tasklist.app.schemas.auth_schema import (
    LoginSchema,
    PasswordResetSchema,
    RefreshTokenSchema,
    SignupSchema,
)
from tasklist.app.schemas.task_schema import TaskSchema


# ═══════════════════════════════════════════════════════════════════════════
# SignupSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestSignupSchema:

    def _load(self, data: dict):
        return SignupSchema().load(data)

    def test_valid_payload(self):
        result = self._load({
            "username": "alice_99",
            "email": "alice@example.com",
            "password": "Secure123",
        })
        assert result == {
            "username": "alice_99",
            "email": "alice@example.com",
            "password": "Secure123",
        }

    def test_username_is_trimmed_and_lowercased(self):
        result = self._load({"username": "  AliCe ", "email": "a@b.com", "password": "Secure123"})
        assert result["username"] == "alice"

    def test_email_is_trimmed(self):
        result = self._load({"username": "alice", "email": " a@b.com ", "password": "Secure123"})
        assert result["email"] == "a@b.com"

    def test_username_exactly_3_chars_passes(self):
        """Boundary: min 3 chars."""
        assert self._load({"username": "abc", "email": "a@b.com", "password": "Secure123"})

    def test_username_exactly_20_chars_passes(self):
        """Boundary: max 20 chars."""
        name = "a" * 20
        result = self._load({"username": name, "email": "a@b.com", "password": "Secure123"})
        assert result["username"] == name

    @pytest.mark.parametrize("username", ["ab", "a" * 21, "alice!", "alice smith", "   "])
    def test_invalid_username_raises(self, username):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": username, "email": "a@b.com", "password": "Secure123"})
        assert "username" in exc.value.messages

    def test_invalid_email_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice", "email": "notanemail", "password": "Secure123"})
        assert exc.value.messages["email"] == ["Invalid email address."]

    def test_password_too_short_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice", "email": "a@b.com", "password": "Ab1!"})
        assert "password" in exc.value.messages

    def test_password_exactly_8_chars_passes(self):
        assert self._load({"username": "alice", "email": "a@b.com", "password": "12345678"})

    def test_password_over_72_bytes_raises(self):
        # 25 three-byte characters: only 25 chars, but 75 bytes.
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice", "email": "a@b.com", "password": "€" * 25})
        assert "password" in exc.value.messages

    def test_missing_fields_raise_together(self):
        with pytest.raises(ValidationError) as exc:
            self._load({})
        assert set(exc.value.messages) == {"username", "email", "password"}

    def test_unknown_field_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({
                "username": "alice", "email": "a@b.com", "password": "Secure123",
                "isAdmin": True,
            })
        assert "isAdmin" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# LoginSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestLoginSchema:

    def _load(self, data: dict):
        return LoginSchema().load(data)

    def test_valid_payload_normalises_username(self):
        result = self._load({"username": " Alice ", "password": "any_password"})
        assert result == {"username": "alice", "password": "any_password"}

    def test_missing_username_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"password": "pass"})
        assert "username" in exc.value.messages

    def test_missing_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice"})
        assert "password" in exc.value.messages

    @pytest.mark.parametrize("payload, field", [
        ({"username": "  ", "password": "pass"}, "username"),
        ({"username": "alice", "password": ""}, "password"),
    ])
    def test_empty_fields_raise(self, payload, field):
        with pytest.raises(ValidationError) as exc:
            self._load(payload)
        assert field in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# PasswordResetSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestPasswordResetSchema:

    def _load(self, data: dict):
        return PasswordResetSchema().load(data)

    def test_valid_payload_uses_snake_case_keys(self):
        result = self._load({"oldPassword": "OldPassword1", "newPassword": "NewPassword2"})
        assert result == {"old_password": "OldPassword1", "new_password": "NewPassword2"}

    def test_weak_new_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"oldPassword": "OldPassword1", "newPassword": "short"})
        assert "newPassword" in exc.value.messages

    def test_empty_old_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"oldPassword": "", "newPassword": "NewPassword2"})
        assert "oldPassword" in exc.value.messages

    def test_missing_old_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"newPassword": "NewPassword2"})
        assert "oldPassword" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# RefreshTokenSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestRefreshTokenSchema:

    def _load(self, data: dict):
        return RefreshTokenSchema().load(data)

    def test_valid_payload(self):
        assert self._load({"token": "abc.def.ghi"}) == {"token": "abc.def.ghi"}

    def test_empty_token_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"token": ""})
        assert "token" in exc.value.messages

    def test_missing_token_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({})
        assert "token" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# TaskSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestTaskSchema:

    def _load(self, **overrides):
        data = {
            "title": "Write report",
            "description": "Quarterly numbers",
            "dueDate": "2030-01-15T09:30:00+00:00",
        }
        data.update(overrides)
        return TaskSchema().load(data)

    def test_minimal_payload_gets_defaults(self):
        result = self._load()
        assert result == {
            "title": "Write report",
            "description": "Quarterly numbers",
            "due_date": datetime(2030, 1, 15, 9, 30, tzinfo=timezone.utc),
            "completed": False,
            "priority_score": 0.0,
            "estimated_time": 0.0,
            "tags": [],
        }

    def test_naive_due_date_is_read_as_utc(self):
        result = self._load(dueDate="2030-01-15T09:30:00")
        assert result["due_date"] == datetime(2030, 1, 15, 9, 30, tzinfo=timezone.utc)
        assert result["due_date"].utcoffset().total_seconds() == 0

    def test_offset_due_date_is_converted_to_utc(self):
        result = self._load(dueDate="2030-01-15T09:30:00-05:00")
        assert result["due_date"] == datetime(2030, 1, 15, 14, 30, tzinfo=timezone.utc)
        assert result["due_date"].tzinfo == timezone.utc

    def test_tags_are_deduplicated_in_order(self):
        result = self._load(tags=["b", "a", "b", "c", "a"])
        assert result["tags"] == ["b", "a", "c"]

    @pytest.mark.parametrize("score", [0, 10, 5.5])
    def test_priority_boundaries_pass(self, score):
        assert self._load(priorityScore=score)["priority_score"] == score

    @pytest.mark.parametrize("score", [-0.1, 10.1, 15])
    def test_priority_out_of_range_raises(self, score):
        with pytest.raises(ValidationError) as exc:
            self._load(priorityScore=score)
        assert exc.value.messages["priorityScore"] == ["priorityScore must be between 0 and 10."]

    def test_title_exactly_100_chars_passes(self):
        assert self._load(title="x" * 100)["title"] == "x" * 100

    @pytest.mark.parametrize("title", ["", "   ", "x" * 101])
    def test_invalid_title_raises(self, title):
        with pytest.raises(ValidationError) as exc:
            self._load(title=title)
        assert "title" in exc.value.messages

    def test_blank_description_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(description=" ")
        assert "description" in exc.value.messages

    def test_negative_estimated_time_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(estimatedTime=-1)
        assert "estimatedTime" in exc.value.messages

    def test_bad_due_date_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(dueDate="tomorrow-ish")
        assert "dueDate" in exc.value.messages

    def test_empty_tag_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(tags=["ok", ""])
        assert "tags" in exc.value.messages

    def test_owner_cannot_be_supplied(self):
        with pytest.raises(ValidationError) as exc:
            self._load(owner=42)
        assert "owner" in exc.value.messages
