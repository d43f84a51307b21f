"""
schemas/task_schema.py — Marshmallow schema for task create / update.

The same schema is used for POST /todos and PUT /todos/:id: an update
re-validates the full task shape, it is not a partial patch.

Policy for priorityScore: values outside [0, 10] are rejected (400), never
clamped.

IMPORTANT: Inherits from marshmallow.Schema directly — never ma.Schema.
"""

from __future__ import annotations

from datetime import timezone

from marshmallow import Schema, ValidationError, fields, post_load, validate

MAX_TITLE_LENGTH = 100
MAX_TAG_LENGTH = 50


def _validate_non_blank(value: str) -> None:
    """Rejects strings that are empty or whitespace only."""
    if not value.strip():
        raise ValidationError("This field must not be blank.")


class TaskSchema(Schema):

    title = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=MAX_TITLE_LENGTH,
                error=f"Title must be between 1 and {MAX_TITLE_LENGTH} characters.",
            ),
            _validate_non_blank,
        ],
    )

    description = fields.Str(required=True, validate=_validate_non_blank)

    # Naive timestamps are read as UTC.
    due_date = fields.AwareDateTime(
        required=True,
        data_key="dueDate",
        default_timezone=timezone.utc,
        error_messages={"invalid": "dueDate must be an ISO-8601 date-time."},
    )

    completed = fields.Bool(load_default=False)

    priority_score = fields.Float(
        data_key="priorityScore",
        load_default=0.0,
        validate=validate.Range(
            min=0,
            max=10,
            error="priorityScore must be between 0 and 10.",
        ),
    )

    estimated_time = fields.Float(
        data_key="estimatedTime",
        load_default=0.0,
        validate=validate.Range(min=0, error="estimatedTime must not be negative."),
    )

    tags = fields.List(
        fields.Str(validate=validate.Length(min=1, max=MAX_TAG_LENGTH)),
        load_default=list,
    )

    @post_load
    def normalise(self, data, **kwargs):
        """Stores due dates in UTC; tags behave like an ordered set (first occurrence wins)."""
        data["due_date"] = data["due_date"].astimezone(timezone.utc)
        data["tags"] = list(dict.fromkeys(data.get("tags") or []))
        return data
