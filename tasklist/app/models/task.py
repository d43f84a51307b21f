"""
models/task.py — Task table definition.

No business logic. No imports from services or routes.

FK policy: owner_id ON DELETE CASCADE — a task is owned by exactly one user
and is destroyed with it. The owner is stored on the task itself so every
query can filter on it.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasklist.app.extensions import db
from tasklist.utils.timestamps import utcnow


class Task(db.Model):
    __tablename__ = "tasks"

    __table_args__ = (
        CheckConstraint(
            "priority_score >= 0 AND priority_score <= 10",
            name="ck_tasks_priority_range",
        ),
        CheckConstraint(
            "estimated_time >= 0",
            name="ck_tasks_estimated_time_nonnegative",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    due_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )

    priority_score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
        server_default="0",
    )

    # Unit is client-defined; stored as sent.
    estimated_time: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
        server_default="0",
    )

    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    owner: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="tasks",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Task id={self.id} "
            f"owner_id={self.owner_id} "
            f"completed={self.completed}>"
        )
