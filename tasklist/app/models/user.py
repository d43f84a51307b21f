"""
models/user.py — User table definition.

No business logic. No imports from services or routes.

Tasks are owned through Task.owner_id; `User.tasks` is the ORM side of that
foreign key, ordered by creation, so creating a task is a single
insert and never a second write to the user row.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasklist.app.extensions import db
from tasklist.utils.timestamps import utcnow


class User(db.Model):
    __tablename__ = "users"

    __table_args__ = (
        # Also enforced by the signup schema.
        CheckConstraint(
            "LENGTH(TRIM(username)) >= 3",
            name="ck_users_username_length",
        ),
        CheckConstraint(
            "LENGTH(password_hash) > 0",
            name="ck_users_password_hash_nonempty",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Stored lowercased; the schema normalises before any lookup.
    username: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Last-issued tokens. Set on login / refresh, cleared on logout.
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

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

    tasks: Mapped[list["Task"]] = relationship(  # noqa: F821
        "Task",
        back_populates="owner",
        order_by="Task.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} username={self.username!r}>"
