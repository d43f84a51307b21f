"""
services/task_service.py — Task business logic.

Ownership is structural: every query is built from _owned_tasks(owner_id),
so a task belonging to another user is indistinguishable from a task that
does not exist (404, never 403). There is no code path that loads a task by
id alone.

Buckets (all UTC, all restricted to the caller's tasks, creation order):
  today    — due today (or, with basis="created_at", created today) and
             not completed
  done     — completed
  upcoming — due before the start of today and not completed
  overdue  — same predicate as upcoming, evaluated in memory over the
             owner's task list

upcoming and overdue intentionally share a predicate for now; see DESIGN.md.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from tasklist.app.errors import ErrorCode, not_found, unauthorized
from tasklist.app.models.task import Task
from tasklist.app.models.user import User
from tasklist.utils.timestamps import as_utc, utcnow

logger = logging.getLogger(__name__)

# Fields accepted from TaskSchema and copied onto the model as-is.
_WRITABLE_FIELDS = (
    "title",
    "description",
    "due_date",
    "completed",
    "priority_score",
    "estimated_time",
    "tags",
)

TODAY_BY_DUE_DATE = "due_date"
TODAY_BY_CREATED_AT = "created_at"

_TODAY_COLUMNS = {
    TODAY_BY_DUE_DATE: Task.due_date,
    TODAY_BY_CREATED_AT: Task.created_at,
}


# ── Private helpers ────────────────────────────────────────────────────────

def day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Returns [start, end) of the UTC day containing `now`."""
    now = as_utc(now) if now is not None else utcnow()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _owned_tasks(owner_id: int) -> Select:
    """Base query for every task read and write."""
    return select(Task).where(Task.owner_id == owner_id)


def _get_owned_task_or_404(owner_id: int, task_id: int, session: Session) -> Task:
    task = session.execute(
        _owned_tasks(owner_id).where(Task.id == task_id)
    ).scalar_one_or_none()
    if task is None:
        raise not_found("Todo not found.", ErrorCode.TASK_NOT_FOUND)
    return task


def _build_task_dict(task: Task) -> dict:
    """Serialises a Task to a plain dict. No business logic."""
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": as_utc(task.due_date).isoformat(),
        "completed": task.completed,
        "priorityScore": task.priority_score,
        "estimatedTime": task.estimated_time,
        "tags": list(task.tags or []),
        "createdAt": as_utc(task.created_at).isoformat(),
        "updatedAt": as_utc(task.updated_at).isoformat(),
    }


def _list(stmt: Select, session: Session) -> list[dict]:
    tasks = session.execute(stmt.order_by(Task.id.asc())).scalars().all()
    return [_build_task_dict(t) for t in tasks]


# ── Public service functions ───────────────────────────────────────────────

def create_task(owner_id: int, fields: dict, session: Session) -> dict:
    """
    Creates a task owned by `owner_id`.

    Args:
        owner_id: The authenticated caller (g.identity.user_id).
        fields:   Output of TaskSchema().load() — already validated.
    """
    task = Task(owner_id=owner_id, **{k: fields[k] for k in _WRITABLE_FIELDS if k in fields})
    session.add(task)
    session.flush()  # populate task.id

    logger.info("Created task id=%s for user id=%s", task.id, owner_id)
    return _build_task_dict(task)


def list_today(
        owner_id: int,
        session: Session,
        now: datetime | None = None,
        basis: str = TODAY_BY_DUE_DATE,
) -> list[dict]:
    """
    Not-completed tasks whose due date (default) or creation time falls on
    the current UTC day.
    """
    if basis not in _TODAY_COLUMNS:
        raise ValueError(f"Unknown today-bucket basis: {basis!r}")
    column = _TODAY_COLUMNS[basis]
    start, end = day_bounds(now)
    return _list(
        _owned_tasks(owner_id).where(
            column >= start,
            column < end,
            Task.completed.is_(False),
        ),
        session,
    )


def list_done(owner_id: int, session: Session) -> list[dict]:
    return _list(
        _owned_tasks(owner_id).where(Task.completed.is_(True)),
        session,
    )


def list_upcoming(owner_id: int, session: Session, now: datetime | None = None) -> list[dict]:
    start, _ = day_bounds(now)
    return _list(
        _owned_tasks(owner_id).where(
            Task.due_date < start,
            Task.completed.is_(False),
        ),
        session,
    )


def list_overdue(owner_id: int, session: Session, now: datetime | None = None) -> list[dict]:
    """
    Loads the owner's whole task list and filters it in memory.

    Raises:
      AppError(TOKEN_INVALID, 401) — the owner no longer exists
    """
    start, _ = day_bounds(now)
    owner = session.get(User, owner_id)
    if owner is None:
        raise unauthorized("User not found.")

    return [
        _build_task_dict(t)
        for t in owner.tasks
        if not t.completed and as_utc(t.due_date) < start
    ]


def mark_done(owner_id: int, task_id: int, session: Session) -> dict:
    """
    Sets completed=True on one of the caller's tasks.

    Raises:
      AppError(TASK_NOT_FOUND, 404) — no such task owned by the caller
    """
    task = _get_owned_task_or_404(owner_id, task_id, session)
    task.completed = True
    session.flush()
    return _build_task_dict(task)


def update_task(owner_id: int, task_id: int, fields: dict, session: Session) -> dict:
    """
    Replaces every writable field of one of the caller's tasks.

    Raises:
      AppError(TASK_NOT_FOUND, 404) — no such task owned by the caller
    """
    task = _get_owned_task_or_404(owner_id, task_id, session)
    for name in _WRITABLE_FIELDS:
        if name in fields:
            setattr(task, name, fields[name])
    session.flush()

    logger.info("Updated task id=%s for user id=%s", task.id, owner_id)
    return _build_task_dict(task)


def delete_task(owner_id: int, task_id: int, session: Session) -> None:
    """
    Deletes one of the caller's tasks.

    Raises:
      AppError(TASK_NOT_FOUND, 404) — no such task owned by the caller
    """
    task = _get_owned_task_or_404(owner_id, task_id, session)
    session.delete(task)
    session.flush()
    logger.info("Deleted task id=%s for user id=%s", task_id, owner_id)
