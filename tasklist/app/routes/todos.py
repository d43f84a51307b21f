"""
routes/todos.py — Task route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.
  - Every handler passes g.identity.user_id as the owner; services never see
    a task id without an owner id next to it.

Endpoints (url_prefix=/api/v1/todos, all require auth):
  POST    /todos            → 201  create
  GET     /todos/today      → 200  due (or created) today, not completed
  GET     /todos/done       → 200  completed
  GET     /todos/upcoming   → 200  due before today, not completed
  GET     /todos/overdue    → 200  due before today, not completed
  PATCH   /todos/:id/done   → 200  mark completed
  PUT     /todos/:id        → 200  full update
  DELETE  /todos/:id        → 200  delete
"""

from __future__ import annotations

from flask import Blueprint, current_app, g

from tasklist.app.extensions import db
from tasklist.app.middleware.auth_middleware import require_auth
from tasklist.app.responses import json_body, respond
from tasklist.app.schemas.task_schema import TaskSchema
from tasklist.app.services import task_service

todos_bp = Blueprint("todos", __name__)


@todos_bp.route("", methods=["POST"])
@todos_bp.route("/", methods=["POST"])
@require_auth
def create_task():
    """POST /todos — Create a task owned by the caller."""
    data = TaskSchema().load(json_body())
    result = task_service.create_task(
        owner_id=g.identity.user_id,
        fields=data,
        session=db.session,
    )
    db.session.commit()
    return respond(result, "Todo created successfully", 201)


@todos_bp.route("/today", methods=["GET"])
@require_auth
def today_tasks():
    result = task_service.list_today(
        owner_id=g.identity.user_id,
        session=db.session,
        basis=current_app.config.get("TODAY_BUCKET_BASIS", task_service.TODAY_BY_DUE_DATE),
    )
    return respond(result)


@todos_bp.route("/done", methods=["GET"])
@require_auth
def done_tasks():
    result = task_service.list_done(owner_id=g.identity.user_id, session=db.session)
    return respond(result)


@todos_bp.route("/upcoming", methods=["GET"])
@require_auth
def upcoming_tasks():
    result = task_service.list_upcoming(owner_id=g.identity.user_id, session=db.session)
    return respond(result)


@todos_bp.route("/overdue", methods=["GET"])
@require_auth
def overdue_tasks():
    result = task_service.list_overdue(owner_id=g.identity.user_id, session=db.session)
    return respond(result)


@todos_bp.route("/<int:task_id>/done", methods=["PATCH"])
@require_auth
def mark_done(task_id: int):
    """PATCH /todos/:id/done — Mark one of the caller's tasks as completed."""
    result = task_service.mark_done(
        owner_id=g.identity.user_id,
        task_id=task_id,
        session=db.session,
    )
    db.session.commit()
    return respond(result, "Todo marked as complete")


@todos_bp.route("/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int):
    """PUT /todos/:id — Replace every field of one of the caller's tasks."""
    data = TaskSchema().load(json_body())
    result = task_service.update_task(
        owner_id=g.identity.user_id,
        task_id=task_id,
        fields=data,
        session=db.session,
    )
    db.session.commit()
    return respond(result, "Todo updated successfully")


@todos_bp.route("/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int):
    """DELETE /todos/:id — Delete one of the caller's tasks."""
    task_service.delete_task(
        owner_id=g.identity.user_id,
        task_id=task_id,
        session=db.session,
    )
    db.session.commit()
    return respond({"id": task_id}, "Todo deleted successfully")
