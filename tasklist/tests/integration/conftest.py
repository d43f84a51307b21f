"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against in-memory SQLite (TEST_DATABASE_URL overrides it, e.g.
    with a disposable PostgreSQL database).
  - The app is created once per session using create_app("testing").
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - signup(client, ...)      → public user dict
  - login(client, ...)       → dict with user + tokens
  - auth_headers(token)      → {"Authorization": "Bearer <token>"}
  - task_payload(...)        → valid create/update body
  - make_task(client, ...)   → created task dict
  - day_at(offset, hour)     → a UTC datetime relative to today

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete

from tasklist.app import create_app
from tasklist.app.extensions import db as _db
from tasklist.app.models.task import Task
from tasklist.app.models.user import User

PASSWORD = "Password1"


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test session.

    Tables are created from the models; they are dropped at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows after every test. Tasks go first (they reference users).
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test
        _db.session.execute(delete(Task))
        _db.session.execute(delete(User))
        _db.session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def signup(
    client,
    username: str = "alice",
    email: str | None = None,
    password: str = PASSWORD,
) -> dict:
    """Signs up a new user and returns the public user dict."""
    if email is None:
        email = f"{username}@test.com"
    resp = client.post(
        "/api/v1/auth/signup",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, f"signup failed: {resp.get_json()}"
    return resp.get_json()["data"]["user"]


def login(client, username: str = "alice", password: str = PASSWORD) -> dict:
    """
    Logs in a user and returns the response data dict.
    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    resp = client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]


def signup_and_login(client, username: str = "alice") -> dict:
    signup(client, username)
    return login(client, username)


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def day_at(offset_days: int = 0, hour: int = 12) -> datetime:
    """Midday (by default) of today + offset_days, in UTC."""
    start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return start + timedelta(days=offset_days, hours=hour)


def task_payload(
    title: str = "Write report",
    description: str = "Quarterly numbers",
    due: datetime | None = None,
    **extra,
) -> dict:
    payload = {
        "title": title,
        "description": description,
        "dueDate": (due or day_at()).isoformat(),
    }
    payload.update(extra)
    return payload


def make_task(client, token: str, **kwargs) -> dict:
    """Creates a task for the token owner and returns the task dict."""
    resp = client.post(
        "/api/v1/todos",
        json=task_payload(**kwargs),
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_task failed: {resp.get_json()}"
    return resp.get_json()["data"]
