"""
extensions.py — Flask extension singletons.

Creates SQLAlchemy, marshmallow, the password hasher and the token service
as module-level objects so they can be imported anywhere without circular
imports.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import it from here wherever needed.

    from tasklist.app.extensions import db, hasher, tokens

Configuration (JWT secret, bcrypt cost) is read once, in init_app(), and
kept on the extension object; nothing reads the secret from the environment
at request time.
"""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy

from tasklist.app.services.password_hasher import PasswordHasher
from tasklist.app.services.token_service import TokenService

db = SQLAlchemy()

# Registered for completeness of the Flask integration. Validation schemas in
# app/schemas/ inherit from marshmallow.Schema directly, NOT ma.Schema:
# ma.Schema needs an active application context and unit tests run without
# one.
ma = Marshmallow()

hasher = PasswordHasher()
tokens = TokenService()
