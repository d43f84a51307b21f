"""
wsgi.py — process entry point.

    flask --app tasklist.wsgi run
    gunicorn tasklist.wsgi:app

FLASK_ENV selects the config class (development / testing / production).
"""

import os

from tasklist.app import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))

if __name__ == "__main__":
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
    )
