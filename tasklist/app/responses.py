"""
responses.py — the success envelope.

Every successful response has the shape
    {"success": true, "status": <int>, "message": <str>, "data": <any>}
Error envelopes are produced by AppError.to_dict() and the handlers in
app/__init__.py, so a route only ever returns through respond().

json_body() is the single way routes read a request payload.
"""

from __future__ import annotations

from flask import jsonify, request

from tasklist.app.errors import ErrorCode, bad_request


def respond(data=None, message: str = "success", status: int = 200):
    """Returns a (response, status) pair carrying the success envelope."""
    return jsonify({
        "success": True,
        "status":  status,
        "message": message,
        "data":    data if data is not None else {},
    }), status


def json_body() -> dict:
    """
    Returns the request's JSON object, or {} when the body is empty.

    A body that is present but not a JSON object is rejected with 400.
    """
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise bad_request(
            "Request body must be a JSON object.",
            code=ErrorCode.INVALID_BODY,
        )
    return data
