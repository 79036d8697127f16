"""JSON envelope and error mapping shared by controllers.

Every response is shaped as {"success": bool, "data"?: ..., "message"?: str}.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import wraps
from typing import Any, Optional

from flask import current_app, jsonify

from ..core.exceptions import DomainError


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def handle_errors(fallback_message: str):
    """Map domain errors to their status and hide everything else behind a 500."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                current_app.logger.warning("%s in %s: %s", type(e).__name__, view.__name__, e.message)
                return fail(e.message, e.status_code)
            except Exception:
                error_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
                current_app.logger.error("Unexpected error [%s] in %s", error_id, view.__name__, exc_info=True)
                return fail(fallback_message, 500)

        return wrapper

    return decorator
