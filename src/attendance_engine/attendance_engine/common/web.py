"""Flask helpers shared by the feature controllers."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    ConfigurationError,
    DomainError,
    DuplicateEntryError,
    ImmutableStateError,
    InvalidRangeError,
    NoOpenEntryError,
    NotFoundError,
    ValidationError,
)
from ..core.policy import Actor

logger = logging.getLogger(__name__)

# Most specific first: the first isinstance match wins.
_STATUS_CODES: tuple[tuple[type, int], ...] = (
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateEntryError, 409),
    (NoOpenEntryError, 409),
    (ImmutableStateError, 409),
    (AlreadyDecidedError, 409),
    (ConfigurationError, 422),
    (InvalidRangeError, 422),
    (ValidationError, 400),
)


def status_code_for(error: DomainError) -> int:
    for cls, code in _STATUS_CODES:
        if isinstance(error, cls):
            return code
    return 400


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Unauthenticated", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> Actor:
    return Actor.from_session(dict(session))


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def arg(name: str, default: Optional[str] = None) -> Optional[str]:
    value = request.args.get(name)
    return value if value not in (None, "") else default


def flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        code = status_code_for(error)
        if code >= 409:
            logger.info("%s: %s", type(error).__name__, error)
        return jsonify({"success": False, "error": type(error).__name__, "message": str(error)}), code
