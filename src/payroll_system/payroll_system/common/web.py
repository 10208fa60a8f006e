"""Shared helpers for the thin Flask controllers.

Authentication itself is handled upstream; controllers only read the
``employee_id`` / ``role`` the login flow leaves in the session.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return error_response("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return error_response("Please sign in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("Forbidden", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Map domain errors to HTTP status codes."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error_response(str(e), 400)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except ConflictError as e:
            return error_response(str(e), 409)
        except DomainError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return error_response("Internal server error", 500)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])


def date_arg(name: str, default: date | None = None) -> date | None:
    value = request.args.get(name)
    if not value:
        return default
    return parse_iso_date(value)


def body_date(data: dict, name: str) -> date:
    value = data.get(name)
    if not value:
        raise ValidationError(f"{name} is required")
    return parse_iso_date(str(value))
