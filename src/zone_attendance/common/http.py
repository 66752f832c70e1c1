from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..core.outcome import Outcome

log = logging.getLogger(__name__)


def to_json(value: Any) -> Any:
    """Dataclasses, enums and datetimes as plain JSON values."""

    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_json(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please sign in"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please sign in"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "code": "FORBIDDEN", "message": "Administrators only"}), 403
        return view(*args, **kwargs)

    return wrapper


def outcome_response(outcome: Outcome, **extra):
    body = {
        "success": outcome.ok,
        "code": outcome.code,
        "message": outcome.message,
        "warnings": list(outcome.warnings),
    }
    if outcome.ok and outcome.value is not None:
        body["result"] = to_json(outcome.value)
    body.update({k: to_json(v) for k, v in extra.items()})

    if outcome.ok:
        return jsonify(body), 200
    if outcome.retryable:
        return jsonify(body), 409
    return jsonify(body), 400


def json_errors(view):
    """Translate domain exceptions raised by a view into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except AuthorizationError as e:
            return jsonify({"success": False, "code": "FORBIDDEN", "message": str(e)}), 403
        except ValidationError as e:
            return jsonify({"success": False, "code": "INVALID", "message": str(e)}), 400
        except DomainError as e:
            code = getattr(e, "code", "DOMAIN_ERROR")
            return jsonify({"success": False, "code": code, "message": str(e)}), 400
        except Exception:
            log.exception("Unhandled error in %s", view.__name__)
            return jsonify({"success": False, "code": "INTERNAL", "message": "Internal server error"}), 500

    return wrapper
