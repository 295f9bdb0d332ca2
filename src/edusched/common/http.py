"""Shared pieces of the JSON controller layer."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (BackendError, 502),
)


def error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def ok(**data: Any):
    return jsonify({"success": True, **data})


def request_data() -> Dict[str, Any]:
    """JSON body if present, else form fields."""
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form.to_dict()


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def current_role() -> Role:
    return g.user.role


def current_user_id() -> str:
    return g.user.user_id


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if g.get("user") is None:
            return error("Faça login para continuar.", 401)
        return view(*args, **kwargs)

    return wrapper


def supervision_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if g.get("user") is None:
            return error("Faça login para continuar.", 401)
        if g.user.role != Role.SUPERVISION:
            return error("Acesso restrito à supervisão.", 403)
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for exc_type, status in _STATUS:
            if isinstance(e, exc_type):
                return error(str(e), status)
        return error(str(e), 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return error(e.description or e.name, e.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return error(f"Erro interno: {e}", 500)
        return error("Erro interno do sistema", 500)


def register_session_loader(app: Flask, load_user: Callable[[str], Optional[Any]]) -> None:
    """Resolve the session cookie to the current user row on every request.

    Deleted or no longer active accounts lose their session; role checks use
    the stored role, not the one copied into the cookie at login.
    """

    @app.before_request
    def load_session_user():
        g.user = None
        user_id = session.get("user_id")
        if not user_id:
            return None
        user = load_user(str(user_id))
        if user is None or not user.is_active:
            logger.info("Dropping session of user %s (removed or inactive)", user_id)
            session.clear()
            return None
        g.user = user
        session["role"] = user.role.value
        return None
