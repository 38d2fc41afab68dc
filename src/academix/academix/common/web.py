"""Flask glue shared by the feature controllers."""

from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..auth.session_state import AuthSession
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    PartialSessionWriteError,
    RemoteStoreError,
    ValidationError,
)
from .serialization import to_plain


def ok(message: str = "", status: int = 200, **payload):
    body = {"success": True, "message": message}
    body.update({k: to_plain(v) for k, v in payload.items()})
    return jsonify(body), status


def fail(message: str, status: int, **payload):
    body = {"success": False, "message": message}
    body.update(payload)
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def current_auth() -> AuthSession:
    return AuthSession.from_mapping(session)


def save_auth(auth: AuthSession) -> None:
    session.update(auth.to_mapping())


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_auth().can_fetch:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PartialSessionWriteError)
    def _partial_write(e: PartialSessionWriteError):
        return fail(str(e), 502, partial=True, date=e.date, timestamp=e.timestamp)

    @app.errorhandler(RemoteStoreError)
    def _remote(e: RemoteStoreError):
        app.logger.error("Remote store failure in %s: %s", e.operation, e)
        if app.config.get("DEBUG"):
            return fail(f"Remote store error: {e}", 502)
        return fail("Remote store error, please try again", 502)

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return fail(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), 404)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), 400)
