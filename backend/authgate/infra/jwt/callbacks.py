"""Flask-JWT-Extended callbacks: denylist lookups and problem+json errors."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import current_app
from flask_jwt_extended import JWTManager

from authgate.core.errors import problem_response

DENYLIST_EXTENSION = "authgate.denylist"


def register_jwt_callbacks(jwt: JWTManager) -> None:
    """Wire the app's denylist and error shapes into ``jwt``."""

    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        denylist = current_app.extensions.get(DENYLIST_EXTENSION)
        if denylist is None:
            return False
        return bool(denylist.is_revoked(str(jwt_payload.get("jti"))))

    @jwt.unauthorized_loader
    def _missing(reason: str):
        return problem_response(HTTPStatus.UNAUTHORIZED, "unauthorized", reason)

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        return problem_response(HTTPStatus.UNAUTHORIZED, "token_error", reason)

    @jwt.expired_token_loader
    def _expired(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem_response(HTTPStatus.UNAUTHORIZED, "token_error", "Token has expired")

    @jwt.revoked_token_loader
    def _revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem_response(HTTPStatus.UNAUTHORIZED, "token_error", "Token has been revoked")
