"""Shared API helpers: responses, auth guards and per-app service lookup."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from authgate.core.errors import Unauthorized
from authgate.services.auth import AuthService
from authgate.services.federation import IdentityReconciler

F = TypeVar("F", bound=Callable[..., Any])

ISSUER_EXTENSION = "authgate.token_issuer"
COORDINATOR_EXTENSION = "authgate.token_coordinator"
ASSETS_EXTENSION = "authgate.asset_stores"
PROVIDER_EXTENSION = "authgate.identity_provider"
AVATAR_FETCHER_EXTENSION = "authgate.avatar_fetcher"


# ------------------------------ service lookup ------------------------------


def auth_service() -> AuthService:
    """Return an :class:`AuthService` bound to the app's shared issuer."""

    ext = current_app.extensions
    return AuthService(coordinator=ext[COORDINATOR_EXTENSION], issuer=ext[ISSUER_EXTENSION])


def identity_reconciler() -> IdentityReconciler:
    """Return an :class:`IdentityReconciler` for the configured provider."""

    ext = current_app.extensions
    return IdentityReconciler(
        provider=ext[PROVIDER_EXTENSION],
        avatar_fetcher=ext[AVATAR_FETCHER_EXTENSION],
        assets=ext[ASSETS_EXTENSION],
        coordinator=ext[COORDINATOR_EXTENSION],
    )


# ------------------------------ request helpers ------------------------------


def bearer_token() -> str:
    """Return the raw bearer token from ``Authorization``.

    :raises Unauthorized: When the header is missing or not a bearer token.
    """

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Missing bearer token")
    return token.strip()


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, non-revoked access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return cast(F, wrapper)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return cast(F, wrapper)
