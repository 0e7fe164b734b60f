"""Authentication endpoints: password accounts, tokens and Google federation."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from flask import Blueprint, current_app, redirect, request
from flask_jwt_extended import get_jwt_identity

from authgate.api.deps import (
    auth_service,
    bearer_token,
    identity_reconciler,
    json_response,
    require_auth,
    timing,
)
from authgate.core.errors import Unauthorized
from authgate.schemas import ChangePasswordSchema, LoginSchema, RegisterSchema, UserSchema
from authgate.services._shared.errors import TokenOperationFailure
from authgate.services.auth import AuthResultOut, ChangePasswordIn, LoginIn, RegisterIn
from authgate.services.federation import FederatedLoginSuccess

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
change_password_schema = ChangePasswordSchema()
user_schema = UserSchema()

GOOGLE_LOGIN_FAILED = "google_login_failed"


def _auth_body(message: str, result: AuthResultOut) -> dict[str, Any]:
    return {
        "message": message,
        "data": {"user": user_schema.dump(result.user), **result.token.to_dict()},
    }


def _frontend_url() -> str:
    return str(current_app.config.get("FRONTEND_URL") or "").rstrip("/")


@bp.post("/register")
@timing
def register():
    """Create a customer account and return it with a bearer token."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    payload.pop("password_confirmation", None)
    result = auth_service().register(RegisterIn(**payload))
    return json_response(_auth_body("Registered successfully", result), status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by email or phone and issue a bearer token."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service().login(LoginIn(login=data["login"], password=data["password"]))
    return json_response(_auth_body("Login successful", result))


@bp.post("/refresh")
@timing
def refresh():
    """Swap the presented token for a new one under the current role policy."""

    token = bearer_token()
    try:
        issued = auth_service().refresh(token)
    except TokenOperationFailure as exc:
        raise Unauthorized("Token refresh failed", code="token_error") from exc
    return json_response({"data": issued.to_dict(token_key="access_token")})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the presented token."""

    auth_service().logout(bearer_token())
    return json_response({"message": "Successfully logged out"})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated account."""

    user = auth_service().me(get_jwt_identity())
    return json_response({"data": user_schema.dump(user)})


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Replace the caller's password after checking the current one."""

    data = change_password_schema.load(request.get_json(silent=True) or {})
    auth_service().change_password(
        ChangePasswordIn(
            user_id=int(get_jwt_identity()),
            current_password=data["current_password"],
            new_password=data["new_password"],
        )
    )
    return json_response({"message": "Password updated successfully"})


@bp.get("/google/redirect")
def google_redirect():
    """Send the browser to Google's consent screen."""

    return redirect(identity_reconciler().authorization_url(request.args.get("state")))


@bp.get("/google/callback")
@timing
def google_callback():
    """Finish Google sign-in and hand the token to the frontend."""

    outcome = identity_reconciler().handle_callback(request.args.to_dict())
    frontend = _frontend_url()
    if not isinstance(outcome, FederatedLoginSuccess):
        return redirect(f"{frontend}/login?{urlencode({'error': GOOGLE_LOGIN_FAILED})}")

    user = outcome.result.user
    query = urlencode(
        {
            "token": outcome.token.token,
            "account_id": user.id,
            "account_email": user.email,
            "account_name": user.display_name,
        }
    )
    return redirect(f"{frontend}/auth/google/callback?{query}")
