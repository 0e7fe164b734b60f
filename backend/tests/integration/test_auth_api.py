"""Integration tests for the authentication endpoints."""

from __future__ import annotations

import pytest
from authgate.api.deps import AVATAR_FETCHER_EXTENSION, PROVIDER_EXTENSION
from authgate.services._shared.ports import (
    ExternalIdentity,
    StubAvatarFetcher,
    StubIdentityProvider,
)

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.assertions import assert_json_keys, assert_problem
from tests.helpers.http import json_headers, redirect_query

BASE = "/api/v1/auth"


def _register_payload(**overrides) -> dict:
    payload = {
        "is_organization": False,
        "first_name": "Rita",
        "last_name": "Santos",
        "email": "rita@example.com",
        "phone": "09175550001",
        "password": "secret123",
        "password_confirmation": "secret123",
    }
    payload.update(overrides)
    return payload


def _login(client, login: str, password: str = DEFAULT_PASSWORD) -> dict:
    resp = client.post(f"{BASE}/login", json={"login": login, "password": password})
    assert resp.status_code == 200, resp.get_data(as_text=True)
    return resp.get_json()["data"]


# ------------------------------- Register --------------------------------- #
def test_register_returns_user_and_token(client) -> None:
    resp = client.post(f"{BASE}/register", json=_register_payload())

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "Registered successfully"
    data = body["data"]
    assert_json_keys(data, {"user", "token", "token_type", "expires_in", "never_expires"})
    assert data["expires_in"] == 3600
    assert data["never_expires"] is False
    assert data["user"]["display_name"] == "Rita Santos"
    assert data["user"]["role"] == "customer"
    assert "password_hash" not in data["user"]

    me = client.get(f"{BASE}/me", headers=json_headers(data["token"]))
    assert me.status_code == 200
    assert me.get_json()["data"]["email"] == "rita@example.com"


def test_register_organization(client) -> None:
    resp = client.post(
        f"{BASE}/register",
        json=_register_payload(
            is_organization=True,
            first_name=None,
            last_name=None,
            organization_name="Santos Printing",
            email="org@example.com",
        ),
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["user"]["display_name"] == "Santos Printing"


def test_register_organization_without_name(client) -> None:
    resp = client.post(f"{BASE}/register", json=_register_payload(is_organization=True))
    body = assert_problem(resp, 422, "validation_error")
    assert body["details"]["field"] == "organization_name"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"phone": "12345"}, "phone"),
        ({"password_confirmation": "different"}, "password"),
        ({"email": "not-an-email"}, "email"),
    ],
)
def test_register_schema_errors(client, overrides, field) -> None:
    resp = client.post(f"{BASE}/register", json=_register_payload(**overrides))
    body = assert_problem(resp, 422, "validation_error")
    assert field in body["details"]["errors"]


def test_register_duplicate_email(client) -> None:
    UserFactory(email="rita@example.com")
    resp = client.post(f"{BASE}/register", json=_register_payload())
    body = assert_problem(resp, 409, "conflict")
    assert body["details"]["field"] == "email"


# --------------------------------- Login ---------------------------------- #
def test_login_by_phone_matches_email(client) -> None:
    user = UserFactory(phone="09175550002")

    by_email = _login(client, user.email)
    by_phone = _login(client, "09175550002")

    assert by_email["user"]["id"] == by_phone["user"]["id"] == user.id
    assert by_email["expires_in"] == by_phone["expires_in"] == 3600


def test_login_invalid_credentials(client) -> None:
    user = UserFactory()
    resp = client.post(f"{BASE}/login", json={"login": user.email, "password": "nope"})
    body = assert_problem(resp, 401, "invalid_credentials")
    assert body["detail"] == "Invalid credentials."


@pytest.mark.parametrize(
    "trait, expires_in, never",
    [("clerk", 480 * 60, False), ("admin", None, True)],
)
def test_staff_token_lifetimes(client, issuer, trait, expires_in, never) -> None:
    user = UserFactory(**{trait: True})

    data = _login(client, user.email)

    assert data["expires_in"] == expires_in
    assert data["never_expires"] is never
    # Process-wide default is untouched after issuance.
    assert issuer.get_default_ttl() == 60
    assert client.get(f"{BASE}/me", headers=json_headers(data["token"])).status_code == 200


# --------------------------- Refresh / logout ----------------------------- #
def test_refresh_rotates_and_revokes(client) -> None:
    user = UserFactory(clerk=True)
    old = _login(client, user.email)["token"]

    resp = client.post(f"{BASE}/refresh", headers=json_headers(old))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert_json_keys(data, {"access_token", "token_type", "expires_in", "never_expires"})
    assert data["expires_in"] == 480 * 60
    assert client.get(f"{BASE}/me", headers=json_headers(data["access_token"])).status_code == 200
    assert_problem(client.get(f"{BASE}/me", headers=json_headers(old)), 401, "token_error")
    assert_problem(client.post(f"{BASE}/refresh", headers=json_headers(old)), 401, "token_error")


def test_refresh_requires_token(client) -> None:
    assert_problem(client.post(f"{BASE}/refresh"), 401, "unauthorized")


def test_logout_revokes_token(client) -> None:
    user = UserFactory(admin=True)
    token = _login(client, user.email)["token"]

    resp = client.post(f"{BASE}/logout", headers=json_headers(token))

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Successfully logged out"
    assert_problem(client.get(f"{BASE}/me", headers=json_headers(token)), 401, "token_error")


def test_me_requires_auth(client) -> None:
    assert_problem(client.get(f"{BASE}/me"), 401, "unauthorized")


# ---------------------------- Change password ----------------------------- #
def test_change_password(client) -> None:
    user = UserFactory(password="old-secret")
    token = _login(client, user.email, "old-secret")["token"]

    resp = client.post(
        f"{BASE}/change-password",
        headers=json_headers(token),
        json={
            "current_password": "old-secret",
            "new_password": "new-secret",
            "new_password_confirmation": "new-secret",
        },
    )

    assert resp.status_code == 200
    assert _login(client, user.email, "new-secret")["user"]["id"] == user.id
    # Existing tokens keep working.
    assert client.get(f"{BASE}/me", headers=json_headers(token)).status_code == 200


def test_change_password_wrong_current(client) -> None:
    user = UserFactory(password="old-secret")
    token = _login(client, user.email, "old-secret")["token"]

    resp = client.post(
        f"{BASE}/change-password",
        headers=json_headers(token),
        json={
            "current_password": "wrong",
            "new_password": "new-secret",
            "new_password_confirmation": "new-secret",
        },
    )

    body = assert_problem(resp, 422, "validation_error")
    assert body["details"]["field"] == "current_password"


# ------------------------------ Google login ------------------------------ #
@pytest.fixture()
def stub_google(app, monkeypatch):
    provider = StubIdentityProvider(
        ExternalIdentity(
            email="gina@example.com",
            given_name="Gina",
            family_name="Lo",
            avatar_url="https://lh3.example.com/gina.jpg",
        )
    )
    fetcher = StubAvatarFetcher()
    monkeypatch.setitem(app.extensions, PROVIDER_EXTENSION, provider)
    monkeypatch.setitem(app.extensions, AVATAR_FETCHER_EXTENSION, fetcher)
    return provider, fetcher


def test_google_redirect(client) -> None:
    resp = client.get(f"{BASE}/google/redirect?state=abc")

    assert resp.status_code == 302
    base, query = redirect_query(resp.headers["Location"])
    assert base == "https://accounts.google.com/o/oauth2/v2/auth"
    assert query["state"] == "abc"
    assert query["client_id"] == "client-id"


def test_google_callback_success(client, stub_google) -> None:
    resp = client.get(f"{BASE}/google/callback?code=abc")

    assert resp.status_code == 302
    base, query = redirect_query(resp.headers["Location"])
    assert base == "http://frontend.test/auth/google/callback"
    assert query["account_email"] == "gina@example.com"
    assert query["account_name"] == "Gina Lo"

    me = client.get(f"{BASE}/me", headers=json_headers(query["token"]))
    assert me.status_code == 200
    profile = me.get_json()["data"]
    assert str(profile["id"]) == query["account_id"]
    assert profile["profile_image"].startswith("profile_images/profile_")


def test_google_callback_twice_same_account(client, stub_google) -> None:
    first = redirect_query(client.get(f"{BASE}/google/callback?code=a").headers["Location"])[1]
    second = redirect_query(client.get(f"{BASE}/google/callback?code=b").headers["Location"])[1]
    assert first["account_id"] == second["account_id"]


def test_google_callback_failure(client, stub_google) -> None:
    resp = client.get(f"{BASE}/google/callback?error=access_denied")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://frontend.test/login?error=google_login_failed"
