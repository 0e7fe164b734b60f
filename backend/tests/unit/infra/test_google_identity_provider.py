# tests/unit/infra/test_google_identity_provider.py
from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
import responses
from authgate.infra.google import GoogleIdentityProvider
from authgate.infra.google.google_identity_provider import TOKEN_URL, USERINFO_URL
from authgate.services._shared.errors import IdentityVerificationFailure


@pytest.fixture()
def provider() -> GoogleIdentityProvider:
    return GoogleIdentityProvider(
        client_id="cid",
        client_secret="csecret",
        redirect_uri="http://api.test/cb",
    )


def test_authorization_url(provider):
    url = urlparse(provider.authorization_url("st4te"))
    qs = parse_qs(url.query)

    assert url.netloc == "accounts.google.com"
    assert qs["client_id"] == ["cid"]
    assert qs["redirect_uri"] == ["http://api.test/cb"]
    assert qs["scope"] == ["openid email profile"]
    assert qs["state"] == ["st4te"]


def test_unconfigured_provider_refuses():
    bare = GoogleIdentityProvider(client_id=None, client_secret=None, redirect_uri=None)
    with pytest.raises(IdentityVerificationFailure, match="not configured"):
        bare.authorization_url()


@responses.activate
def test_verify_callback_maps_profile(provider):
    responses.add(responses.POST, TOKEN_URL, json={"access_token": "ya29.tok"})
    responses.add(
        responses.GET,
        USERINFO_URL,
        json={
            "email": "g@example.com",
            "given_name": "Gina",
            "family_name": "Lo",
            "picture": "https://lh3.example.com/p.jpg",
        },
    )

    identity = provider.verify_callback({"code": "auth-code"})

    assert identity.email == "g@example.com"
    assert identity.given_name == "Gina"
    assert identity.family_name == "Lo"
    assert identity.avatar_url == "https://lh3.example.com/p.jpg"
    body = parse_qs(responses.calls[0].request.body)
    assert body["code"] == ["auth-code"]
    assert body["grant_type"] == ["authorization_code"]
    assert responses.calls[1].request.headers["Authorization"] == "Bearer ya29.tok"


def test_callback_error_param(provider):
    with pytest.raises(IdentityVerificationFailure, match="access_denied"):
        provider.verify_callback({"error": "access_denied"})


def test_missing_code(provider):
    with pytest.raises(IdentityVerificationFailure, match="authorization code"):
        provider.verify_callback({})


@responses.activate
def test_rejected_code(provider):
    responses.add(responses.POST, TOKEN_URL, json={"error": "invalid_grant"}, status=400)
    with pytest.raises(IdentityVerificationFailure, match="Could not reach Google"):
        provider.verify_callback({"code": "stale"})


@responses.activate
def test_profile_without_email(provider):
    responses.add(responses.POST, TOKEN_URL, json={"access_token": "t"})
    responses.add(responses.GET, USERINFO_URL, json={"given_name": "No"})
    with pytest.raises(IdentityVerificationFailure, match="email"):
        provider.verify_callback({"code": "c"})


@responses.activate
def test_malformed_json(provider):
    responses.add(responses.POST, TOKEN_URL, body="<html>", status=200)
    with pytest.raises(IdentityVerificationFailure, match="malformed"):
        provider.verify_callback({"code": "c"})
