# authgate/infra/google/google_identity_provider.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import requests

from authgate.services._shared.errors import IdentityVerificationFailure
from authgate.services._shared.ports import ExternalIdentity, IdentityProvider

log = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class GoogleIdentityProvider(IdentityProvider):
    """
    Stateless Google OAuth 2.0 authorization-code flow.

    :param client_id: OAuth client id.
    :param client_secret: OAuth client secret.
    :param redirect_uri: Callback URL registered with Google.
    :param timeout: Per-request timeout in seconds.
    """

    name = "google"

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str | None,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self.session = session or requests.Session()

    def _require_config(self) -> None:
        if not (self.client_id and self.client_secret and self.redirect_uri):
            raise IdentityVerificationFailure("Google sign-in is not configured")

    def authorization_url(self, state: str | None = None) -> str:
        self._require_config()
        params: dict[str, str] = {
            "client_id": str(self.client_id),
            "redirect_uri": str(self.redirect_uri),
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def verify_callback(self, params: Mapping[str, str]) -> ExternalIdentity:
        """
        Exchange the authorization code and read the user's profile.

        :raises IdentityVerificationFailure: When Google reports an error,
            the code is missing or rejected, or the profile lacks an email.
        """
        if params.get("error"):
            raise IdentityVerificationFailure(f"Provider returned error: {params['error']}")
        code = params.get("code")
        if not code:
            raise IdentityVerificationFailure("Missing authorization code")
        self._require_config()

        access_token = self._exchange_code(code)
        profile = self._userinfo(access_token)

        email = profile.get("email")
        if not email:
            raise IdentityVerificationFailure("Google account did not share an email address")
        return ExternalIdentity(
            email=str(email),
            given_name=profile.get("given_name"),
            family_name=profile.get("family_name"),
            avatar_url=profile.get("picture"),
        )

    def _exchange_code(self, code: str) -> str:
        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        data = self._call("POST", TOKEN_URL, data=payload)
        token = data.get("access_token")
        if not token:
            raise IdentityVerificationFailure("Token endpoint returned no access token")
        return str(token)

    def _userinfo(self, access_token: str) -> dict[str, Any]:
        return self._call(
            "GET", USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )

    def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as exc:
            log.warning("Google request failed", extra={"provider": self.name})
            raise IdentityVerificationFailure("Could not reach Google") from exc
        try:
            body = resp.json()
        except ValueError as exc:
            raise IdentityVerificationFailure("Google returned malformed JSON") from exc
        if not isinstance(body, dict):
            raise IdentityVerificationFailure("Google returned an unexpected payload")
        return body
