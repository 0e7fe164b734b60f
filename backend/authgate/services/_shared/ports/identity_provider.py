from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from authgate.services._shared.errors import IdentityVerificationFailure


@dataclass(frozen=True, slots=True)
class ExternalIdentity:
    """
    Profile returned by a federated identity provider.

    :ivar email: Verified email; ``None`` when the provider withheld it.
    :ivar given_name: First name, if shared.
    :ivar family_name: Last name, if shared.
    :ivar avatar_url: Picture URL, if shared.
    """

    email: str | None
    given_name: str | None = None
    family_name: str | None = None
    avatar_url: str | None = None


class IdentityProvider(Protocol):
    """Port for an OAuth-style identity provider."""

    name: str

    def authorization_url(self, state: str | None = None) -> str: ...

    def verify_callback(self, params: Mapping[str, str]) -> ExternalIdentity:
        """
        Exchange the callback parameters for the user's profile.

        :raises IdentityVerificationFailure: On provider errors or bad codes.
        """
        ...


class AvatarFetcher(Protocol):
    """Port for downloading avatar bytes. Raises ``OSError`` on failure."""

    def fetch(self, url: str) -> bytes: ...


class StubIdentityProvider(IdentityProvider):
    """Returns a fixed identity, or fails when the callback carries ``error``."""

    name = "stub"

    def __init__(self, identity: ExternalIdentity | None = None) -> None:
        self.identity = identity or ExternalIdentity(email="federated@example.com")

    def authorization_url(self, state: str | None = None) -> str:
        return f"https://idp.example.com/auth?state={state or ''}"

    def verify_callback(self, params: Mapping[str, str]) -> ExternalIdentity:
        if params.get("error"):
            raise IdentityVerificationFailure(str(params["error"]))
        return self.identity


class StubAvatarFetcher(AvatarFetcher):
    """Serves canned bytes; ``fail`` simulates an unreachable host."""

    def __init__(self, data: bytes = b"\xff\xd8\xff-avatar", fail: bool = False) -> None:
        self.data = data
        self.fail = fail
        self.fetched: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if self.fail:
            raise OSError(f"Could not download {url}")
        return self.data
