"""
authgate.services._shared.ports
===============================

Hexagonal ports the services depend on. Concrete adapters live under
``authgate.infra``; the in-memory and stub implementations here back the
unit tests.

- :mod:`token_issuer`: :class:`~.TokenIssuer`, mint/refresh/revoke bearer tokens.
- :mod:`denylist_store`: :class:`~.TokenDenylistStore`, revoked ``jti`` storage.
- :mod:`asset_store`: :class:`~.AssetStore` and :class:`~.AssetStoreRouter`.
- :mod:`identity_provider`: :class:`~.IdentityProvider`, :class:`~.AvatarFetcher`.
"""

from __future__ import annotations

from .asset_store import AssetStore, AssetStoreRouter, InMemoryAssetStore
from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .identity_provider import (
    AvatarFetcher,
    ExternalIdentity,
    IdentityProvider,
    StubAvatarFetcher,
    StubIdentityProvider,
)
from .token_issuer import StubTokenIssuer, TokenIssuer

__all__ = [
    "AssetStore",
    "AssetStoreRouter",
    "InMemoryAssetStore",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "ExternalIdentity",
    "IdentityProvider",
    "AvatarFetcher",
    "StubIdentityProvider",
    "StubAvatarFetcher",
    "TokenIssuer",
    "StubTokenIssuer",
]
