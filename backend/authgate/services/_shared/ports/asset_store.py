from __future__ import annotations

from typing import Protocol


class AssetStore(Protocol):
    """
    Port for a blob store holding profile images under opaque keys.

    Implementations raise ``OSError`` (or a subclass) on I/O failure.
    """

    name: str

    def put(self, key: str, data: bytes) -> None: ...
    def exists(self, key: str) -> bool: ...
    def delete(self, key: str) -> None: ...


class InMemoryAssetStore(AssetStore):
    """Dict-backed store; ``fail_puts`` / ``fail_deletes`` simulate outages."""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self.blobs: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_puts = False
        self.fail_deletes = False

    def put(self, key: str, data: bytes) -> None:
        self.calls.append(("put", key))
        if self.fail_puts:
            raise OSError(f"{self.name}: write refused for {key}")
        self.blobs[key] = data

    def exists(self, key: str) -> bool:
        self.calls.append(("exists", key))
        return key in self.blobs

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_deletes:
            raise OSError(f"{self.name}: delete refused for {key}")
        self.blobs.pop(key, None)


PROFILE_IMAGE_PREFIX = "profile_images/"


class AssetStoreRouter:
    """
    Choose which backend holds a profile image.

    New images go to the primary store when one is configured, otherwise to
    the public store. An existing key is attributed to the primary store only
    when it lives under ``profile_images/``; everything else is public.
    """

    def __init__(self, public: AssetStore, primary: AssetStore | None = None) -> None:
        self.public = public
        self.primary = primary

    def for_new(self) -> AssetStore:
        return self.primary or self.public

    def owner_of(self, key: str) -> AssetStore:
        if self.primary is not None and key.startswith(PROFILE_IMAGE_PREFIX):
            return self.primary
        return self.public
