"""Filesystem-backed asset store for profile images."""

from __future__ import annotations

import logging
from pathlib import Path

from authgate.services._shared.ports import AssetStore

log = logging.getLogger(__name__)


class LocalAssetStore(AssetStore):
    """
    Store blobs as files under ``root``.

    Keys are relative POSIX paths (``profile_images/profile_x.jpg``); keys
    that would escape ``root`` are rejected with ``ValueError``.
    """

    def __init__(self, root: str | Path, *, name: str = "public") -> None:
        self.root = Path(root).resolve()
        self.name = name

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"Asset key escapes store root: {key!r}")
        return path

    def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".part")
        tmp.write_bytes(data)
        tmp.replace(path)
        log.debug("Stored asset", extra={"storage_key": key})

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        log.debug("Deleted asset", extra={"storage_key": key})
