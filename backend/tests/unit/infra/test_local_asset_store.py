# tests/unit/infra/test_local_asset_store.py
from __future__ import annotations

import pytest
from authgate.infra.storage import LocalAssetStore


def test_put_exists_delete(tmp_path):
    store = LocalAssetStore(tmp_path, name="primary")
    key = "profile_images/profile_abc.jpg"

    store.put(key, b"jpeg-bytes")

    assert store.exists(key) is True
    assert (tmp_path / key).read_bytes() == b"jpeg-bytes"
    assert not (tmp_path / "profile_images" / "profile_abc.jpg.part").exists()

    store.delete(key)
    assert store.exists(key) is False


def test_delete_missing_is_noop(tmp_path):
    LocalAssetStore(tmp_path).delete("profile_images/nothing.jpg")


@pytest.mark.parametrize("key", ["../escape.jpg", "profile_images/../../etc/passwd"])
def test_keys_cannot_escape_root(tmp_path, key):
    store = LocalAssetStore(tmp_path / "root")
    with pytest.raises(ValueError):
        store.put(key, b"x")
