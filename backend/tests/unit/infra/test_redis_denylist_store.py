# tests/unit/infra/test_redis_denylist_store.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from authgate.infra.redis import RedisTokenDenylistStore


@pytest.fixture()
def r():
    return fakeredis.FakeRedis()


def test_revoke_and_lookup(r):
    store = RedisTokenDenylistStore(r)
    assert store.is_revoked("abc") is False

    store.revoke_jti(jti="abc", expires_at=datetime.now(UTC) + timedelta(minutes=10))

    assert store.is_revoked("abc") is True
    assert 0 < r.ttl("deny:at:abc") <= 600


def test_past_expiry_still_lists_briefly(r):
    store = RedisTokenDenylistStore(r, prefix="t:")
    store.revoke_jti(jti="old", expires_at=datetime.now(UTC) - timedelta(hours=1))
    assert r.ttl("t:old") == 1


def test_revoke_is_idempotent(r):
    store = RedisTokenDenylistStore(r)
    exp = datetime.now(UTC) + timedelta(minutes=1)
    store.revoke_jti(jti="dup", expires_at=exp)
    store.revoke_jti(jti="dup", expires_at=exp)
    assert store.is_revoked("dup") is True
    assert len(r.keys("deny:at:*")) == 1
