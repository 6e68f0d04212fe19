import pytest

from freight.core import redis as redis_module
from freight.core.config import settings
from freight.utils.hashing import cache_key, payload_hash
from freight.utils.idempotency import get_idempotent, scoped_key, set_idempotent


@pytest.mark.asyncio
async def test_idemp_flow(fake_redis):
    key = "pytest-idemp"
    assert await get_idempotent(key) is None
    await set_idempotent(key, {"ok": True})
    found = await get_idempotent(key)
    assert found == {"ok": True}
    assert fake_redis.expiry[f"idemp:{key}"] == settings.IDEMPOTENCY_TTL


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, ""])
async def test_missing_key_is_ignored(fake_redis, key):
    await set_idempotent(key, {"ok": True})
    assert fake_redis.store == {}
    assert await get_idempotent(key) is None


@pytest.mark.asyncio
async def test_without_redis(monkeypatch):
    monkeypatch.setattr(redis_module, "redis", None)
    await set_idempotent("k", {"ok": True})
    assert await get_idempotent("k") is None


def test_scoped_key():
    assert scoped_key(5, "payments.prepare", "k1") == "5:payments.prepare:k1"
    assert scoped_key(5, "payments.prepare", "k1") != scoped_key(6, "payments.prepare", "k1")
    assert scoped_key(5, "payments.prepare", None) is None
    assert scoped_key(5, "payments.prepare", "") is None


def test_payload_hash_ignores_key_order():
    assert payload_hash({"a": 1, "b": 2}) == payload_hash({"b": 2, "a": 1})
    assert payload_hash({"a": 1}) != payload_hash({"a": 2})


def test_cache_key_prefix():
    assert cache_key("price", {"a": 1}).startswith("price:")
