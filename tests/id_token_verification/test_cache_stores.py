from typing import Any

import pytest

import id_token_verification as m
from id_token_verification import cache_stores


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    now = [1000.0]
    monkeypatch.setattr(cache_stores.time, "time", lambda: now[0])
    return now


def test_inmemory_cache_set_get(clock: list[float]):
    cache = m.InMemoryCache()

    cache.set("k1", "pem-1", ttl_seconds=60)
    assert cache.get("k1") == "pem-1"
    assert cache.is_missing("k1") is False


def test_inmemory_cache_expires(clock: list[float]):
    cache = m.InMemoryCache()
    cache.set("k1", "pem-1", ttl_seconds=60)

    clock[0] += 60
    assert cache.get("k1") is None


def test_inmemory_cache_requires_kid():
    with pytest.raises(ValueError):
        m.InMemoryCache().set("", "pem", ttl_seconds=60)


def test_inmemory_negative_cache(clock: list[float]):
    cache = m.InMemoryCache()
    cache.set_missing("bad", ttl_seconds=30)

    assert cache.get("bad") is None
    assert cache.is_missing("bad") is True

    clock[0] += 30
    assert cache.is_missing("bad") is False


def test_inmemory_delete():
    cache = m.InMemoryCache()
    cache.set("k1", "pem-1", ttl_seconds=60)
    cache.delete("k1")
    cache.delete("never-there")

    assert cache.get("k1") is None


def test_redis_cache_roundtrip(fake_redis: Any):
    cache = m.RedisCache(fake_redis)

    cache.set("k2", "pem-2", ttl_seconds=60)

    assert cache.get("k2") == "pem-2"
    assert cache.is_missing("k2") is False
    assert fake_redis.get("id-token-certs:k2") is not None


def test_redis_negative_cache_and_delete(fake_redis: Any):
    cache = m.RedisCache(fake_redis, namespace="t:")

    cache.set_missing("bad", ttl_seconds=30)
    assert cache.get("bad") is None
    assert cache.is_missing("bad") is True

    cache.delete("bad")
    assert cache.is_missing("bad") is False


def test_redis_cache_invalid_json_raises(fake_redis: Any):
    cache = m.RedisCache(fake_redis)

    fake_redis.setex("id-token-certs:bad", 60, "not-json")
    with pytest.raises(RuntimeError):
        cache.get("bad")
    assert cache.is_missing("bad") is False


def test_redis_cache_wraps_client_errors():
    class DownRedis:
        def setex(self, *args: Any) -> None:
            raise ConnectionError("down")

    with pytest.raises(RuntimeError):
        m.RedisCache(DownRedis()).set("k", "pem", ttl_seconds=60)
