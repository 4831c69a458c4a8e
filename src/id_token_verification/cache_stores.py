"""Cache store implementations for identity provider public keys.

This module provides implementations of the CacheStore protocol used by
CachingKeyResolver to avoid fetching the certificate endpoint on every
verification.

Implementations:
- InMemoryCache: in-process dict (single process, tests)
- RedisCache: shared cache for multi-instance deployments

Both implementations support:
- TTL-based expiration
- Negative caching (remembering unknown kids to avoid repeated fetches)
- Explicit deletion, used to force a refetch after an unusable key

Security Note:
    A cached key stays trusted for its whole TTL even if the provider rotates
    it out. Prefer the endpoint's own ``max-age`` over long fixed TTLs.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class _CacheItem:
    """Internal cache entry with TTL tracking.

    Attributes:
        value: PEM string, or None if the kid is known-missing.
        expires_at: Unix timestamp after which the entry is ignored.
    """

    value: str | None
    expires_at: float


class InMemoryCache:
    """In-process cache of PEM public keys.

    Expired entries are removed lazily on access.

    Example:
        ```python
        cache = InMemoryCache()
        cache.set("kid-1", pem, ttl_seconds=300)
        cache.get("kid-1")  # -> pem

        cache.set_missing("bad-kid", ttl_seconds=30)
        assert cache.is_missing("bad-kid") is True
        ```
    """

    def __init__(self) -> None:
        self._store: dict[str, _CacheItem] = {}
        self._lock = threading.Lock()

    def _live_item(self, kid: str) -> _CacheItem | None:
        item = self._store.get(kid)
        if item is None:
            return None
        if time.time() >= item.expires_at:
            self._store.pop(kid, None)
            return None
        return item

    def get(self, kid: str) -> str | None:
        """Return the cached PEM, or None if absent, expired or known-missing."""
        with self._lock:
            item = self._live_item(kid)
            return item.value if item else None

    def set(self, kid: str, pem: str, ttl_seconds: int) -> None:
        """Cache a PEM for ``ttl_seconds``.

        Raises:
            ValueError: If ``kid`` is empty.
        """
        if not kid:
            raise ValueError("kid must be non-empty to be cached")

        with self._lock:
            self._store[kid] = _CacheItem(value=pem, expires_at=time.time() + ttl_seconds)

    def set_missing(self, kid: str, ttl_seconds: int) -> None:
        """Mark a kid as missing (negative caching)."""
        with self._lock:
            self._store[kid] = _CacheItem(value=None, expires_at=time.time() + ttl_seconds)

    def is_missing(self, kid: str) -> bool:
        """True if ``kid`` is negatively cached and not expired."""
        with self._lock:
            item = self._live_item(kid)
            return item is not None and item.value is None

    def delete(self, kid: str) -> None:
        with self._lock:
            self._store.pop(kid, None)


class RedisCache:
    """Redis-backed cache of PEM public keys.

    Entries are JSON documents so a negative-cache marker can share the key
    space with real keys. Expiration is delegated to Redis TTLs.

    Storage Format:
        - Keys: ``{"pem": "-----BEGIN ..."}``
        - Missing kids: ``{"__missing__": true}``

    Example:
        ```python
        import redis

        client = redis.Redis(host="localhost", port=6379, decode_responses=True)
        cache = RedisCache(redis_client=client)
        ```
    """

    def __init__(self, redis_client: Any, namespace: str = "id-token-certs:") -> None:
        """Initialize Redis cache.

        Args:
            redis_client: Any client exposing ``get``, ``setex`` and ``delete``
                (redis-py, fakeredis, ...).
            namespace: Prefix applied to every Redis key.
        """
        self._client = redis_client
        self._ns = namespace

    def _key(self, kid: str) -> str:
        return f"{self._ns}{kid}"

    def _load(self, kid: str) -> dict[str, Any] | None:
        data = self._client.get(self._key(kid))
        if data is None:
            return None
        try:
            obj = json.loads(data)
        except (json.JSONDecodeError, ValueError) as e:
            raise RuntimeError("Failed to deserialize cached key") from e
        if not isinstance(obj, dict):
            raise RuntimeError("Failed to deserialize cached key")
        return obj

    def get(self, kid: str) -> str | None:
        """Return the cached PEM.

        Raises:
            RuntimeError: If the stored entry is corrupted.
        """
        obj = self._load(kid)
        if obj is None or obj.get("__missing__") is True:
            return None

        pem = obj.get("pem")
        if not isinstance(pem, str):
            raise RuntimeError("Failed to deserialize cached key")
        return pem

    def set(self, kid: str, pem: str, ttl_seconds: int) -> None:
        """Cache a PEM with TTL.

        Raises:
            ValueError: If ``kid`` is empty.
            RuntimeError: If the Redis operation fails.
        """
        if not kid:
            raise ValueError("kid must be non-empty to be cached")

        try:
            self._client.setex(self._key(kid), ttl_seconds, json.dumps({"pem": pem}))
        except Exception as e:
            raise RuntimeError("Failed to cache key in Redis") from e

    def set_missing(self, kid: str, ttl_seconds: int) -> None:
        try:
            self._client.setex(self._key(kid), ttl_seconds, json.dumps({"__missing__": True}))
        except Exception as e:
            raise RuntimeError("Failed to cache missing key in Redis") from e

    def is_missing(self, kid: str) -> bool:
        """True if ``kid`` is negatively cached. Corrupted entries count as not missing."""
        try:
            obj = self._load(kid)
        except RuntimeError:
            return False
        return obj is not None and obj.get("__missing__") is True

    def delete(self, kid: str) -> None:
        try:
            self._client.delete(self._key(kid))
        except Exception as e:
            raise RuntimeError("Failed to delete cached key in Redis") from e
