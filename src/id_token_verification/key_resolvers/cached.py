"""
Caching key resolver.

Adds a time-bounded, per-kid cache in front of any key set source while
keeping the KeyResolver interface, so the verifier cannot tell the
difference.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..cache_stores import InMemoryCache
from ..refresh_gate import RefreshGate

if TYPE_CHECKING:
    from ..protocols import CacheStore, KeySetSource

logger = logging.getLogger(__name__)


class CachingKeyResolver:
    """
    Resolves public keys through a cache, refetching the key set on a miss.

    Resolution Strategy
    -------------------
    For each requested `kid`:

    1) Cache lookup (fast path)
        - If the PEM is cached → return it.
        - If the kid is negatively cached → return None without fetching.

    2) Refetch (rate-limited)
        - Fetch the whole key set from the source and cache every entry,
          using the response's max-age when present and `ttl_seconds`
          otherwise.
        - The first fetch always proceeds; later ones need the RefreshGate.

    3) Negative caching
        - If the kid is not in the fresh key set, cache it as missing for
          `missing_ttl_seconds`.

    `invalidate(kid)` drops a cached entry (used when a cached PEM turns out
    to be unusable) so the next lookup refetches.

    Parameters
    ----------
    source : KeySetSource
        Where key sets come from (normally GoogleCertsResolver).

    cache : CacheStore | None
        Defaults to a fresh InMemoryCache.

    ttl_seconds : int
        TTL for keys when the response declares no max-age.

    missing_ttl_seconds : int
        TTL for negative cache entries.

    min_interval : float
        Minimum interval between refetches after the first.

    alert_threshold : int
        Denials before RefreshGate logs a warning.
    """

    def __init__(
        self,
        source: KeySetSource,
        cache: CacheStore | None = None,
        ttl_seconds: int = 3600,
        missing_ttl_seconds: int = 30,
        min_interval: float = 60.0,
        alert_threshold: int = 40,
    ) -> None:
        self._source = source
        self._cache = cache or InMemoryCache()
        self._ttl = ttl_seconds
        self._missing_ttl = missing_ttl_seconds
        self._gate = RefreshGate(min_interval=min_interval, alert_threshold=alert_threshold)
        self._loaded = False

    def get_public_key(self, key_id: str | None) -> str | None:
        if not key_id:
            return None

        cached = self._cache.get(key_id)
        if cached is not None:
            logger.debug("Public key %s served from cache", key_id)
            return cached

        if self._cache.is_missing(key_id):
            logger.debug("Public key %s is negatively cached", key_id)
            return None

        if not self._gate.allow() and self._loaded:
            logger.info("Refetch for unknown key %s throttled", key_id)
            return None

        key_set = self._source.fetch_key_set()
        if key_set is None:
            return None
        self._loaded = True

        ttl = key_set.max_age if key_set.max_age else self._ttl
        for kid, pem in key_set.keys.items():
            self._cache.set(kid, pem, ttl_seconds=ttl)

        pem = key_set.keys.get(key_id)
        if pem is None:
            self._cache.set_missing(key_id, ttl_seconds=self._missing_ttl)
        return pem

    def invalidate(self, key_id: str) -> None:
        """Forget ``key_id`` so the next lookup refetches the key set."""
        self._cache.delete(key_id)
