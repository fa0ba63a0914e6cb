import time
from typing import Any, Optional, Dict, Tuple
import threading
import logging

logger = logging.getLogger(__name__)


class CacheService:
    """
    In-process cache with per-entry expiry.

    Provides different TTL presets:
    - PREDICTIONS: 10 minutes
    - HISTORICAL: 1 hour
    """

    # TTL Presets (in seconds)
    TTL_PREDICTIONS = 600
    TTL_HISTORICAL = 3600

    MAX_ENTRIES = 2048

    def __init__(self, max_entries: int = MAX_ENTRIES):
        """Initialize the cache service."""
        self._memory_cache: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self.max_entries = max_entries

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache, or None if missing or expired."""
        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is not None:
                value, expires_at = entry
                if expires_at > time.monotonic():
                    self._hits += 1
                    return value
                del self._memory_cache[key]

            self._misses += 1
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """
        Store a value, dropping expired entries first.

        When the cache is still full, the oldest insertions are evicted.
        """
        with self._lock:
            now = time.monotonic()
            self._evict_expired(now)
            self._memory_cache.pop(key, None)
            while len(self._memory_cache) >= self.max_entries:
                oldest = next(iter(self._memory_cache))
                del self._memory_cache[oldest]
            self._memory_cache[key] = (value, now + ttl_seconds)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (_, expires_at) in self._memory_cache.items() if expires_at <= now]
        for key in expired:
            del self._memory_cache[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry."""
        with self._lock:
            return self._memory_cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._memory_cache.clear()
            logger.info("Cache cleared")

    @property
    def stats(self) -> dict:
        with self._lock:
            return {"entries": len(self._memory_cache), "hits": self._hits, "misses": self._misses}

    # --- Helper methods for specific cache types ---

    def get_predictions(self, key: str) -> Optional[Any]:
        """Get a model result from cache."""
        return self.get(f"predictions:{key}")

    def set_predictions(self, key: str, data: Any) -> None:
        """Set a model result in cache."""
        self.set(f"predictions:{key}", data, self.TTL_PREDICTIONS)

    def get_historical(self, key: str) -> Optional[Any]:
        return self.get(f"historical:{key}")

    def set_historical(self, key: str, data: Any) -> None:
        self.set(f"historical:{key}", data, self.TTL_HISTORICAL)


# Singleton instance
_cache_instance: Optional[CacheService] = None
_instance_lock = threading.Lock()


def get_cache_service() -> CacheService:
    """Get the singleton cache service instance."""
    global _cache_instance
    if _cache_instance is None:
        with _instance_lock:
            if _cache_instance is None:
                _cache_instance = CacheService()
                logger.info("CacheService initialized")
    return _cache_instance
