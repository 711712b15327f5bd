# src/storage/query_cache.py

"""In-memory TTL cache for completed search results."""

import logging
import time
from dataclasses import dataclass
from typing import Any

from src.config.settings import Settings
from src.models.search import SearchResult

logger = logging.getLogger("merch_search.cache")


def cache_key(query_text: str, max_results: int) -> str:
    """Key on normalised query text plus the result cap."""
    normalised = " ".join(query_text.lower().split())
    return f"search:{normalised}:{max_results}"


@dataclass
class CacheEntry:
    """A cached result and its expiry."""

    value: SearchResult
    timestamp: float
    expires_at: float


class ResultCache:
    """Key/value cache with per-entry TTL; absence is never an error."""

    def __init__(
        self,
        ttl: float | None = None,
        enabled: bool | None = None,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._ttl: float = Settings.CACHE_TTL if ttl is None else ttl
        self.enabled: bool = (
            Settings.CACHE_ENABLED if enabled is None else enabled
        )

    def get(self, key: str) -> SearchResult | None:
        """Return the cached value, or ``None`` on miss or expiry."""
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache miss for '%s'", key)
            return None
        if time.time() > entry.expires_at:
            logger.debug("Cache entry expired for '%s'", key)
            del self._entries[key]
            return None
        logger.info("Cache hit for '%s'", key)
        return entry.value

    def set(
        self, key: str, value: SearchResult, ttl: float | None = None,
    ) -> None:
        """Store *value* for *ttl* seconds (default TTL when omitted)."""
        if not self.enabled:
            return
        now = time.time()
        lifetime = self._ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(
            value=value, timestamp=now, expires_at=now + lifetime,
        )
        logger.debug("Cached '%s' for %.0fs", key, lifetime)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> int:
        """Purge all entries; returns how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache manually purged (%d entries removed)", count)
        return count

    def cleanup(self) -> int:
        """Evict expired entries; returns how many were removed."""
        now = time.time()
        expired = [k for k, e in self._entries.items() if now > e.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "enabled": self.enabled,
            "ttl": self._ttl,
        }
