#!/usr/bin/env python3
"""
Result cache for recipe scaling.
A small key/value cache with per-entry TTL. The scaler only uses a cache that
is handed to it explicitly; there is no module-level cache.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import structlog
from prometheus_client import Counter

from .config import config
from .monitoring_logging import record_metric

# Metrics
CACHE_OPERATIONS = Counter('scaling_cache_operations_total', 'Total cache operations', ['operation', 'result'])
CACHE_EVICTIONS = Counter('scaling_cache_evictions_total', 'Total cache evictions', ['reason'])

logger = structlog.get_logger(__name__)


@dataclass
class CacheKey:
    """Structured cache key."""
    prefix: str
    identifier: str
    version: str = "v1"

    def __str__(self) -> str:
        return f"{self.prefix}:{self.version}:{self.identifier}"


@dataclass
class CacheEntry:
    """Cache entry with metadata."""
    key: str
    data: Any
    created_at: float
    expires_at: Optional[float] = None
    access_count: int = 0
    last_accessed: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass
class CacheStats:
    """Cache statistics."""
    hit_count: int = 0
    miss_count: int = 0
    eviction_count: int = 0
    entry_count: int = 0

    @property
    def hit_ratio(self) -> float:
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total > 0 else 0.0


class CacheInterface:
    """Abstract cache interface."""

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Set value in cache."""
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        raise NotImplementedError

    def clear(self) -> bool:
        """Clear all cache entries."""
        raise NotImplementedError

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        raise NotImplementedError


class InMemoryCache(CacheInterface):
    """Process-local cache with TTL expiry and least-recently-used eviction."""

    def __init__(self, default_ttl: Optional[float] = None, max_entries: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            default_ttl: Seconds an entry lives when set() gets no ttl. None uses
                the configured CACHE_TTL; 0 disables expiry
            max_entries: Entry count above which the oldest entries are evicted
            clock: Monotonic time source, injectable for tests
        """
        self.default_ttl = config.CACHE_TTL if default_ttl is None else default_ttl
        self.max_entries = config.CACHE_MAX_ENTRIES if max_entries is None else max_entries
        self.clock = clock
        self.stats = CacheStats()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache; expired entries count as misses."""
        key = str(key)
        with self._lock:
            now = self.clock()
            entry = self._entries.get(key)

            if entry is not None and entry.is_expired(now):
                self._evict(key, "expired")
                entry = None

            if entry is None:
                self.stats.miss_count += 1
                record_metric(CACHE_OPERATIONS, operation="get", result="miss")
                return None

            entry.access_count += 1
            entry.last_accessed = now
            self._entries.move_to_end(key)
            self.stats.hit_count += 1
            record_metric(CACHE_OPERATIONS, operation="get", result="hit")
            return entry.data

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Set value in cache."""
        key = str(key)
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self.clock()
            self._entries[key] = CacheEntry(
                key=key,
                data=value,
                created_at=now,
                expires_at=now + ttl if ttl else None
            )
            self._entries.move_to_end(key)

            while self.max_entries and len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                self._evict(oldest, "capacity")

            self.stats.entry_count = len(self._entries)
        record_metric(CACHE_OPERATIONS, operation="set", result="success")
        return True

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        with self._lock:
            removed = self._entries.pop(str(key), None) is not None
            self.stats.entry_count = len(self._entries)
        record_metric(CACHE_OPERATIONS, operation="delete", result="success" if removed else "miss")
        return removed

    def exists(self, key: str) -> bool:
        """Check if a live entry exists without touching hit/miss counters."""
        with self._lock:
            entry = self._entries.get(str(key))
            return entry is not None and not entry.is_expired(self.clock())

    def clear(self) -> bool:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()
            self.stats.entry_count = 0
        record_metric(CACHE_OPERATIONS, operation="clear", result="success")
        logger.debug("Cache cleared")
        return True

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            self.stats.entry_count = len(self._entries)
            return self.stats

    def _evict(self, key: str, reason: str):
        """Drop an entry; caller holds the lock."""
        self._entries.pop(key, None)
        self.stats.eviction_count += 1
        self.stats.entry_count = len(self._entries)
        record_metric(CACHE_EVICTIONS, reason=reason)
        logger.debug("Cache entry evicted", key=key, reason=reason)
