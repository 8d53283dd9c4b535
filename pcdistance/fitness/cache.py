"""Similarity cache shared across candidate evaluations.
Searches evaluate whole populations of candidates against the same path
condition, and many candidates agree on the values a given clause reads.
The cache memoizes clause scores under ``(clause handler, resolved values)``.
Entries are written once and read many times; a miss is equivalent to
having no cache at all.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheStats:
    """Statistics for cache performance."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    rejected_writes: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def __str__(self) -> str:
        return (
            f"CacheStats(hits={self.hits}, misses={self.misses}, "
            f"hit_rate={self.hit_rate * 100:.1f}%, evictions={self.evictions})"
        )


class SimilarityCache:
    """Thread-safe, bounded, write-once LRU cache of clause similarities."""

    def __init__(self, maxsize: int = 100_000):
        self.maxsize = maxsize
        self._cache: OrderedDict[Hashable, float] = OrderedDict()
        self._lock = threading.RLock()
        self.stats = CacheStats()

    def get(self, key: Hashable) -> float | None:
        """Get a cached similarity, or None on a miss."""
        try:
            with self._lock:
                if key in self._cache:
                    self._cache.move_to_end(key)
                    self.stats.hits += 1
                    return self._cache[key]
                self.stats.misses += 1
                return None
        except TypeError:
            # unhashable candidate values are never cached
            with self._lock:
                self.stats.misses += 1
            return None

    def put(self, key: Hashable, value: float) -> bool:
        """Store a similarity unless the key is already present.
        Returns:
            True if the entry was written.
        """
        try:
            hash(key)
        except TypeError:
            return False
        with self._lock:
            if key in self._cache:
                self.stats.rejected_writes += 1
                return False
            self._cache[key] = value
            while len(self._cache) > self.maxsize:
                self._cache.popitem(last=False)
                self.stats.evictions += 1
            return True

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self.stats = CacheStats()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def hit_rate(self) -> float:
        return self.stats.hit_rate

    def snapshot(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "size": len(self._cache),
                "maxsize": self.maxsize,
                "hits": self.stats.hits,
                "misses": self.stats.misses,
                "evictions": self.stats.evictions,
                "hit_rate": self.stats.hit_rate,
            }


__all__ = ["CacheStats", "SimilarityCache"]
