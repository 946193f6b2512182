"""
Result Cache
=============
Thread-safe LRU cache of ``SentimentResult`` keyed by input fingerprint.

Usage::

    cache = ResultCache(capacity=2000)
    fp = fingerprint("I love it", "en")
    if (hit := cache.get(fp)) is None:
        cache.put(fp, result)

Entries are replace-or-insert; on overflow the least recently used entry
is evicted.  With ``ttl_seconds > 0`` expired entries count as absent and
are dropped on access.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .models import SentimentResult
from .text_processing import normalize_term

logger = logging.getLogger(__name__)

_SEPARATOR = "\x1f"


def fingerprint(text: str, language: str) -> str:
    """Stable key for (language, normalised text)."""
    payload = f"{language}{_SEPARATOR}{normalize_term(text or '')}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    """A single cached result with access bookkeeping."""
    fingerprint: str
    result: SentimentResult
    inserted_at: float = field(default_factory=time.monotonic)
    last_access: float = field(default_factory=time.monotonic)
    hits: int = 0


class ResultCache:
    """
    Features:
    - Fixed capacity with LRU eviction
    - Optional TTL
    - Thread-safe via RLock
    - Hit/miss/eviction statistics
    """

    def __init__(self, capacity: int = 2000, ttl_seconds: float = 0):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, fp: str) -> Optional[SentimentResult]:
        """Cached result for *fp*, or None if missing or expired."""
        with self._lock:
            entry = self._store.get(fp)
            if entry is None:
                self._misses += 1
                return None
            if self._expired(entry):
                del self._store[fp]
                self._misses += 1
                return None
            entry.hits += 1
            entry.last_access = time.monotonic()
            self._store.move_to_end(fp)
            self._hits += 1
            return entry.result

    def put(self, fp: str, result: SentimentResult) -> None:
        with self._lock:
            if fp in self._store:
                del self._store[fp]
            self._store[fp] = CacheEntry(fingerprint=fp, result=result)
            while len(self._store) > self.capacity:
                evicted, _ = self._store.popitem(last=False)
                self._evictions += 1
                logger.debug("Result cache evicted %s", evicted[:12])

    def invalidate(self, fp: str) -> bool:
        """Remove *fp*; returns True when an entry was present."""
        with self._lock:
            return self._store.pop(fp, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, fp: object) -> bool:
        with self._lock:
            entry = self._store.get(fp)  # type: ignore[arg-type]
            return entry is not None and not self._expired(entry)

    @property
    def stats(self) -> Dict[str, Any]:
        """Cache hit/miss statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._store),
                "capacity": self.capacity,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / max(total, 1), 4),
                "ttl_seconds": self.ttl_seconds,
            }

    def _expired(self, entry: CacheEntry) -> bool:
        return self.ttl_seconds > 0 and time.monotonic() - entry.inserted_at > self.ttl_seconds
