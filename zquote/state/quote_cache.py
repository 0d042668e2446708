"""
Short-lived memo for constant-product quotes.

Chart redraws and keystroke-driven previews ask for the same
(amount, reserves, fee) tuple many times within a few hundred milliseconds.
`QuoteCache` keeps those results for a bounded time and a bounded count:

- two independent pools (forward / inverse) so keys of the two formulas never
  collide,
- an expired entry reads as a miss and is dropped on that read,
- when a pool is full the oldest insertion is replaced (insertion order, not
  LRU; the TTL is short enough that recency adds nothing).

All read-check and insert sequences run under one lock, so the cache can be
shared between threads.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum, unique
from typing import Callable, Dict, Optional


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50
DEFAULT_TTL_MS = 2_000

Clock = Callable[[], int]


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


@unique
class CachePool(Enum):
    FORWARD = "amount_out"
    INVERSE = "amount_in"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: int
    inserted_at_millis: int


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    expired: int
    evictions: int
    size: int


def make_key(*parts: int) -> str:
    """Stringify a formula's full argument tuple."""
    return "-".join(str(p) for p in parts)


class QuoteCache:
    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Optional[Clock] = None,
    ) -> None:
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise ValueError(f"capacity must be a positive int: {capacity!r}")
        if not isinstance(ttl_ms, int) or isinstance(ttl_ms, bool) or ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be a positive int: {ttl_ms!r}")
        self.capacity = capacity
        self.ttl_ms = ttl_ms
        self._clock: Clock = clock if clock is not None else monotonic_ms
        self._lock = threading.Lock()
        self._pools: Dict[CachePool, "OrderedDict[str, CacheEntry]"] = {
            pool: OrderedDict() for pool in CachePool
        }
        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._evictions = 0

    def get(self, pool: CachePool, key: str) -> Optional[int]:
        now = self._clock()
        with self._lock:
            entries = self._pools[pool]
            entry = entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if now - entry.inserted_at_millis >= self.ttl_ms:
                del entries[key]
                self._expired += 1
                self._misses += 1
                logger.debug("quote cache: expired %s entry %s", pool.value, key)
                return None
            self._hits += 1
            return entry.value

    def put(self, pool: CachePool, key: str, value: int) -> None:
        now = self._clock()
        with self._lock:
            entries = self._pools[pool]
            if key in entries:
                # Re-inserting refreshes both the timestamp and the insertion order.
                del entries[key]
            while len(entries) >= self.capacity:
                oldest, _ = entries.popitem(last=False)
                self._evictions += 1
                logger.debug("quote cache: evicted %s entry %s", pool.value, oldest)
            entries[key] = CacheEntry(key=key, value=value, inserted_at_millis=now)

    def clear(self) -> None:
        with self._lock:
            for entries in self._pools.values():
                entries.clear()

    def size(self, pool: Optional[CachePool] = None) -> int:
        with self._lock:
            if pool is not None:
                return len(self._pools[pool])
            return sum(len(entries) for entries in self._pools.values())

    def __len__(self) -> int:
        return self.size()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                expired=self._expired,
                evictions=self._evictions,
                size=sum(len(entries) for entries in self._pools.values()),
            )
