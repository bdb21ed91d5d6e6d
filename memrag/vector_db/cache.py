# memrag/vector_db/cache.py
"""
QueryCache - bounded, TTL-based, coalescing cache of recent query results.

Guarantees:
    - LRU eviction once max_size entries are held
    - Entries older than ttl are misses
    - At most one concurrent load per key; concurrent callers for the same
      missing key block on the single in-flight load and share its outcome
    - invalidate_all() clears every entry and detaches in-flight loads, so
      a load that started before the invalidation never populates the cache
    - Loader errors are raised to every waiter as CacheLoadError and are
      never cached; waiters that joined another caller's load get joined=True
"""

from __future__ import annotations

import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from memrag.logging.logger import get_logger
from memrag.logging.tags import CACHE
from memrag.vector_db.exceptions import CacheLoadError

logger = get_logger(__name__)

V = TypeVar("V")

_WHITESPACE = re.compile(r"\s+")


def normalize_query(text: str) -> str:
    """Strip and collapse whitespace. Case is preserved."""
    return _WHITESPACE.sub(" ", text or "").strip()


@dataclass
class _Entry(Generic[V]):
    value: V
    created_at: float


@dataclass
class _Flight:
    generation: int
    done: threading.Event = field(default_factory=threading.Event)
    value: Any = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    loads: int
    load_failures: int
    evictions: int
    invalidations: int
    size: int


class QueryCache(Generic[V]):
    def __init__(
        self,
        max_size: int = 100,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Hashable, _Entry[V]]" = OrderedDict()
        self._inflight: Dict[Hashable, _Flight] = {}
        self._generation = 0

        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._load_failures = 0
        self._evictions = 0
        self._invalidations = 0

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _lookup(self, key: Hashable) -> Optional[_Entry[V]]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= self.ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def get(self, key: Hashable) -> Optional[V]:
        """Return the cached value or None; never triggers a load."""
        with self._lock:
            entry = self._lookup(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def get_or_load(self, key: Hashable, loader: Callable[[], V]) -> V:
        """
        Return the cached value for key, loading it at most once concurrently.

        Raises:
            CacheLoadError: If the loader (ours or the one we joined) failed
        """
        with self._lock:
            entry = self._lookup(key)
            if entry is not None:
                self._hits += 1
                return entry.value

            self._misses += 1
            flight = self._inflight.get(key)
            owner = flight is None
            if owner:
                flight = _Flight(generation=self._generation)
                self._inflight[key] = flight

        if not owner:
            flight.done.wait()
            if flight.error is not None:
                raise CacheLoadError(
                    f"Cache load failed for {key!r}: {flight.error}", joined=True
                ) from flight.error
            return flight.value

        return self._load(key, flight, loader)

    def _load(self, key: Hashable, flight: _Flight, loader: Callable[[], V]) -> V:
        try:
            value = loader()
        except Exception as e:
            flight.error = e
            with self._lock:
                self._loads += 1
                self._load_failures += 1
                if self._inflight.get(key) is flight:
                    del self._inflight[key]
            flight.done.set()
            logger.debug(f"{CACHE} Load failed for {key!r}: {e}")
            raise CacheLoadError(f"Cache load failed for {key!r}: {e}") from e

        flight.value = value
        with self._lock:
            self._loads += 1
            if self._inflight.get(key) is flight:
                del self._inflight[key]
            # A load that straddled an invalidation is handed to its waiters
            # but never stored
            if flight.generation == self._generation:
                self._store(key, value)
        flight.done.set()
        return value

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _store(self, key: Hashable, value: V) -> None:
        # Caller holds the lock
        self._entries[key] = _Entry(value=value, created_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            self._evictions += 1

    def put(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._store(key, value)

    def invalidate_all(self) -> None:
        with self._lock:
            self._generation += 1
            self._invalidations += 1
            dropped = len(self._entries)
            self._entries.clear()
            # New lookups start fresh loads instead of joining stale ones
            self._inflight.clear()
        if dropped:
            logger.debug(f"{CACHE} Invalidated {dropped} cached queries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                loads=self._loads,
                load_failures=self._load_failures,
                evictions=self._evictions,
                invalidations=self._invalidations,
                size=len(self._entries),
            )
