"""Tiny in-process TTL cache for hot derived values.

Properties:
- process-local, explicitly constructed (no module-level table)
- entries expire by age only; writes never invalidate other keys
- bounded: at capacity the oldest inserted entry is evicted
- compute-on-miss runs outside the lock, so concurrent misses may both
  compute; the last store wins
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from time import monotonic
from typing import Callable, Generic, Hashable, Optional, TypeVar

from mono.core.metrics import observe_cache

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class _Entry(Generic[V]):
    stored_at: float
    value: V


class TTLCache(Generic[K, V]):
    def __init__(
        self,
        *,
        ttl_seconds: float,
        max_items: int,
        name: str = "default",
        clock: Callable[[], float] = monotonic,
    ) -> None:
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.ttl_seconds = float(ttl_seconds)
        self.max_items = int(max_items)
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[K, _Entry[V]] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def _is_fresh(self, entry: _Entry[V], now: float) -> bool:
        return now - entry.stored_at < self.ttl_seconds

    def _purge_expired(self, now: float) -> None:
        stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in stale:
            del self._entries[key]

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def _lookup(self, key: K):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            if not self._is_fresh(entry, self._clock()):
                del self._entries[key]
                return _MISSING
            return entry.value

    def set(self, key: K, value: V) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_items:
                self._purge_expired(now)
            while len(self._entries) >= self.max_items:
                self._entries.popitem(last=False)
            self._entries[key] = _Entry(stored_at=now, value=value)

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for ``key``, computing and storing it on a miss."""

        value = self._lookup(key)
        if value is not _MISSING:
            observe_cache(cache=self.name, hit=True)
            return value
        observe_cache(cache=self.name, hit=False)
        logger.debug("cache miss", extra={"cache": self.name, "key": repr(key)})
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["TTLCache"]
