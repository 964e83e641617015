"""
Key-Value Cache for the Phone Order Service
===========================================

A small cache abstraction injected into the customer resolver and the
analytics aggregator. Callers only rely on ``get``/``set``/``delete`` keyed by
string, so the in-memory backend can be swapped for a shared one (e.g. Redis)
in multi-worker deployments without touching the services.

Entries may carry a TTL. Expired entries are dropped lazily on read and by a
probabilistic sweep on write, so no background thread is needed.

Thread Safety:
--------------
All operations on ``InMemoryCache`` take a ``threading.Lock``; submissions run
in worker threads and admin requests in FastAPI's threadpool.

Usage:
------
    cache = InMemoryCache()
    cache.set("phone_order_customer_<hash>", 42, ttl=3600)
    cache.get("phone_order_customer_<hash>")   # -> 42
    cache.delete("phone_order_customer_<hash>")
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


logger = logging.getLogger(__name__)


class Cache:
    """Interface every cache backend implements. A miss returns None."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryCache(Cache):
    """
    Process-local cache with optional per-entry TTL.

    Structure: {key: (value, expires_at or None)}
    """

    # Fraction of writes that also sweep expired entries
    SWEEP_PROBABILITY = 0.01

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._entries[key] = (value, expires_at)

        if random.random() < self.SWEEP_PROBABILITY:
            self._sweep_expired()

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                key for key, (_, expires_at) in self._entries.items()
                if expires_at is not None and now >= expires_at
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)
