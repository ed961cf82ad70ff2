"""
Composite-record cache.

A small ``CacheBackend`` protocol with an in-process LRU implementation and a
Redis implementation, wrapped by :class:`ResultCache`, the advisory layer the
aggregation engine talks to.

Manifesto:
    The cache exists to save upstream calls, never to fail a request. A
    read error is a miss; a write error is a log line. Only an explicit
    flush reports failure, because an operator asked for it.

Architecture:
    ::

        CacheBackend (Protocol, sync)
        ├── InMemoryCache  : single process, bounded LRU + TTL
        └── RedisCache     : shared, SETEX / FLUSHDB

        ResultCache (async, advisory)
            get(AddressKey)            → CompositeRecord | None
            put(AddressKey, record)    → None   (errors swallowed + logged)
            flush()                    → None   (raises CacheError)

        key:   aggregated:{POSTCODE}:{HOUSENUMBER}
        value: CompositeRecord JSON (camelCase)

Examples:
    >>> cache = ResultCache(InMemoryCache(max_size=100), ttl_seconds=86400)
    >>> await cache.put(key, record)
    >>> (await cache.get(key)).cached
    True

Guardrails:
    ❌ DON'T: Let a cache exception escape ``get``/``put``
    ✅ DO: Treat an unreachable cache as an empty one

Tags:
    cache, redis, lru, ttl, addressiq

Doc-Types:
    - API Reference
    - Infrastructure Guide
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from collections import OrderedDict
from typing import Any, Protocol

import redis
from pydantic import ValidationError

from addressiq.core.errors import CacheError
from addressiq.core.logging import get_logger
from addressiq.core.settings import Settings
from addressiq.models.address import AddressKey
from addressiq.models.composite import CompositeRecord

log = get_logger(__name__)

DEFAULT_TTL_SECONDS = 86_400


class CacheBackend(Protocol):
    """Synchronous key/value store with per-key TTL. Values are JSON-serialisable."""

    name: str

    def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when absent or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        """Store ``value`` for ``ttl_seconds``."""
        ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None:
        """Remove every entry."""
        ...


# ------------------------------------------------------------------ #
# In-memory backend
# ------------------------------------------------------------------ #


class InMemoryCache:
    """Bounded LRU cache with TTL, safe to call from worker threads.

    Example:
        cache = InMemoryCache(max_size=500)
        cache.set("aggregated:3541ED:53", {...}, ttl_seconds=86400)
    """

    name = "memory"

    def __init__(self, *, max_size: int = 10_000):
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._store[key]
                return None
            self._store.move_to_end(key)
            return value

    def set(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                self._store.popitem(last=False)
            self._store[key] = (value, time.monotonic() + ttl_seconds)
            self._store.move_to_end(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        return len(self._store)


# ------------------------------------------------------------------ #
# Redis backend
# ------------------------------------------------------------------ #


class RedisCache:
    """Redis-backed cache shared between processes.

    Example:
        cache = RedisCache("redis://localhost:6379/0")
    """

    name = "redis"

    def __init__(self, url: str, *, client: Any | None = None):
        self._client = client if client is not None else redis.from_url(url, decode_responses=False)

    def get(self, key: str) -> Any | None:
        raw = self._client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        self._client.setex(key, ttl_seconds, json.dumps(value))

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def clear(self) -> None:
        """Flush the whole Redis database the URL points at."""
        self._client.flushdb()

    def ping(self) -> bool:
        return bool(self._client.ping())


def create_backend(redis_url: str, *, max_size: int = 10_000) -> CacheBackend:
    """Redis when a URL is configured, otherwise the in-memory LRU."""
    if redis_url:
        return RedisCache(redis_url)
    return InMemoryCache(max_size=max_size)


def build_result_cache(settings: Settings) -> ResultCache | None:
    """The process result cache, or ``None`` when caching is switched off."""
    if not settings.cache_enabled:
        return None
    backend = create_backend(settings.redis_url, max_size=settings.cache_max_entries)
    return ResultCache(backend, ttl_seconds=settings.cache_ttl_seconds)


# ------------------------------------------------------------------ #
# Advisory result cache
# ------------------------------------------------------------------ #


class ResultCache:
    """Async, failure-tolerant composite cache used by the aggregation engine."""

    def __init__(self, backend: CacheBackend, *, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.backend = backend
        self.ttl_seconds = ttl_seconds

    async def get(self, key: AddressKey) -> CompositeRecord | None:
        """Cached record marked ``cached=True``, or ``None`` on miss or cache fault."""
        cache_key = key.cache_key()
        try:
            raw = await asyncio.to_thread(self.backend.get, cache_key)
        except (redis.RedisError, OSError, ValueError) as e:
            log.warning("cache_read_failed", key=cache_key, backend=self.backend.name, error=str(e))
            return None
        if raw is None:
            return None

        try:
            record = CompositeRecord.model_validate(raw)
        except ValidationError as e:
            log.warning("cache_entry_invalid", key=cache_key, errors=e.error_count())
            return None
        return record.model_copy(update={"cached": True})

    async def put(self, key: AddressKey, record: CompositeRecord) -> None:
        """Store ``record``. Failures are logged, never raised."""
        cache_key = key.cache_key()
        try:
            await asyncio.to_thread(
                self.backend.set, cache_key, record.to_json(), ttl_seconds=self.ttl_seconds
            )
        except (redis.RedisError, OSError, TypeError, ValueError) as e:
            log.warning("cache_write_failed", key=cache_key, backend=self.backend.name, error=str(e))

    async def flush(self) -> None:
        """Remove every cached record.

        Raises:
            CacheError: the backend refused or could not be reached.
        """
        try:
            await asyncio.to_thread(self.backend.clear)
        except (redis.RedisError, OSError) as e:
            raise CacheError(f"cache flush failed: {e}", cause=e) from e
        log.info("cache_flushed", backend=self.backend.name)


__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "ResultCache",
    "build_result_cache",
    "create_backend",
]
