"""
Call-site middleware for engine operations

Logging and result caching are applied by wrapping a callable explicitly:

    forecast = with_logging(with_cache(service.forecast_revenue, ttl=60))

so that what runs around a computation is visible where it is wired up
(see services/analytics_engine.py).
"""
import copy
import fnmatch
import functools
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


logger = logging.getLogger(__name__)


class TTLCache:
    """
    In-memory cache with per-entry TTL and a size cap.

    One instance per engine; entries are keyed by operation name and
    arguments. Oldest entries are evicted first once max_entries is reached.
    Safe to share between request threads; every access holds _lock.
    """

    def __init__(self, default_ttl: float = 60.0, max_entries: int = 100,
                 clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        # {key: (stored_at, ttl, value)}
        self._entries: Dict[str, Tuple[float, float, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the cached value, or None if missing/expired"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            stored_at, ttl, value = entry
            if self._clock() - stored_at >= ttl:
                del self._entries[key]
                self._misses += 1
                return None

            self._hits += 1
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        stored = copy.deepcopy(value)
        with self._lock:
            if len(self._entries) >= self.max_entries and key not in self._entries:
                self._evict_oldest()
            self._entries[key] = (self._clock(), ttl if ttl is not None else self.default_ttl, stored)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Drop every key matching a glob pattern, e.g. 'forecast_revenue:*'

        Returns:
            Number of entries removed
        """
        with self._lock:
            matches = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
            for key in matches:
                del self._entries[key]
        if matches:
            logger.info(f"Invalidated {len(matches)} cache entries matching '{pattern}'")
        return len(matches)

    def get_stats(self) -> dict:
        with self._lock:
            size = len(self._entries)
            hits, misses = self._hits, self._misses
        lookups = hits + misses
        return {
            "size": size,
            "max_size": self.max_entries,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / lookups, 4) if lookups else None,
        }

    def _evict_oldest(self) -> None:
        # Caller holds _lock
        oldest_key = min(self._entries, key=lambda k: self._entries[k][0])
        del self._entries[oldest_key]


def _operation_name(fn: Callable) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


def make_cache_key(name: str, args: tuple, kwargs: dict) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{k}={kwargs[k]!r}" for k in sorted(kwargs))
    return f"{name}:{','.join(parts)}"


def with_logging(fn: Callable, log: Optional[logging.Logger] = None) -> Callable:
    """
    Wrap fn so each call logs its start, duration and failure.

    Exceptions are logged and re-raised unchanged.
    """
    log = log or logger
    name = _operation_name(fn)

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        log.info(f"[{name}] called args={args} kwargs={kwargs}")
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            log.error(f"[{name}] failed after {duration_ms:.2f}ms: {e}")
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        log.info(f"[{name}] completed in {duration_ms:.2f}ms")
        return result

    return wrapper


def with_cache(fn: Callable, ttl: float, cache: Optional[TTLCache] = None) -> Callable:
    """
    Wrap fn so results are reused for `ttl` seconds per distinct argument set.

    A ttl of 0 (or less) returns fn unchanged. Callers always receive their
    own copy of a cached result.
    """
    if ttl <= 0:
        return fn

    cache = cache if cache is not None else TTLCache(default_ttl=ttl)
    name = _operation_name(fn)

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        key = make_cache_key(name, args, kwargs)
        cached = cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        result = fn(*args, **kwargs)
        cache.set(key, result, ttl)
        logger.debug(f"Cache set: {key} (ttl={ttl}s)")
        return result

    wrapper.cache = cache
    return wrapper
