# core/cache.py
from __future__ import annotations
import json
import logging
import math
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple

from core.exceptions import CacheKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    inserted_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.inserted_at + self.ttl

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """
    In-process TTL cache for provider responses.

    Entries expire `ttl` seconds after insertion and are dropped lazily on read;
    writes also sweep expired entries. When `enabled` is False, `get` always
    misses and `set` is a no-op, so callers must treat the cache as optional.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: int = 60,
        enabled: bool = True,
        maxsize: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl = ttl_seconds
        self.enabled = enabled
        self.maxsize = maxsize
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str):
        if not self.enabled:
            return None
        with self._lock:
            rec = self._store.get(key)
            if rec is not None and rec.expired(self._clock()):
                self._store.pop(key, None)
                rec = None
            if rec is None:
                self.misses += 1
            else:
                self.hits += 1
        if rec is None:
            logger.debug("%s cache miss", self.name, extra={"key": key})
            return None
        logger.debug("%s cache hit", self.name, extra={"key": key})
        return rec.value

    def set(self, key: str, val: Any, ttl: Optional[float] = None) -> bool:
        if not self.enabled:
            return False
        ttl = ttl or self.ttl
        with self._lock:
            now = self._clock()
            self._purge_expired_locked(now)
            if key not in self._store and len(self._store) >= self.maxsize:
                # simple eviction: pop oldest
                old_key = next(iter(self._store))
                self._store.pop(old_key, None)
            self._store.pop(key, None)
            self._store[key] = CacheEntry(value=val, inserted_at=now, ttl=ttl)
        logger.debug("%s data cached", self.name, extra={"key": key, "ttl": ttl})
        return True

    def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._store.pop(key, None) is not None else 0

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
        logger.info("%s cache cleared", self.name)

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def _purge_expired_locked(self, now: float) -> int:
        stale = [k for k, e in self._store.items() if e.expired(now)]
        for k in stale:
            del self._store[k]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._store.values() if not e.expired(now))

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "enabled": self.enabled,
            "ttl_seconds": self.ttl,
            "hits": self.hits,
            "misses": self.misses,
            "size": len(self),
            "hit_rate": (self.hits / total) if total else 0.0,
        }

    def reset_stats(self) -> None:
        with self._lock:
            self.hits = 0
            self.misses = 0

    async def aget_or_set(
        self, key: str, creator: Callable[[], Awaitable[Any]]
    ) -> Tuple[Any, bool]:
        """Return (value, True) on a hit; otherwise await `creator`, store its result and return (value, False)."""
        hit = self.get(key)
        if hit is not None:
            return hit, True
        val = await creator()
        self.set(key, val)
        return val, False


# ---- key derivation ----


def _canonical_json(options: Optional[Mapping[str, Any]]) -> str:
    if not options:
        return ""
    provided = {k: v for k, v in options.items() if v is not None}
    if not provided:
        return ""
    try:
        return json.dumps(provided, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CacheKeyError(f"options are not JSON-serializable: {e}") from e


def geocoding_cache_key(query: str, options: Optional[Mapping[str, Any]] = None) -> str:
    """geocoding:<lower-trimmed query>:<canonical JSON of provided options>"""
    if not isinstance(query, str):
        raise CacheKeyError("geocoding query must be a string")
    normalized = query.strip().lower()
    return f"geocoding:{normalized}:{_canonical_json(options)}"


def _lnglat(point: Sequence[Any], label: str) -> str:
    if (
        not isinstance(point, (list, tuple))
        or len(point) != 2
        or not all(isinstance(v, Real) and not isinstance(v, bool) for v in point)
    ):
        raise CacheKeyError(f"{label} must be a [lng, lat] pair of numbers")
    if not all(math.isfinite(v) for v in point):
        raise CacheKeyError(f"{label} coordinates must be finite")
    return f"{_format_number(point[0])},{_format_number(point[1])}"


def _format_number(v: float) -> str:
    """Shortest text that reads back as `v`: 10 not 10.0, 1e-7 not 1e-07, 0.00001 not 1e-05."""
    v = float(v)
    if v == int(v):
        return str(int(v))
    text = repr(v)
    if "e" not in text:
        return text
    mantissa, exp = text.split("e")
    if int(exp) < -6:
        return f"{mantissa}e{int(exp)}"
    return format(Decimal(text), "f")


def directions_cache_key(
    start: Sequence[float], end: Sequence[float], profile: str
) -> str:
    """directions:<start lng,lat>:<end lng,lat>:<profile>"""
    if not isinstance(profile, str) or not profile:
        raise CacheKeyError("profile must be a non-empty string")
    return f"directions:{_lnglat(start, 'start')}:{_lnglat(end, 'end')}:{profile}"
