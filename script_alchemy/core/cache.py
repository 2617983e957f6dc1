"""
Implements a cache of response envelopes keyed by request URL.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import Logger

from .envelope import ResponseEnvelope

__all__ = [
    "BaseCacheStore",
    "MemoryCacheStore",
    "CacheGateway",
    "CacheHit",
    "CACHE_MISS",
]


class BaseCacheStore(ABC):
    """
    Keyed store with per-entry lifetime. Expiry is entirely the store's
    concern; an expired entry must simply not be returned.
    """

    @abstractmethod
    def get(self, key: str) -> ResponseEnvelope | None:
        """
        Return stored envelope, or `None` if absent or expired.
        """
        ...

    @abstractmethod
    def put(self, key: str, envelope: ResponseEnvelope, ttl_seconds: int):
        """
        Store envelope for `ttl_seconds`.
        """
        ...

    @abstractmethod
    def remove(self, key: str):
        """
        Remove entry if it exists.
        """
        ...


class MemoryCacheStore(BaseCacheStore):
    """
    In-process store with expiry based on a monotonic clock.
    """

    _entries: dict[str, tuple[ResponseEnvelope, float]]
    """Mapping of key to (envelope, expiry)"""

    def __init__(self):
        self._entries = dict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> ResponseEnvelope | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        envelope, expiry = entry

        if time.monotonic() >= expiry:
            self._entries.pop(key, None)
            return None

        return envelope

    def put(self, key: str, envelope: ResponseEnvelope, ttl_seconds: int):
        now = time.monotonic()

        # prune entries which expired without being read again
        for k, (_, expiry) in list(self._entries.items()):
            if now >= expiry:
                self._entries.pop(k, None)

        self._entries[key] = (envelope, now + ttl_seconds)

    def remove(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()


@dataclass(frozen=True)
class CacheHit:
    """
    Envelope found in cache. Kept distinct from a miss so that a cached
    failure is still a hit.
    """

    envelope: ResponseEnvelope


class _CacheMiss:
    def __repr__(self) -> str:
        return "CACHE_MISS"


CACHE_MISS = _CacheMiss()
"""
Result of a cache lookup which found nothing.
"""

CacheResult = CacheHit | _CacheMiss


class CacheGateway:
    """
    Wraps an optional {obj}`BaseCacheStore`. All operations are no-ops if no
    store was provided, and never raise: a failing store degrades to
    uncached operation.
    """

    _store: BaseCacheStore | None
    _logger: Logger

    def __init__(
        self, store: BaseCacheStore | None = None, logger: Logger | None = None
    ):
        self._store = store
        self._logger = logger or logging.getLogger()

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def get(self, key: str) -> CacheResult:
        """
        Lookup envelope; a hit is a copy tagged as cached, leaving the
        stored envelope untouched.
        """
        if self._store is None:
            return CACHE_MISS

        try:
            envelope = self._store.get(key)
        except Exception as e:
            self._logger.warning(f"Cache read failed for key='{key}': {e}")
            return CACHE_MISS

        if envelope is None:
            return CACHE_MISS

        return CacheHit(envelope.model_copy(deep=True, update={"cached": True}))

    def put(self, key: str, envelope: ResponseEnvelope, ttl_seconds: int):
        if self._store is None:
            return

        try:
            self._store.put(key, envelope.model_copy(deep=True), ttl_seconds)
        except Exception as e:
            self._logger.warning(f"Cache write failed for key='{key}': {e}")

    def remove(self, key: str):
        if self._store is None:
            return

        try:
            self._store.remove(key)
        except Exception as e:
            self._logger.warning(f"Cache remove failed for key='{key}': {e}")
