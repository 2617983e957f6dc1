"""
Implementation of cache-coherent request execution.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from logging import Logger

from .cache import CacheGateway, CacheHit
from .envelope import ResponseEnvelope
from .fetcher import BaseFetcher, RequestOptions

__all__ = [
    "RequestExecutor",
]

DEFAULT_CACHE_SECONDS = 60
"""
Lifetime of cached responses if not specified per request.
"""

JSON_CONTENT_TYPE = "application/json"

_ENCODE_METHODS = {"POST", "PUT"}


class RequestExecutor:
    """
    Issues one logical request, deciding when to read, write or invalidate
    the cache entry for the request URL.
    """

    _fetcher: BaseFetcher
    _cache: CacheGateway
    _default_ttl: int
    _logger: Logger

    def __init__(
        self,
        fetcher: BaseFetcher,
        cache: CacheGateway | None = None,
        *,
        default_ttl: int = DEFAULT_CACHE_SECONDS,
        logger: Logger | None = None,
    ):
        self._fetcher = fetcher
        self._cache = cache or CacheGateway(logger=logger)
        self._default_ttl = default_ttl
        self._logger = logger or logging.getLogger()

    @property
    def cache(self) -> CacheGateway:
        return self._cache

    def execute(
        self,
        url: str,
        options: RequestOptions | None = None,
        *,
        no_cache: bool = False,
        ttl_seconds: int | None = None,
    ) -> ResponseEnvelope:
        """
        Execute request and return its envelope.

        :param url: Full request URL, also used as cache key
        :param options: Method, payload and headers; GET with no body if omitted
        :param no_cache: Bypass cache read for GET; the response is still cached
        :param ttl_seconds: Lifetime of cache entry written, or executor default
        """
        options = _encode(options or RequestOptions())
        method = options.method.upper()
        key = url

        if method != "GET":
            # invalidate before dispatch regardless of outcome
            self._cache.remove(key)

        elif not no_cache:
            result = self._cache.get(key)
            if isinstance(result, CacheHit):
                self._logger.debug(f"Cache hit: {method} {url}")
                return result.envelope

        envelope = self._fetcher.execute(url, options)
        envelope.cached = False

        self._logger.debug(
            f"{method} {url}: success={envelope.success}, code={envelope.code}"
        )

        if method == "GET" and envelope.success:
            self._cache.put(
                key,
                envelope,
                ttl_seconds if ttl_seconds is not None else self._default_ttl,
            )

        return envelope


def _encode(options: RequestOptions) -> RequestOptions:
    """
    Return options with a structured POST/PUT payload serialized to JSON.
    """
    if options.method.upper() not in _ENCODE_METHODS:
        return options

    if not isinstance(options.payload, (dict, list)):
        return options

    return replace(
        options,
        payload=json.dumps(options.payload),
        content_type=JSON_CONTENT_TYPE,
    )
