"""
Aggregation of paginated list endpoints.
"""

from __future__ import annotations

import logging
from logging import Logger

from .envelope import ResponseEnvelope
from .executor import RequestExecutor
from .utils import add_query

__all__ = [
    "PaginatedCollector",
]

DEFAULT_PAGE_SIZE = 100

NEXT_PAGE_TOKEN = "nextPageToken"


class PaginatedCollector:
    """
    Drives repeated GET requests until the server stops returning a
    next-page token, assembling one envelope holding every page's items.

    The first page's envelope carries the aggregate, but its `code` and
    `headers` are overwritten with those of the final page fetched. This is
    intentional: they describe the last exchange, which is the one which
    determined that the list was complete.
    """

    _executor: RequestExecutor
    _page_size: int
    _logger: Logger

    def __init__(
        self,
        executor: RequestExecutor,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        logger: Logger | None = None,
    ):
        self._executor = executor
        self._page_size = page_size
        self._logger = logger or logging.getLogger()

    def collect(
        self,
        url: str,
        list_key: str,
        *,
        no_cache: bool = False,
        ttl_seconds: int | None = None,
    ) -> ResponseEnvelope:
        """
        Fetch all pages of `url`, concatenating the lists found under
        `list_key` in page order.

        A failing page is returned as-is and no partial aggregate is
        returned.
        """
        carrier: ResponseEnvelope | None = None
        token: str | None = None
        page_count = 0

        while True:
            page_url = add_query(url, pageSize=self._page_size, pageToken=token)
            envelope = self._executor.execute(
                page_url, no_cache=no_cache, ttl_seconds=ttl_seconds
            )
            page_count += 1

            if not envelope.success:
                self._logger.debug(
                    f"Pagination of {url} failed on page {page_count}"
                )
                return envelope

            data = envelope.data if isinstance(envelope.data, dict) else {}
            items = data.get(list_key) or []
            token = data.get(NEXT_PAGE_TOKEN) or None

            if carrier is None:
                # take ownership of the first page's data for aggregation
                carrier = envelope.model_copy(deep=True)
                if not isinstance(carrier.data, dict):
                    carrier.data = {}
                carrier.data[list_key] = list(items)
            else:
                carrier.data[list_key] += items
                carrier.code = envelope.code
                carrier.headers = envelope.headers
                carrier.cached = carrier.cached and envelope.cached

            if token is None:
                break

        carrier.data.pop(NEXT_PAGE_TOKEN, None)

        self._logger.debug(
            f"Collected {len(carrier.data[list_key])} {list_key} from {page_count} page(s) of {url}"
        )

        return carrier
