"""
Implementation of session functionality.
"""

from __future__ import annotations

import logging
from logging import Logger
from typing import Iterable

from .cache import BaseCacheStore, CacheGateway
from .content.file import File
from .content.reconciler import CollisionStrategy, ContentReconciler
from .content.service import GetContentOptions, ProjectContentService
from .envelope import ResponseEnvelope
from .executor import DEFAULT_CACHE_SECONDS, RequestExecutor
from .fetcher import REQUEST_TIMEOUT, BaseFetcher, RequestsFetcher
from .pagination import DEFAULT_PAGE_SIZE, PaginatedCollector
from .project import ProjectService
from .utils import DEFAULT_HOST

__all__ = ["Session"]
__canonical_syms__ = __all__


class Session:
    """
    Interface to the remote API, composing request execution, caching and
    the content and project operations built on them.

    Example usage:

    ```
    with Session(token, cache_store=MemoryCacheStore()) as session:
        session.reconcile(script_id, files, CollisionStrategy.REPLACE)
    ```
    """

    _host: str
    """
    Base URL as configured by user.
    """

    _fetcher: BaseFetcher
    """
    Performs HTTP exchanges.
    """

    _executor: RequestExecutor
    """
    Cache-aware request executor.
    """

    _collector: PaginatedCollector
    """
    Aggregator for paginated list endpoints.
    """

    _content: ProjectContentService
    _reconciler: ContentReconciler
    _projects: ProjectService

    _logger: Logger
    """
    Logger to use.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        host: str = DEFAULT_HOST,
        cache_store: BaseCacheStore | None = None,
        cache_seconds: int = DEFAULT_CACHE_SECONDS,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = REQUEST_TIMEOUT,
        fetcher: BaseFetcher | None = None,
        logger: Logger | None = None,
    ):
        """
        Either `token` or `fetcher` is required; if `fetcher` is provided,
        `token` and `timeout` are ignored.

        :param token: OAuth access token, acquired by the caller
        :param host: Base URL of the API
        :param cache_store: Store for cached responses, or `None` to disable caching
        :param cache_seconds: Default lifetime of cached responses
        :param page_size: Number of items requested per page of list endpoints
        :param timeout: Timeout of each request, in seconds
        :param fetcher: Fetcher to use instead of the default `requests`-based one
        :param logger: Logger to use, or `None` to use default logger
        """
        self._logger = logger or logging.getLogger()
        self._host = host.rstrip("/")

        if fetcher is None:
            assert (
                token is not None
            ), "Either token or fetcher is required to create a Session"
            fetcher = RequestsFetcher(
                token, timeout=timeout, logger=self._logger
            )

        self._fetcher = fetcher

        cache = CacheGateway(cache_store, logger=self._logger)

        self._executor = RequestExecutor(
            fetcher, cache, default_ttl=cache_seconds, logger=self._logger
        )
        self._collector = PaginatedCollector(
            self._executor, page_size=page_size, logger=self._logger
        )
        self._content = ProjectContentService(
            self._executor, self._host, logger=self._logger
        )
        self._reconciler = ContentReconciler(self._content, logger=self._logger)
        self._projects = ProjectService(
            self._executor, self._collector, self._host
        )

        self._logger.debug(
            f"Created session for host '{self._host}', caching {'enabled' if cache.enabled else 'disabled'}"
        )

    def __enter__(self):
        self._logger.debug(f"Entering context: {self}")
        return self

    def __exit__(self, exc_type, exc_val, traceback):
        if exc_type:
            self._logger.error(f"Exiting context with error: {self}")
        else:
            self._logger.debug(f"Exiting context: {self}")

        self.close()

    def __str__(self) -> str:
        return f"Session(host='{self._host}')"

    @property
    def host(self) -> str:
        """
        Base URL as configured by user.
        """
        return self._host

    @property
    def executor(self) -> RequestExecutor:
        """
        Request executor. Used internally and exposed for manual requests
        against endpoints without a dedicated method.
        """
        return self._executor

    def close(self):
        """
        Release the fetcher's resources.
        """
        self._fetcher.close()

    def get_content(
        self,
        script_id: str,
        *,
        no_cache: bool = False,
        cache_seconds: int | None = None,
        skip_manifest: bool = False,
        version_number: int | None = None,
    ) -> ResponseEnvelope:
        """
        Get project content. See {obj}`GetContentOptions` for parameters.
        """
        return self._content.get_content(
            script_id,
            GetContentOptions(
                no_cache=no_cache,
                cache_seconds=cache_seconds,
                skip_manifest=skip_manifest,
                version_number=version_number,
            ),
        )

    def update_content(
        self, script_id: str, files: Iterable[File | dict]
    ) -> ResponseEnvelope:
        """
        Replace project content with `files` as-is.
        """
        return self._content.update_content(script_id, files)

    def reconcile(
        self,
        script_id: str,
        files: Iterable[File | dict],
        strategy: CollisionStrategy | str = CollisionStrategy.ABORT,
        *,
        clear: bool = False,
        keep_manifest: bool = False,
        dry_run: bool = False,
    ) -> ResponseEnvelope:
        """
        Merge `files` into project content. See
        {obj}`ContentReconciler.reconcile`.
        """
        return self._reconciler.reconcile(
            script_id,
            files,
            strategy,
            clear=clear,
            keep_manifest=keep_manifest,
            dry_run=dry_run,
        )

    def create_project(
        self, title: str, parent_id: str | None = None
    ) -> ResponseEnvelope:
        return self._projects.create_project(title, parent_id)

    def get_project(
        self,
        script_id: str,
        *,
        no_cache: bool = False,
        cache_seconds: int | None = None,
    ) -> ResponseEnvelope:
        return self._projects.get_project(
            script_id, no_cache=no_cache, cache_seconds=cache_seconds
        )

    def list_deployments(
        self,
        script_id: str,
        *,
        no_cache: bool = False,
        cache_seconds: int | None = None,
    ) -> ResponseEnvelope:
        return self._projects.list_deployments(
            script_id, no_cache=no_cache, cache_seconds=cache_seconds
        )

    def create_deployment(
        self,
        script_id: str,
        version_number: int,
        description: str = "",
    ) -> ResponseEnvelope:
        return self._projects.create_deployment(
            script_id, version_number, description
        )

    def delete_deployment(
        self, script_id: str, deployment_id: str
    ) -> ResponseEnvelope:
        return self._projects.delete_deployment(script_id, deployment_id)
