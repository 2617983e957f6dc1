"""
Project and deployment operations.
"""

from __future__ import annotations

from .content.file import MANIFEST_NAME
from .envelope import ResponseEnvelope
from .executor import RequestExecutor
from .fetcher import RequestOptions
from .pagination import PaginatedCollector

__all__ = [
    "ProjectService",
]


class ProjectService:
    """
    Create and inspect projects and manage their deployments.
    """

    _executor: RequestExecutor
    _collector: PaginatedCollector
    _host: str

    def __init__(
        self,
        executor: RequestExecutor,
        collector: PaginatedCollector,
        host: str,
    ):
        self._executor = executor
        self._collector = collector
        self._host = host

    def create_project(
        self, title: str, parent_id: str | None = None
    ) -> ResponseEnvelope:
        """
        Create an empty project.

        :param title: Title of new project
        :param parent_id: Id of a document to bind the project to, if any
        """
        payload: dict[str, str] = {"title": title}
        if parent_id is not None:
            payload["parentId"] = parent_id

        return self._executor.execute(
            f"{self._host}/projects",
            RequestOptions(method="POST", payload=payload),
        )

    def get_project(
        self,
        script_id: str,
        *,
        no_cache: bool = False,
        cache_seconds: int | None = None,
    ) -> ResponseEnvelope:
        """
        Get project metadata.
        """
        return self._executor.execute(
            self._project_url(script_id),
            no_cache=no_cache,
            ttl_seconds=cache_seconds,
        )

    def list_deployments(
        self,
        script_id: str,
        *,
        no_cache: bool = False,
        cache_seconds: int | None = None,
    ) -> ResponseEnvelope:
        """
        Get all deployments of a project as `{"deployments": [...]}`,
        aggregated across pages.
        """
        return self._collector.collect(
            self._deployments_url(script_id),
            "deployments",
            no_cache=no_cache,
            ttl_seconds=cache_seconds,
        )

    def create_deployment(
        self,
        script_id: str,
        version_number: int,
        description: str = "",
        manifest_file_name: str = MANIFEST_NAME,
    ) -> ResponseEnvelope:
        """
        Deploy a version of a project.

        Cached pages of {obj}`ProjectService.list_deployments` are keyed by
        their own URLs and are not invalidated by this; pass `no_cache=True`
        when listing right after deploying.
        """
        payload = {
            "versionNumber": version_number,
            "manifestFileName": manifest_file_name,
            "description": description,
        }

        return self._executor.execute(
            self._deployments_url(script_id),
            RequestOptions(method="POST", payload=payload),
        )

    def delete_deployment(
        self, script_id: str, deployment_id: str
    ) -> ResponseEnvelope:
        return self._executor.execute(
            f"{self._deployments_url(script_id)}/{deployment_id}",
            RequestOptions(method="DELETE"),
        )

    def _project_url(self, script_id: str) -> str:
        return f"{self._host}/projects/{script_id}"

    def _deployments_url(self, script_id: str) -> str:
        return f"{self._project_url(script_id)}/deployments"
