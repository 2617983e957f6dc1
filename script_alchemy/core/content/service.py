from __future__ import annotations

import logging
from dataclasses import dataclass
from logging import Logger
from typing import Iterable

from ..envelope import ResponseEnvelope
from ..executor import RequestExecutor
from ..fetcher import RequestOptions
from ..utils import add_query
from .file import (
    MANIFEST_NAME,
    File,
    FileType,
    normalize_files,
    validate_files,
)

__all__ = [
    "GetContentOptions",
    "ProjectContentService",
    "files_from_envelope",
]


@dataclass
class GetContentOptions:
    """
    Options for {obj}`ProjectContentService.get_content`.
    """

    no_cache: bool = False
    """Bypass cache read; the fresh response is still cached"""

    cache_seconds: int | None = None
    """Lifetime of cache entry written, or executor default"""

    skip_manifest: bool = False
    """Remove manifest from the returned files"""

    version_number: int | None = None
    """Fetch content of a specific version rather than head"""


class ProjectContentService:
    """
    Get and update the files of a project.
    """

    _executor: RequestExecutor
    _host: str
    _logger: Logger

    def __init__(
        self,
        executor: RequestExecutor,
        host: str,
        *,
        logger: Logger | None = None,
    ):
        self._executor = executor
        self._host = host
        self._logger = logger or logging.getLogger()

    def content_url(self, script_id: str) -> str:
        return f"{self._host}/projects/{script_id}/content"

    def get_content(
        self, script_id: str, options: GetContentOptions | None = None
    ) -> ResponseEnvelope:
        """
        Fetch project content, `{"scriptId": ..., "files": [...]}`.

        The manifest is only filtered out of the returned envelope, after the
        cache has been read or written, so cached content is always complete.
        """
        options = options or GetContentOptions()

        url = add_query(
            self.content_url(script_id), versionNumber=options.version_number
        )

        envelope = self._executor.execute(
            url, no_cache=options.no_cache, ttl_seconds=options.cache_seconds
        )

        if options.skip_manifest and envelope.success:
            envelope = _strip_manifest(envelope)

        return envelope

    def update_content(
        self, script_id: str, files: Iterable[File | dict]
    ) -> ResponseEnvelope:
        """
        Replace project content with `files`. Only `name`, `type` and
        `source` of each file are sent; metadata from a previous fetch is
        dropped.
        """
        payload = {"files": [f.to_payload() for f in normalize_files(files)]}

        self._logger.debug(
            f"Updating content of {script_id} with {len(payload['files'])} files"
        )

        return self._executor.execute(
            self.content_url(script_id),
            RequestOptions(method="PUT", payload=payload),
        )


def files_from_envelope(
    envelope: ResponseEnvelope,
) -> tuple[tuple[File, ...], list[str]]:
    """
    Get files from a successful content envelope, along with a description
    of each file which could not be parsed. Unparseable files are left out.
    """
    assert envelope.success, "Attempt to get files from failed response"

    data = envelope.data if isinstance(envelope.data, dict) else {}
    return validate_files(data.get("files") or [])


def _strip_manifest(envelope: ResponseEnvelope) -> ResponseEnvelope:
    if not isinstance(envelope.data, dict) or "files" not in envelope.data:
        return envelope

    files = [
        f
        for f in envelope.data["files"]
        if not (
            isinstance(f, dict)
            and f.get("name") == MANIFEST_NAME
            and f.get("type") == FileType.JSON.value
        )
    ]

    data = dict(envelope.data)
    data["files"] = files
    return envelope.model_copy(update={"data": data})
