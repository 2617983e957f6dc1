"""
Interface to perform a single HTTP exchange.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import Logger
from typing import Any

import requests

from .envelope import ErrorInfo, ResponseEnvelope

__all__ = [
    "RequestOptions",
    "BaseFetcher",
    "RequestsFetcher",
]

REQUEST_TIMEOUT = 30.0
"""
Default timeout for each request, in seconds.
"""


@dataclass
class RequestOptions:
    """
    Options for one logical request.
    """

    method: str = "GET"
    """HTTP method"""

    payload: Any = None
    """Request body; dicts and lists are encoded as JSON for POST/PUT"""

    headers: dict[str, str] = field(default_factory=dict)
    """Additional request headers"""

    content_type: str | None = None
    """Content type of the encoded payload, if any"""


class BaseFetcher(ABC):
    """
    Performs one HTTP exchange and maps its outcome into a
    {obj}`ResponseEnvelope`. Owns verb handling, header assembly, body
    parsing and the meaning of `success`.
    """

    @abstractmethod
    def execute(self, url: str, options: RequestOptions) -> ResponseEnvelope:
        ...

    def close(self):
        """
        Release any resources held by this fetcher.
        """


class RequestsFetcher(BaseFetcher):
    """
    Fetcher using a {obj}`requests.Session`, authenticating with a bearer
    token obtained elsewhere.
    """

    _session: requests.Session
    _timeout: float
    _logger: Logger

    def __init__(
        self,
        token: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
        logger: Logger | None = None,
    ):
        self._session = session or requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Accept"] = "application/json"
        self._timeout = timeout
        self._logger = logger or logging.getLogger()

    def execute(self, url: str, options: RequestOptions) -> ResponseEnvelope:
        headers = dict(options.headers)
        if options.content_type is not None:
            headers["Content-Type"] = options.content_type

        try:
            response = self._session.request(
                options.method,
                url,
                data=options.payload,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            self._logger.error(
                f"Request failed: method={options.method}, url='{url}': {e}"
            )
            return ResponseEnvelope(
                success=False,
                extended=ErrorInfo(message=str(e), status=type(e).__name__),
            )

        return self._to_envelope(response)

    def close(self):
        self._session.close()

    def _to_envelope(self, response: requests.Response) -> ResponseEnvelope:
        content = response.text
        data: Any = content
        parsed = False

        if content:
            try:
                data = json.loads(content)
            except ValueError:
                pass
            else:
                parsed = True
        else:
            # e.g. 204 or empty body from DELETE
            data = None

        success = response.ok
        extended: ErrorInfo | None = None

        if not success:
            extended = _get_error_info(response, data)

        return ResponseEnvelope(
            success=success,
            data=data,
            code=response.status_code,
            extended=extended,
            parsed=parsed,
            headers=dict(response.headers),
            content=content,
        )


def _get_error_info(response: requests.Response, data: Any) -> ErrorInfo:
    """
    Extract error detail from response, using the standard
    `{"error": {"code", "message", "status", "details"}}` shape if present.
    """
    error = data.get("error") if isinstance(data, dict) else None

    if isinstance(error, dict):
        return ErrorInfo(
            message=str(error.get("message") or response.reason),
            code=error.get("code", response.status_code),
            status=error.get("status"),
            details=[str(d) for d in error.get("details", [])],
        )

    return ErrorInfo(
        message=f"{response.status_code} {response.reason}",
        code=response.status_code,
    )
