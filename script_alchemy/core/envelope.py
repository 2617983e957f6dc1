"""
Standard result wrapper returned by every network-facing operation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .exceptions import RequestError

__all__ = [
    "ErrorInfo",
    "ResponseEnvelope",
]
__canonical_syms__ = __all__


class ErrorInfo(BaseModel):
    """
    Extended error detail attached to a failed envelope.
    """

    message: str
    code: int | None = None
    status: str | None = None
    details: list[str] = Field(default_factory=list)


class ResponseEnvelope(BaseModel):
    """
    Normalized outcome of one HTTP exchange.

    Failures are carried as data; use {obj}`ResponseEnvelope.raise_for_error`
    to opt into an exception:

    ```
    content = session.get_content(script_id).raise_for_error().data
    ```
    """

    success: bool
    """Whether the exchange succeeded (2xx and no transport failure)"""

    data: Any = None
    """Parsed response body, or raw text if it couldn't be parsed"""

    code: int = 0
    """HTTP status code, `0` if no response was received"""

    extended: ErrorInfo | None = None
    """Error detail if not successful"""

    parsed: bool = False
    """Whether `data` was parsed from JSON"""

    headers: dict[str, str] = Field(default_factory=dict)
    """Response headers"""

    content: str = ""
    """Raw response body"""

    cached: bool = False
    """Whether this envelope was served from cache"""

    collision: str | None = None
    """Name of collision strategy which rejected a merge, if any"""

    def raise_for_error(self) -> ResponseEnvelope:
        """
        Return this envelope if successful, otherwise raise
        {obj}`RequestError`.

        The message supplied by the server is preferred over the generic
        extended detail.
        """
        if self.success:
            return self

        raise RequestError(self.error_message, self)

    @property
    def error_message(self) -> str:
        """
        Best available description of the failure, or empty string if
        successful.
        """
        if self.success:
            return ""

        # server-supplied message: {"error": {"message": ...}}
        if isinstance(self.data, dict):
            error = self.data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])

        if self.extended is not None:
            return self.extended.message

        return f"Request failed with status code {self.code}"
