from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .envelope import ResponseEnvelope

__all__ = [
    "ConfigurationError",
    "RequestError",
]


class ConfigurationError(Exception):
    """
    Raised before any request is made when the caller's input can't be
    acted upon.

    Examples:

    - {obj}`File` with a type which is not a {obj}`FileType`
    - Unknown {obj}`CollisionStrategy`
    """

    errors: list[str]

    def __init__(self, errors: list[str]):
        self.errors = errors
        errors_str = "\n".join([e for e in errors])
        super().__init__(f"Invalid configuration: {errors_str}")


class RequestError(Exception):
    """
    Raised on demand from a failed {obj}`ResponseEnvelope` via
    {obj}`ResponseEnvelope.raise_for_error`.
    """

    envelope: ResponseEnvelope

    def __init__(self, message: str, envelope: ResponseEnvelope):
        self.envelope = envelope
        super().__init__(message)

    @property
    def code(self) -> int:
        """
        HTTP status code of the failed response, or `0` if no response
        was received.
        """
        return self.envelope.code
