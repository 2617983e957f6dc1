from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError

__all__ = [
    "FileType",
    "File",
    "MANIFEST_NAME",
]

MANIFEST_NAME = "appsscript"
"""
Name of the project manifest, which always has type {obj}`FileType.JSON`.
"""

WRITABLE_FIELDS = {"name", "type", "source"}
"""
Fields accepted by the server when updating content.
"""


class FileType(str, Enum):
    """
    Type of a project file.
    """

    SERVER_JS = "SERVER_JS"
    """Server-side script"""

    HTML = "HTML"
    """HTML template"""

    JSON = "JSON"
    """Manifest"""

    def __str__(self) -> str:
        return self.value


class File(BaseModel):
    """
    One file of a project.

    Files fetched from the server may carry additional read-only fields
    such as `functionSet` or `updateTime`; these are kept for inspection
    but dropped by {obj}`File.to_payload`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    type: FileType
    source: str = ""

    @property
    def identity(self) -> tuple[str, FileType]:
        """
        `(name, type)`: files with the same identity are the same file.
        """
        return (self.name, self.type)

    @property
    def is_manifest(self) -> bool:
        return self.name == MANIFEST_NAME and self.type is FileType.JSON

    @property
    def str_summary(self) -> str:
        return f"{self.name}({self.type.value})"

    def same_content(self, other: File) -> bool:
        """
        Whether `other` is the same file with the same source.
        """
        return self.identity == other.identity and self.source == other.source

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "type": self.type.value,
            "source": self.source,
        }


def validate_files(
    files: Iterable[File | dict[str, Any]],
) -> tuple[tuple[File, ...], list[str]]:
    """
    Coerce files to {obj}`File`, collecting a description of each invalid
    entry rather than raising.
    """
    result: list[File] = []
    errors: list[str] = []

    for index, file in enumerate(files):
        if isinstance(file, File):
            result.append(file)
            continue

        try:
            result.append(File.model_validate(file))
        except PydanticValidationError as e:
            name = file.get("name") if isinstance(file, dict) else None
            type_ = file.get("type") if isinstance(file, dict) else None

            problems = "; ".join(
                f"{'.'.join(str(l) for l in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            errors.append(
                f"file {index} (name={name!r}, type={type_!r}): {problems}"
            )

    return tuple(result), errors


def normalize_files(files: Iterable[File | dict[str, Any]]) -> tuple[File, ...]:
    """
    Coerce files to {obj}`File`, aggregating every invalid entry into one
    {obj}`ConfigurationError`.
    """
    result, errors = validate_files(files)

    if errors:
        raise ConfigurationError(errors)

    return result
