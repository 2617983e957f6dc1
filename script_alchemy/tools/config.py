"""
Interface to configuration as persisted in .yaml file, with overrides from
the environment.
"""
from __future__ import annotations

import os
from logging import Logger
from pathlib import Path
from typing import Any, Self

import dotenv
from pydantic import Field, field_validator, model_validator

from ..core import MemoryCacheStore, Session
from ..core.executor import DEFAULT_CACHE_SECONDS
from ..core.fetcher import REQUEST_TIMEOUT
from ..core.pagination import DEFAULT_PAGE_SIZE
from ..core.utils import DEFAULT_HOST
from .yaml_model import BaseYamlModel

__all__ = [
    "Config",
    "load_config",
]

ENV_PREFIX = "SCRIPT_ALCHEMY_"
"""
Prefix of environment variables overriding fields, e.g.
`SCRIPT_ALCHEMY_TOKEN`.
"""

DEFAULT_CONFIG_FILE = Path("script-alchemy.yaml")


class Config(BaseYamlModel):
    """
    Encapsulates settings used to create a {obj}`Session`.
    """

    host: str = DEFAULT_HOST
    """
    Base URL of the API.
    """

    token: str | None = None
    """
    OAuth access token.
    """

    cache: bool = True
    """
    Whether to cache responses in memory.
    """

    cache_seconds: int = Field(default=DEFAULT_CACHE_SECONDS, ge=0)
    """
    Default lifetime of cached responses.
    """

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    """
    Number of items requested per page of list endpoints.
    """

    timeout: float = Field(default=REQUEST_TIMEOUT, gt=0)
    """
    Timeout of each request, in seconds.
    """

    @field_validator("host")
    def validate_host(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"host must be an http(s) URL: '{value}'")
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_token(self) -> Self:
        if not self.token:
            raise ValueError(
                f"token must be provided, e.g. via {ENV_PREFIX}TOKEN"
            )
        return self

    def create_session(self, *, logger: Logger | None = None) -> Session:
        """
        Get session from this config's fields.
        """
        return Session(
            self.token,
            host=self.host,
            cache_store=MemoryCacheStore() if self.cache else None,
            cache_seconds=self.cache_seconds,
            page_size=self.page_size,
            timeout=self.timeout,
            logger=logger,
        )


def load_config(
    file: Path | None = None,
    *,
    environ: dict[str, str] | None = None,
) -> Config:
    """
    Load config from .yaml file if it exists, overriding fields with
    environment variables. Variables in a `.env` file are loaded first
    unless `environ` is passed explicitly.

    :param file: .yaml file, or `None` to use `script-alchemy.yaml` if present
    :param environ: Mapping to read overrides from instead of `os.environ`
    """
    if environ is None:
        dotenv.load_dotenv()
        environ = dict(os.environ)

    fields: dict[str, Any] = {}

    if file is not None:
        fields = Config.read_yaml(file)
    elif DEFAULT_CONFIG_FILE.is_file():
        fields = Config.read_yaml(DEFAULT_CONFIG_FILE)

    for name in Config.model_fields:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            fields[name] = value

    return Config(**fields)
