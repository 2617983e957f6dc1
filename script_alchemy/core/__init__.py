"""
This module implements cache-coherent access to script projects and
reconciliation of their content.
"""

from pyrollup import rollup

from . import (
    cache,
    content,
    envelope,
    exceptions,
    executor,
    fetcher,
    pagination,
    project,
    session,
)
from .cache import *  # noqa
from .content import *  # noqa
from .envelope import *  # noqa
from .exceptions import *  # noqa
from .executor import *  # noqa
from .fetcher import *  # noqa
from .pagination import *  # noqa
from .project import *  # noqa
from .session import *  # noqa

__all__ = rollup(
    session,
    content,
    project,
    executor,
    pagination,
    fetcher,
    cache,
    envelope,
    exceptions,
)

__canonical_children__ = [
    "session",
    "content",
    "project",
    "executor",
    "pagination",
    "fetcher",
    "cache",
    "envelope",
    "exceptions",
]
