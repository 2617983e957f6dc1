"""
ScriptAlchemy: synchronize local script files with remotely stored
script projects.
"""

from pyrollup import rollup

from . import core
from .core import *  # noqa

__all__ = rollup(core)

__canonical_children__ = [
    "core",
]
