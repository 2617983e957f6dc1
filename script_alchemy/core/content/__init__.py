from pyrollup import rollup

from . import file, reconciler, service
from .file import *  # noqa
from .reconciler import *  # noqa
from .service import *  # noqa

__all__ = rollup(file, service, reconciler)
__canonical_syms__ = __all__
__canonical_children__ = [
    "file",
    "service",
    "reconciler",
]
