# gpatlas/__init__.py

from . import config
from . import num
from . import errors
from . import kernel
from . import core
from . import desc
from . import atlas
from . import surface
from . import misc
from .core import GaussianProcess, SampleSet
from .atlas import Chart, AtlasBase
from .config import __version__

__all__ = [
    "num",
    "kernel",
    "core",
    "atlas",
    "GaussianProcess",
    "SampleSet",
    "Chart",
    "AtlasBase",
    "__version__",
]
