# gpatlas/atlas/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Charts and atlases over GP implicit surfaces.

Public API
----------
Chart : class
    Tangent disc with normal and tangent basis.
AtlasBase : abstract class
    Chart storage, adjacency, node creation and surface projection.
RandomFrontierAtlas, VarianceFrontierAtlas : classes
    Exploration policies.
"""

from .chart import Chart
from .base import AtlasBase
from .policies import RandomFrontierAtlas, VarianceFrontierAtlas

__all__ = ["Chart", "AtlasBase", "RandomFrontierAtlas", "VarianceFrontierAtlas"]
