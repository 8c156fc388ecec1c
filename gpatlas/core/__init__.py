# gpatlas/core/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------

"""
Core components of the gpatlas package.

This subpackage contains the training-data container, the growable
Cholesky factor, the derivative-augmented GP regressor and its
likelihood.

Public API
----------
GaussianProcess : class
    GP implicit-surface regressor.
SampleSet : class
    Append-only training data.
GrowableCholesky : class
    Cholesky factor with block extension.
compute_tangent_basis : function
    Tangent pair of a unit normal.
"""

from .sampleset import SampleSet
from .linalg import GrowableCholesky, compute_tangent_basis
from .gaussian_process import GaussianProcess

__all__ = ["GaussianProcess", "SampleSet", "GrowableCholesky", "compute_tangent_basis"]
