# gpatlas/errors.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exceptions raised by gpatlas.

Each exception also derives from the builtin (or numpy) exception
that would otherwise be raised for the same condition, so callers can
catch either one.

InvalidArgumentError
    Mismatched array lengths, non-finite data, prediction requested
    from an empty training set, invalid descriptors.
OutOfRangeError
    Chart id lookup or connection with an unknown id.
UninitializedError
    Projection or evaluation attempted without a regressor.
NumericalFailureError
    Cholesky factorization met a matrix that is not positive definite.
"""
from numpy.linalg import LinAlgError


class GPAtlasError(Exception):
    """Base class of all gpatlas errors."""


class InvalidArgumentError(GPAtlasError, ValueError):
    pass


class OutOfRangeError(GPAtlasError, IndexError):
    pass


class UninitializedError(GPAtlasError, RuntimeError):
    pass


class NumericalFailureError(GPAtlasError, LinAlgError):
    pass
