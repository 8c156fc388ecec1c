# gpatlas/num/numpy_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""NumPy numerical backend for gpatlas.

This module defines the NumPy implementation of the gpatlas.num API.
"""

import builtins
from typing import Any, Callable, Optional
from gpatlas.config import get_config, init_backend, get_logger
from .shared import derivative_finite_diff

ArrayLike = Any

_gpatlas_backend_: str = init_backend()
_config = get_config()
_logger = get_logger()
_logger.debug("Using backend: %s", _gpatlas_backend_)

_LINALG_ERROR_KEYWORDS = (
    "singular",
    "not positive definite",
    "not positive-definite",
    "cholesky",
    "decomposition",
    "factorization",
    "svd did not converge",
    "ill-conditioned",
    "linalg",
    "lapack",
    "array must not contain infs or nans",
)


# -----------------------------------------------------
#
#                      NUMPY
#
# -----------------------------------------------------

import numpy
from numpy.typing import NDArray

_np_dtype = numpy.float64
_config.dtype_resolved = _np_dtype

ndarray = NDArray[numpy.floating]
from numpy import (
    copy,
    reshape,
    where,
    any,
    isscalar,
    isnan,
    isfinite,
    allclose,
    hstack,
    vstack,
    stack,
    tile,
    concatenate,
    zeros_like,
    ones_like,
    arange,
    meshgrid,
    abs,
    sqrt,
    exp,
    log,
    sin,
    cos,
    sign,
    sum,
    prod,
    mean,
    min,
    max,
    argmax,
    minimum,
    maximum,
    clip,
    einsum,
    matmul,
    outer,
    dot,
    all,
    logical_and,
    diag,
    trace,
    cross,
    argmin,
    ceil,
    floor,
)
from numpy.linalg import norm, svd, LinAlgError
from numpy import pi, inf
from numpy import finfo, float64
from scipy.linalg import solve_triangular, cholesky as _scipy_cholesky

# ..................................................

eps = finfo(_np_dtype).eps
log2pi = numpy.log(2.0 * pi)

# ..................................................


def _is_linalg_exception(exc: Exception) -> bool:
    if isinstance(exc, numpy.linalg.LinAlgError):
        return True
    msg = str(exc).lower()
    return builtins.any(keyword in msg for keyword in _LINALG_ERROR_KEYWORDS)


is_linalg_exception = _is_linalg_exception

# ..................................................


def array(x, dtype=None):
    if dtype is not None:
        return numpy.array(x, dtype=dtype)
    out = numpy.array(x)
    if numpy.issubdtype(out.dtype, numpy.integer) or numpy.issubdtype(
        out.dtype, numpy.floating
    ):
        return out.astype(_np_dtype, copy=False)
    return out


def asarray(x, dtype=None):
    if dtype is not None:
        return numpy.asarray(x, dtype=dtype)
    if isinstance(x, numpy.ndarray):
        if numpy.issubdtype(x.dtype, numpy.floating):
            return x.astype(_np_dtype, copy=False)
        return x
    elif isinstance(x, (int, float)):
        dt = _np_dtype if isinstance(x, float) else None
        return numpy.array([x], dtype=dt)
    else:
        out = numpy.asarray(x)
        if numpy.issubdtype(out.dtype, numpy.floating):
            return out.astype(_np_dtype, copy=False)
        return out


def empty(shape, dtype=None):
    return numpy.empty(shape, dtype=_np_dtype if dtype is None else dtype)


def zeros(shape, dtype=None):
    return numpy.zeros(shape, dtype=_np_dtype if dtype is None else dtype)


def ones(shape, dtype=None):
    return numpy.ones(shape, dtype=_np_dtype if dtype is None else dtype)


def full(shape, fill_value, dtype=None):
    return numpy.full(
        shape, fill_value, dtype=_np_dtype if dtype is None else dtype
    )


def eye(n, m=None, k=0, dtype=None):
    return numpy.eye(n, M=m, k=k, dtype=_np_dtype if dtype is None else dtype)


def linspace(start, stop, num=50, endpoint=True, dtype=None):
    return numpy.linspace(
        start, stop, num=num, endpoint=endpoint,
        dtype=_np_dtype if dtype is None else dtype,
    )


def to_np(x):
    return x


# ..................................................


def grad(f: Callable[[ArrayLike], ArrayLike], h: float = 1e-5) -> Callable[[ArrayLike], ArrayLike]:
    """
    Return function that computes the derivative of f via finite differences.

    Uses 5-point central difference formula for accuracy. ``f`` may
    return a scalar or an array; the derivative with respect to
    coordinate ``i`` of ``x`` is stacked along the first axis of the
    result.

    Parameters
    ----------
    f : callable
        Function taking a 1D array.
    h : float, optional
        Finite-difference step.

    Returns
    -------
    callable
        Function grad_f(x) returning an array of shape ``(len(x),) + f(x).shape``.
    """

    def grad_f(x: ArrayLike) -> ArrayLike:
        x_arr = array(x).reshape(-1)
        parts = []
        for i in range(x_arr.shape[0]):

            def f_i(xi_scalar):
                x_copy = copy(x_arr)
                x_copy[i] = xi_scalar
                return f(x_copy)

            # derivative_finite_diff expects scalar input
            parts.append(derivative_finite_diff(f_i, float(x_arr[i]), h))
        return stack([asarray(p) for p in parts])

    return grad_f


# ..................................................


def cholesky(A, lower=True):
    """Cholesky factor with LinAlgError on failure (lower-triangular by default)."""
    return _scipy_cholesky(A, lower=lower, check_finite=True)


# ..................................................

# Build one global RNG (or let the user set the seed somewhere):
_np_rng = numpy.random.default_rng(seed=_config.seed)


def set_seed(seed: int) -> None:
    """Set the global NumPy generator seed."""
    global _np_rng
    _np_rng = numpy.random.default_rng(seed=seed)


def rand(*shape: int) -> ArrayLike:
    return _np_rng.random(shape, dtype=_np_dtype)


def randn(*shape: int) -> ArrayLike:
    return _np_rng.normal(loc=0, scale=1, size=shape).astype(_np_dtype, copy=False)


def choice(
    a: ArrayLike,
    size: Optional[int] = None,
    replace: bool = True,
    p: Optional[ArrayLike] = None,
) -> ArrayLike:
    return _np_rng.choice(a, size=size, replace=replace, p=p)
