# gpatlas/core/utils.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Small utilities used across `gpatlas.core` modules.

This file hosts:
- Shape/type validation & conversion helpers for points, labels and gradients
"""
import gpatlas.num as gnp
from gpatlas.errors import InvalidArgumentError


def ensure_points(x, name="x"):
    """Convert `x` to a (n, 3) array of finite points.

    A single point of shape (3,) is promoted to (1, 3).

    Raises
    ------
    InvalidArgumentError
        If `x` cannot be reshaped to (n, 3) or contains non-finite values.
    """
    x = gnp.asarray(x)
    if x.ndim == 1:
        if x.shape[0] != 3:
            raise InvalidArgumentError(f"{name} should have 3 coordinates, got {x.shape[0]}")
        x = x.reshape(1, 3)
    if x.ndim != 2 or x.shape[1] != 3:
        raise InvalidArgumentError(f"{name} should be a (n, 3) array, got shape {x.shape}")
    if not gnp.all(gnp.isfinite(x)):
        raise InvalidArgumentError(f"{name} contains non-finite values")
    return x


def ensure_shapes_and_type(*, inputs, targets, gradients=None):
    """Validate a batch of training data.

    Parameters
    ----------
    inputs : array_like, shape (n, 3)
        Training points.
    targets : array_like, shape (n,) or (n, 1)
        Labels.
    gradients : array_like, shape (n, 3), optional
        Gradient targets. Zero vectors when omitted.

    Returns
    -------
    tuple
        (inputs, targets, gradients) as backend arrays.

    Raises
    ------
    InvalidArgumentError
        On length mismatch, bad shapes or non-finite values.
    """
    inputs = ensure_points(inputs, "inputs")
    targets = gnp.asarray(targets)
    if targets.ndim == 2 and targets.shape[1] == 1:
        targets = targets.reshape(-1)  # (n,1) -> (n,)
    if targets.ndim != 1:
        raise InvalidArgumentError("targets should be 1D or a 2D column array")
    if inputs.shape[0] != targets.shape[0]:
        raise InvalidArgumentError(
            f"inputs and targets must have the same length ({inputs.shape[0]} != {targets.shape[0]})"
        )
    if not gnp.all(gnp.isfinite(targets)):
        raise InvalidArgumentError("targets contain non-finite values")

    if gradients is None:
        gradients = gnp.zeros(inputs.shape)
    else:
        gradients = ensure_points(gradients, "gradients")
        if gradients.shape[0] != inputs.shape[0]:
            raise InvalidArgumentError(
                f"inputs and gradients must have the same length ({inputs.shape[0]} != {gradients.shape[0]})"
            )
    return inputs, targets, gradients
