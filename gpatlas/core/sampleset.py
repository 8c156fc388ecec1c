# gpatlas/core/sampleset.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Training data container.

SampleSet
    Append-only collection of 3-D inputs, scalar labels and gradient
    targets. Each call to `add` stores a new shard; the shards are
    concatenated lazily and cached until the next addition.

Label convention used by gpatlas: 0 on the surface, negative inside
(reference point), positive outside. The container does not enforce
it.
"""

import bisect
from typing import List, Tuple
import gpatlas.num as gnp
from gpatlas.errors import OutOfRangeError
from .utils import ensure_shapes_and_type

Array = gnp.ndarray


class SampleSet:
    """Append-only sample set.

    Parameters
    ----------
    inputs, targets, gradients : array_like, optional
        Initial batch, see `add`.
    """

    cols = 3

    def __init__(self, inputs=None, targets=None, gradients=None) -> None:
        self.x_list: List[Array] = []
        self.y_list: List[Array] = []
        self.g_list: List[Array] = []
        self._shard_bounds: List[int] = []
        self._cache = None
        if inputs is not None:
            self.add(inputs, targets, gradients)

    # ------------------------------------------------------------- growth
    def add(self, inputs, targets, gradients=None) -> Tuple[int, int]:
        """Append a batch of samples.

        Parameters
        ----------
        inputs : array_like, shape (k, 3)
        targets : array_like, shape (k,)
        gradients : array_like, shape (k, 3), optional
            Gradient targets; zero vectors when omitted.

        Returns
        -------
        (start, stop) : tuple of int
            Index range of the new samples.

        Raises
        ------
        InvalidArgumentError
            If lengths differ or values are not finite.
        """
        inputs, targets, gradients = ensure_shapes_and_type(
            inputs=inputs, targets=targets, gradients=gradients
        )
        start = self.rows
        if inputs.shape[0] == 0:
            return start, start
        self.x_list.append(gnp.copy(inputs))
        self.y_list.append(gnp.copy(targets))
        self.g_list.append(gnp.copy(gradients))
        self._shard_bounds.append(start + inputs.shape[0])
        self._cache = None
        return start, self.rows

    # ------------------------------------------------------------- special methods
    def __len__(self) -> int:
        return self.rows

    def __getitem__(self, idx: int) -> Tuple[Array, float, Array]:
        """Return ``(x[idx], y[idx], gradient[idx])`` without concatenation."""
        if idx < 0:
            idx += self.rows
        if idx < 0 or idx >= self.rows:
            raise OutOfRangeError(f"sample index {idx} out of range [0, {self.rows})")
        shard_idx = bisect.bisect_right(self._shard_bounds, idx)
        start = 0 if shard_idx == 0 else self._shard_bounds[shard_idx - 1]
        local_idx = idx - start
        return (
            self.x_list[shard_idx][local_idx],
            float(self.y_list[shard_idx][local_idx]),
            self.g_list[shard_idx][local_idx],
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rows={self.rows}, shards={len(self.x_list)})"

    # ------------------------------------------------------------- access
    @property
    def rows(self) -> int:
        return self._shard_bounds[-1] if self._shard_bounds else 0

    @property
    def empty(self) -> bool:
        return self.rows == 0

    def x(self, i) -> Array:
        return self[i][0]

    def y(self, i) -> float:
        return self[i][1]

    def gradient(self, i) -> Array:
        return self[i][2]

    def _concatenated(self):
        if self._cache is None:
            if self.empty:
                self._cache = (gnp.zeros((0, 3)), gnp.zeros((0,)), gnp.zeros((0, 3)))
            else:
                self._cache = (
                    gnp.concatenate(self.x_list, axis=0),
                    gnp.concatenate(self.y_list, axis=0),
                    gnp.concatenate(self.g_list, axis=0),
                )
        return self._cache

    @property
    def inputs(self) -> Array:
        return self._concatenated()[0]

    @property
    def labels(self) -> Array:
        return self._concatenated()[1]

    @property
    def gradients(self) -> Array:
        return self._concatenated()[2]

    def augmented_targets(self, start=0) -> Array:
        """Targets in the interleaved channel order, shape (4 * (n - start),).

        Sample j contributes ``(y_j, g_j[0], g_j[1], g_j[2])``.
        """
        y = self.labels[start:]
        g = self.gradients[start:]
        return gnp.concatenate([y[:, None], g], axis=1).reshape(-1)

    # ------------------------------------------------------------- geometry
    def bounding_box(self) -> Tuple[Array, Array]:
        """(lower, upper) corners of the inputs."""
        if self.empty:
            raise OutOfRangeError("bounding box of an empty sample set")
        x = self.inputs
        return gnp.min(x, axis=0), gnp.max(x, axis=0)

    def centroid(self) -> Array:
        if self.empty:
            raise OutOfRangeError("centroid of an empty sample set")
        return gnp.mean(self.inputs, axis=0)
