# gpatlas/core/linalg.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Linear-algebra utilities shared across gpatlas modules.

This file isolates small helpers (built on top of `gpatlas.num as
gnp`) so they can be reused by the GP engine and the atlas without
import cycles.
"""
import gpatlas.num as gnp
from gpatlas.errors import InvalidArgumentError, NumericalFailureError


def cholesky(K):
    """Lower Cholesky factor of K.

    Raises
    ------
    NumericalFailureError
        If K is not (numerically) positive definite.
    """
    try:
        return gnp.cholesky(K, lower=True)
    except (gnp.LinAlgError, ValueError) as exc:
        raise NumericalFailureError(
            f"Cholesky factorization failed on a {K.shape[0]}x{K.shape[0]} matrix: {exc}"
        ) from exc


class GrowableCholesky:
    """Lower-triangular Cholesky factor of a growing SPD matrix.

    The factor lives in the leading ``size x size`` block of a square
    buffer. The buffer is over-allocated geometrically, so appending
    rows does not reallocate at each step.

    Appending a block of k rows to K = L L^T uses

    .. math::
        \\begin{pmatrix} K & K_{12} \\\\ K_{12}^T & K_{22} \\end{pmatrix}
        = \\begin{pmatrix} L & 0 \\\\ B & C \\end{pmatrix}
          \\begin{pmatrix} L^T & B^T \\\\ 0 & C^T \\end{pmatrix},
        \\qquad B^T = L^{-1} K_{12},\\quad C C^T = K_{22} - B B^T.

    Parameters
    ----------
    capacity : int
        Initial buffer size (rows).
    """

    def __init__(self, capacity=0):
        self._buffer = gnp.zeros((capacity, capacity))
        self._size = 0

    def __repr__(self):
        return f"<GrowableCholesky size={self._size} capacity={self.capacity}>"

    @property
    def size(self):
        return self._size

    @property
    def capacity(self):
        return self._buffer.shape[0]

    @property
    def L(self):
        """View of the current factor."""
        return self._buffer[: self._size, : self._size]

    def reserve(self, capacity):
        """Make room for at least `capacity` rows, keeping the factor."""
        if capacity <= self.capacity:
            return
        new_capacity = max(capacity, 2 * self.capacity)
        buffer = gnp.zeros((new_capacity, new_capacity))
        buffer[: self._size, : self._size] = self.L
        self._buffer = buffer

    def reset(self):
        self._size = 0

    def factorize(self, K):
        """Replace the factor with the Cholesky factor of K."""
        n = K.shape[0]
        L = cholesky(K)
        self.reserve(n)
        self._buffer[:n, :n] = L
        self._size = n
        return self.L

    def extend(self, K_cross, K_new):
        """Append k rows.

        Parameters
        ----------
        K_cross : gnp.array, shape (size, k)
            Covariance between old and new rows.
        K_new : gnp.array, shape (k, k)
            Covariance of the new rows.
        """
        n = self._size
        if n == 0:
            return self.factorize(K_new)
        k = K_new.shape[0]
        B = self.solve_lower(K_cross)  # (n, k)
        C = cholesky(K_new - gnp.matmul(B.T, B))
        self.reserve(n + k)
        self._buffer[:n, n : n + k] = 0.0
        self._buffer[n : n + k, :n] = B.T
        self._buffer[n : n + k, n : n + k] = C
        self._size = n + k
        return self.L

    def solve_lower(self, b):
        """L^{-1} b."""
        return gnp.solve_triangular(self.L, b, lower=True)

    def solve_upper(self, b):
        """L^{-T} b."""
        return gnp.solve_triangular(self.L.T, b, lower=False)

    def cho_solve(self, b):
        """K^{-1} b."""
        return self.solve_upper(self.solve_lower(b))

    def logdet(self):
        """log det K."""
        return 2.0 * gnp.sum(gnp.log(gnp.diag(self.L)))


def compute_tangent_basis(normal):
    """Orthonormal tangent pair of the plane orthogonal to `normal`.

    The projector ``P = I - N N^T`` has singular values (1, 1, 0); its
    first two left singular vectors span the tangent plane. This
    stays well conditioned when N is aligned with a coordinate axis.

    Parameters
    ----------
    normal : array_like, shape (3,)
        Normal direction; normalized internally.

    Returns
    -------
    tx, ty : gnp.array, shape (3,)

    Raises
    ------
    InvalidArgumentError
        If `normal` is zero or not finite.
    """
    N = gnp.asarray(normal).reshape(3)
    nrm = gnp.norm(N)
    if not gnp.isfinite(nrm) or nrm <= 0.0:
        raise InvalidArgumentError("normal must be a non-zero finite vector")
    N = N / nrm
    P = gnp.eye(3) - gnp.outer(N, N)
    U, _, _ = gnp.svd(P)
    return gnp.copy(U[:, 0]), gnp.copy(U[:, 1])
