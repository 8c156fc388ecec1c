# gpatlas/atlas/chart.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Chart: a disc on the tangent plane of the estimated surface.
"""
import copy
import gpatlas.num as gnp
from gpatlas.core.linalg import compute_tangent_basis
from gpatlas.errors import InvalidArgumentError


class Chart:
    """Local disc-shaped approximation of a surface patch.

    Parameters
    ----------
    center : array_like, shape (3,)
        Origin of the chart.
    chart_id : int
        Identifier, equal to the position of the chart in its atlas.
    gradient : array_like, shape (3,)
        Unnormalized outward gradient of the implicit function at
        `center`.
    radius : float
        Disc radius.
    variance : float
        Posterior variance of the implicit function at `center`.

    Attributes
    ----------
    samples : gnp.array, shape (k, 3)
        Cache of points drawn by `sample_disc`. Not part of the chart
        state, cleared by `reset_samples`.

    Notes
    -----
    The normal N = G / |G| and the tangent pair (Tx, Ty) are always
    derived from the current gradient G; `set_gradient` recomputes the
    three vectors together.
    """

    def __init__(self, center, chart_id, gradient, radius, variance):
        self._id = int(chart_id)
        self._center = gnp.copy(gnp.asarray(center).reshape(3))
        self._radius = float(radius)
        self._variance = float(variance)
        self._gradient = self._normal = self._tx = self._ty = None
        if not gnp.all(gnp.isfinite(self._center)):
            raise InvalidArgumentError("chart center must be finite")
        self.set_gradient(gradient)
        self.reset_samples()

    def __repr__(self):
        normal = None if self._normal is None else self._normal.tolist()
        return (
            f"Chart(id={self._id}, center={self._center.tolist()}, "
            f"normal={normal}, radius={self._radius}, variance={self._variance})"
        )

    # ------------------------------------------------------------------
    @property
    def id(self):
        return self._id

    @property
    def center(self):
        return gnp.copy(self._center)

    @property
    def gradient(self):
        return gnp.copy(self._gradient)

    @property
    def normal(self):
        return gnp.copy(self._normal)

    @property
    def tangent_x(self):
        return gnp.copy(self._tx)

    @property
    def tangent_y(self):
        return gnp.copy(self._ty)

    @property
    def radius(self):
        return self._radius

    @property
    def variance(self):
        return self._variance

    # ------------------------------------------------------------------
    def set_gradient(self, gradient):
        """Replace the gradient and recompute normal and tangent basis.

        Raises
        ------
        InvalidArgumentError
            If the gradient is zero or not finite. The chart is left
            unchanged.
        """
        g = gnp.asarray(gradient).reshape(3)
        length = gnp.norm(g)
        if not gnp.isfinite(length) or length <= 0.0:
            raise InvalidArgumentError("chart gradient must be a non-zero finite vector")
        normal = g / length
        tx, ty = compute_tangent_basis(normal)
        self._gradient = gnp.copy(g)
        self._normal, self._tx, self._ty = normal, tx, ty

    def set_radius(self, radius):
        if not radius >= 0.0:
            raise InvalidArgumentError(f"chart radius must be >= 0, got {radius}")
        self._radius = float(radius)

    # ------------------------------------------------------------------
    def to_world(self, u, v):
        """Points ``C + u Tx + v Ty`` for tangent coordinates (u, v)."""
        u = gnp.asarray(u).reshape(-1, 1)
        v = gnp.asarray(v).reshape(-1, 1)
        return self._center + u * self._tx + v * self._ty

    def sample_disc(self, n):
        """Draw `n` points uniformly on the disc and append them to `samples`.

        Returns
        -------
        gnp.array, shape (n, 3)
            The new points.
        """
        rho = self._radius * gnp.sqrt(gnp.rand(n))
        theta = 2.0 * gnp.pi * gnp.rand(n)
        points = self.to_world(rho * gnp.cos(theta), rho * gnp.sin(theta))
        self.samples = gnp.vstack([self.samples, points])
        return points

    def reset_samples(self):
        self.samples = gnp.zeros((0, 3))

    def contains(self, point):
        """True if the projection of `point` on the chart plane lies in the disc."""
        d = gnp.asarray(point).reshape(3) - self._center
        d_tangent = d - gnp.dot(d, self._normal) * self._normal
        return bool(gnp.norm(d_tangent) <= self._radius)

    def copy(self):
        return copy.deepcopy(self)
