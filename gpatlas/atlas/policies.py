# gpatlas/atlas/policies.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exploration policies.

Both policies grow the atlas from the rim of existing charts and stop
on charts whose center is still uncertain, i.e. that reached a part
of the surface the training data does not explain.
"""
import gpatlas.num as gnp
from .base import AtlasBase


class _FrontierAtlas(AtlasBase):
    """Shared solution test: chart variance above `var_tol`.

    When `var_tol` is None, half of the prior variance of `gp_model` is
    used.
    """

    def __init__(self, gp_model=None, gp_reg=None, var_tol=None, **kwargs):
        super().__init__(gp_model, gp_reg, **kwargs)
        self.var_tol = var_tol

    def variance_threshold(self):
        if self.var_tol is not None:
            return self.var_tol
        return 0.5 * float(self.gp_model.covariance.prior_covariance()[0, 0])

    def is_solution(self, node):
        node_id = self._node_id(node)
        self._check_id(node_id)
        return self.nodes[node_id].variance > self.variance_threshold()

    def _rim_point(self, chart, theta):
        return chart.to_world(chart.radius * gnp.cos(theta), chart.radius * gnp.sin(theta))[0]

    def _project_from(self, point):
        return self.project(point, self.projection_direction(point))


class RandomFrontierAtlas(_FrontierAtlas):
    """Next state: a uniformly random point on the rim of the chart,
    projected on the level set."""

    def get_next_state(self, node_id):
        self._check_id(node_id)
        self._check_regressor()
        theta = 2.0 * gnp.pi * float(gnp.rand(1)[0])
        return self._project_from(self._rim_point(self.nodes[node_id], theta))


class VarianceFrontierAtlas(_FrontierAtlas):
    """Next state: the rim point of highest posterior variance among
    `n_candidates` evenly spaced ones, projected on the level set."""

    def __init__(self, gp_model=None, gp_reg=None, var_tol=None, n_candidates=16, **kwargs):
        super().__init__(gp_model, gp_reg, var_tol=var_tol, **kwargs)
        self.n_candidates = n_candidates

    def get_next_state(self, node_id):
        self._check_id(node_id)
        self._check_regressor()
        chart = self.nodes[node_id]
        theta = gnp.linspace(0.0, 2.0 * gnp.pi, self.n_candidates, endpoint=False)
        candidates = chart.to_world(chart.radius * gnp.cos(theta), chart.radius * gnp.sin(theta))
        _, variances = self.gp_reg.evaluate(candidates)
        return self._project_from(candidates[int(gnp.argmax(variances))])
