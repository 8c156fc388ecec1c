# gpatlas/atlas/base.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Atlas of charts over the zero level-set of a GP implicit surface.

The atlas stores charts in creation order (the id of a chart is its
index) and an undirected adjacency map between chart ids. The choice
of the next chart center and of what counts as a solution belongs to
exploration policies, implemented by subclasses.
"""
from abc import ABC, abstractmethod
import gpatlas.num as gnp
from gpatlas.config import get_logger
from gpatlas.core.utils import ensure_points
from gpatlas.desc import ProjectionDesc
from gpatlas.errors import OutOfRangeError, UninitializedError
from .chart import Chart

logger = get_logger()


class AtlasBase(ABC):
    """Growable graph of charts.

    Parameters
    ----------
    gp_model : gpatlas.core.GaussianProcess, optional
        Fitted model the atlas covers. Its prior variance scales the
        chart radius in `radius_for`.
    gp_reg : gpatlas.core.GaussianProcess, optional
        Regressor used for evaluations and projections; usually the
        same object as `gp_model`. The atlas does not own either.
    disc_radius : float, optional
        Radius of a chart whose center has zero posterior variance.
    project_nodes : bool, optional
        If True, `create_node` projects the center on the level set
        before building the chart.
    projection : gpatlas.desc.ProjectionDesc or dict, optional
        Default tolerances of `project`.
    """

    def __init__(self, gp_model=None, gp_reg=None, disc_radius=0.01, project_nodes=False, projection=None):
        self.gp_model = gp_model
        self.gp_reg = gp_reg
        self.disc_radius = float(disc_radius)
        self.project_nodes = project_nodes
        if projection is None:
            projection = ProjectionDesc()
        elif isinstance(projection, dict):
            projection = ProjectionDesc.from_dict(projection)
        self.projection = projection.create()
        self.nodes = []
        self.branches = {}
        self.last_projection = None

    def __repr__(self):
        return f"<{self.__class__.__name__} nodes={len(self.nodes)}>"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    def count_nodes(self):
        return len(self.nodes)

    def _check_id(self, node_id):
        if not (0 <= node_id < len(self.nodes)):
            raise OutOfRangeError(f"Out of range node id {node_id} (atlas has {len(self.nodes)} nodes)")

    @staticmethod
    def _node_id(node):
        return node.id if isinstance(node, Chart) else node

    def get_node(self, node_id):
        """Copy of the chart `node_id`."""
        self._check_id(node_id)
        return self.nodes[node_id].copy()

    def get_nodes(self):
        return [chart.copy() for chart in self.nodes]

    def clear(self):
        """Drop all charts and connections, and release the GP references."""
        self.nodes = []
        self.branches = {}
        self.gp_model = None
        self.gp_reg = None

    def set_gp_model(self, gp_model):
        self.gp_model = gp_model

    def set_gp_regressor(self, gp_reg):
        self.gp_reg = gp_reg

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------
    def get_connections(self, node_id):
        """Set of ids connected to `node_id` (empty if none)."""
        self._check_id(node_id)
        return set(self.branches.get(node_id, ()))

    def connect(self, id_a, id_b):
        """Record the undirected edge a -- b.

        Both directions are stored, so ``b in get_connections(a)`` and
        ``a in get_connections(b)``.
        """
        self._check_id(id_a)
        self._check_id(id_b)
        self.branches.setdefault(id_a, set()).add(id_b)
        self.branches.setdefault(id_b, set()).add(id_a)

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------
    def _check_regressor(self):
        if self.gp_reg is None:
            raise UninitializedError("Empty regressor: set a GP regressor first")

    def radius_for(self, variance):
        """Chart radius for a center of posterior variance `variance`.

        The radius decreases linearly from `disc_radius` (zero variance)
        to a tenth of it (prior variance).
        """
        if self.gp_model is None:
            return self.disc_radius
        prior = float(self.gp_model.covariance.prior_covariance()[0, 0])
        confidence = 1.0 - variance / prior if prior > 0.0 else 1.0
        return self.disc_radius * min(max(confidence, 0.1), 1.0)

    def projection_direction(self, point):
        """Step direction g / |g|^2 from the GP gradient g at `point`.

        With this direction, a unit `step_mul` is a Newton step on f
        along the gradient. Zero where the gradient vanishes.
        """
        g = self.gp_reg.gradient(point)
        g2 = gnp.dot(g, g)
        return g / g2 if g2 > 0.0 else gnp.zeros((3,))

    def outward_direction(self, point):
        """Unit vector from the training centroid of the regressor to `point`.

        Used as chart gradient where the posterior gradient vanishes,
        e.g. far from the data. Defaults to +z when `point` is the
        centroid or the regressor has no data.
        """
        d = gnp.zeros((3,))
        if self.gp_reg.size > 0:
            d = gnp.asarray(point).reshape(3) - self.gp_reg.sampleset.centroid()
        length = gnp.norm(d)
        if not length > 0.0:
            return gnp.array([0.0, 0.0, 1.0])
        return d / length

    def create_node(self, center):
        """Build a chart at `center` and append it.

        Where the posterior gradient is zero or not finite, the chart
        takes `outward_direction(center)` as gradient, so that creation
        succeeds at any finite point.

        Returns
        -------
        int
            Id of the new chart.

        Raises
        ------
        UninitializedError
            If there is no regressor.
        """
        self._check_regressor()
        center = ensure_points(center, "center")[0]
        if self.project_nodes:
            center = self.project(center, self.projection_direction(center))
        _, variances, gradients, _, _ = self.gp_reg.evaluate(center, with_frames=True)
        variance = float(variances[0])
        gradient = gradients[0]
        length = gnp.norm(gradient)
        if not (gnp.isfinite(length) and length > 0.0):
            logger.debug("create_node: vanishing gradient at %s, using the outward direction", center.tolist())
            gradient = self.outward_direction(center)
        node_id = len(self.nodes)
        self.nodes.append(Chart(center, node_id, gradient, self.radius_for(variance), variance))
        logger.debug("create_node: chart %d at %s (variance %.3e)", node_id, center.tolist(), variance)
        return node_id

    def seed(self, points):
        """Create one chart per point. Returns the list of new ids."""
        return [self.create_node(p) for p in ensure_points(points, "points")]

    def project(self, point, normal, f_tol=None, improve_tol=None, max_iter=None, step_mul=None):
        """Walk `point` toward the zero level-set of the regressor.

        Iterates ``x <- x - step_mul * f(x) * normal`` and stops when

        - ``|f(x)| < f_tol`` (converged),
        - the change of f over one step is below `improve_tol` (stalled),
        - `max_iter` steps were made.

        The last iterate is returned in every case; non-convergence is
        not an error. Tolerances default to the atlas `projection`
        settings. The caller chooses `normal` and must keep it valid for
        the region being walked.

        Raises
        ------
        UninitializedError
            If there is no regressor.
        """
        self._check_regressor()
        f_tol = self.projection["f_tol"] if f_tol is None else f_tol
        improve_tol = self.projection["improve_tol"] if improve_tol is None else improve_tol
        max_iter = self.projection["max_iter"] if max_iter is None else max_iter
        step_mul = self.projection["step_mul"] if step_mul is None else step_mul

        current = gnp.copy(gnp.asarray(point).reshape(3))
        normal = gnp.asarray(normal).reshape(3)
        iteration = 0
        reason = "max_iter"
        while iteration < max_iter:
            f_current = float(self.gp_reg.f(current)[0])
            if abs(f_current) < f_tol:
                reason = "f_tol"
                break
            current = current - step_mul * f_current * normal
            f_new = float(self.gp_reg.f(current)[0])
            if abs(f_new - f_current) < improve_tol:
                reason = "improve_tol"
                break
            iteration += 1
        self.last_projection = {"reason": reason, "iterations": iteration}
        logger.debug("project: stopped on %s after %d iterations", reason, iteration)
        return current

    # ------------------------------------------------------------------
    # Exploration policy
    # ------------------------------------------------------------------
    @abstractmethod
    def get_next_state(self, node_id):
        """Next chart center to explore from chart `node_id`."""

    @abstractmethod
    def is_solution(self, node):
        """True if `node` (a Chart or an id) is a solution of the exploration."""
