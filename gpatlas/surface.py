# gpatlas/surface.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
From a point cloud to a GP implicit surface and a seeded atlas.

The pipeline is

1. `training_set_from_cloud`: cloud points labelled 0, the centroid
   labelled -1 and a sphere of exterior points labelled +1;
2. a GP regressor fitted on this set (thin-plate covariance with
   length equal to the bounding-box diagonal of the training inputs);
3. `sample_level_set`: brute-force scan of an enlarged bounding box
   keeping the points where |f| is small;
4. an atlas seeded with random level-set points.

`SurfaceModel.start` runs the whole pipeline and either exposes a
complete model or nothing.
"""
import copy
import numpy as np
import gpatlas.num as gnp
from gpatlas.config import get_logger
from gpatlas.core import SampleSet
from gpatlas.core.utils import ensure_points
from gpatlas.desc import GaussianProcessDesc
from gpatlas.errors import GPAtlasError, InvalidArgumentError
from gpatlas.misc.designs import regulargrid_step, sphere

logger = get_logger()

INTERIOR_LABEL = -1.0
SURFACE_LABEL = 0.0
EXTERIOR_LABEL = 1.0


def radial_directions(points, origin):
    """Unit vectors from `origin` to `points`; zero for points at `origin`."""
    d = gnp.asarray(points) - gnp.asarray(origin).reshape(1, 3)
    lengths = gnp.norm(d, axis=1)
    scale = gnp.where(lengths > 0.0, 1.0 / gnp.where(lengths > 0.0, lengths, 1.0), 0.0)
    return d * scale[:, None]


def training_set_from_cloud(cloud, outer_radius=0.15, ang_div=8, lin_div=6):
    """Labelled training set for an object point cloud.

    Parameters
    ----------
    cloud : array_like, shape (m, 3)
        Points on the object surface, labelled 0.
    outer_radius : float
        Radius of the sphere of exterior points (label +1) centered on
        the cloud centroid.
    ang_div, lin_div : int
        Resolution of that sphere, see `gpatlas.misc.designs.sphere`.

    Returns
    -------
    SampleSet
        Cloud, centroid (label -1) and exterior sphere, with gradient
        targets pointing away from the centroid (unit length, zero at
        the centroid).
    """
    cloud = ensure_points(cloud, "cloud")
    if cloud.shape[0] == 0:
        raise InvalidArgumentError("the point cloud is empty")
    centroid = gnp.mean(cloud, axis=0)
    outer = gnp.asarray(sphere(outer_radius, centroid, ang_div=ang_div, lin_div=lin_div))

    inputs = gnp.vstack([cloud, centroid.reshape(1, 3), outer])
    labels = gnp.concatenate(
        [
            gnp.full((cloud.shape[0],), SURFACE_LABEL),
            gnp.array([INTERIOR_LABEL]),
            gnp.full((outer.shape[0],), EXTERIOR_LABEL),
        ]
    )
    return SampleSet(inputs, labels, radial_directions(inputs, centroid))


def length_from_bounding_box(points):
    """Diagonal of the bounding box of `points`."""
    points = ensure_points(points, "points")
    return float(gnp.norm(gnp.max(points, axis=0) - gnp.min(points, axis=0)))


def scan_box(cloud, scale=1.2, z_scale=1.5):
    """Bounding box of `cloud` enlarged by `scale` (and `scale * z_scale` along z).

    Returns
    -------
    box : list
        ``[lower, upper]``.
    """
    cloud = ensure_points(cloud, "cloud")
    lower, upper = gnp.min(cloud, axis=0), gnp.max(cloud, axis=0)
    center = 0.5 * (lower + upper)
    half = 0.5 * (upper - lower) * gnp.array([scale, scale, scale * z_scale])
    return [center - half, center + half]


def sample_level_set(gp, box, step, tol=1e-3, batch_size=2048):
    """Grid points of `box` where the posterior mean satisfies ``|f| <= tol``.

    Parameters
    ----------
    gp : gpatlas.core.GaussianProcess
    box : list
        ``[lower, upper]``.
    step : float
        Grid spacing.
    tol : float
        Tolerance on |f|.
    batch_size : int
        Points evaluated per block; blocks are independent.

    Returns
    -------
    gnp.array, shape (k, 3)
    """
    grid = gnp.asarray(regulargrid_step(box, step))
    values, _ = gp.evaluate(grid, batch_size=batch_size)
    keep = gnp.abs(values) <= tol
    logger.debug("sample_level_set: %d / %d grid points kept", int(gnp.sum(keep)), grid.shape[0])
    return grid[keep]


class SurfaceModel:
    """GP implicit surface of an object and the atlas seeded on it.

    Parameters
    ----------
    gp_desc : gpatlas.desc.GaussianProcessDesc, optional
        GP options. By default a noise-free thin-plate GP, which
        interpolates the training labels.
    atlas_factory : callable, optional
        ``atlas_factory(gp_model, gp_reg) -> AtlasBase``. By default a
        `gpatlas.atlas.RandomFrontierAtlas`.

    Attributes
    ----------
    gp, training, levelset, atlas
        None until `start` succeeds.
    """

    def __init__(self, gp_desc=None, atlas_factory=None):
        if gp_desc is None:
            gp_desc = GaussianProcessDesc()
        if atlas_factory is None:
            from gpatlas.atlas import RandomFrontierAtlas

            atlas_factory = RandomFrontierAtlas
        self.gp_desc = gp_desc
        self.atlas_factory = atlas_factory
        self._reset()

    def _reset(self):
        self.gp = None
        self.training = None
        self.levelset = None
        self.atlas = None

    @property
    def started(self):
        return self.gp is not None

    def start(self, cloud, n_charts=20, step=0.005, tol=1e-3, box=None):
        """Build the model from an object point cloud.

        Parameters
        ----------
        cloud : array_like, shape (m, 3)
        n_charts : int
            Number of random level-set points turned into charts.
        step, tol : float
            Grid spacing and |f| tolerance of the level-set scan.
        box : list, optional
            Scan box; `scan_box(cloud)` by default.

        Returns
        -------
        bool
            True on success. On failure the error is logged, the
            previous model is discarded and nothing is exposed.
        """
        self._reset()
        try:
            built = self._build(cloud, n_charts, step, tol, box)
        except (GPAtlasError, ValueError, gnp.LinAlgError) as exc:
            logger.error("start: model build failed: %s", exc)
            return False
        self.gp, self.training, self.levelset, self.atlas = built
        logger.info(
            "start: %d training samples, %d level-set points, %d charts",
            self.training.rows,
            self.levelset.shape[0],
            self.atlas.count_nodes(),
        )
        return True

    def _build(self, cloud, n_charts, step, tol, box):
        training = training_set_from_cloud(cloud)
        desc = copy.deepcopy(self.gp_desc)
        if desc.covariance.family == "thinplate":
            desc.covariance.length = length_from_bounding_box(training.inputs)
        gp = desc.create(training)

        box = scan_box(cloud) if box is None else box
        levelset = sample_level_set(gp, box, step, tol)
        if levelset.shape[0] == 0:
            raise InvalidArgumentError("no level-set point found in the scan box")

        atlas = self.atlas_factory(gp, gp)
        n = min(n_charts, levelset.shape[0])
        idx = np.asarray(gnp.choice(levelset.shape[0], size=n, replace=False))
        atlas.seed(levelset[idx])
        return gp, training, levelset, atlas
