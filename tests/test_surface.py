"""
Unit tests for the point-cloud to atlas workflow and the point designs.
"""

import math
import unittest
import numpy as np
import gpatlas
import gpatlas.num as gnp
from gpatlas.config import get_backend, get_logger, set_backend, set_seed
from gpatlas.desc import GaussianProcessDesc
from gpatlas.errors import InvalidArgumentError
from gpatlas.atlas import VarianceFrontierAtlas
from gpatlas.misc.designs import fibonacci_sphere, mindist, regulargrid, regulargrid_step, sphere
from gpatlas.surface import (
    EXTERIOR_LABEL,
    INTERIOR_LABEL,
    SURFACE_LABEL,
    SurfaceModel,
    length_from_bounding_box,
    sample_level_set,
    scan_box,
    training_set_from_cloud,
)


def laplace_desc():
    return GaussianProcessDesc(covariance={"family": "laplace", "length": 0.1})


def object_cloud(n=48, radius=0.06):
    return fibonacci_sphere(n, radius=radius, center=(0.1, -0.2, 0.3))


class TestTrainingSet(unittest.TestCase):

    def test_layout(self):
        cloud = object_cloud()
        s = training_set_from_cloud(cloud)
        self.assertEqual(s.rows, 48 + 1 + 48)
        labels = s.labels
        self.assertTrue(gnp.all(labels[:48] == SURFACE_LABEL))
        self.assertEqual(float(labels[48]), INTERIOR_LABEL)
        self.assertTrue(gnp.all(labels[49:] == EXTERIOR_LABEL))
        centroid = s.x(48)
        self.assertTrue(gnp.allclose(centroid, gnp.mean(gnp.asarray(cloud), axis=0)))
        d = gnp.norm(s.inputs[49:] - centroid, axis=1)
        self.assertTrue(gnp.allclose(d, 0.15))

    def test_gradient_targets(self):
        s = training_set_from_cloud(object_cloud())
        lengths = gnp.norm(s.gradients, axis=1)
        self.assertEqual(float(lengths[48]), 0.0)
        self.assertTrue(gnp.allclose(gnp.concatenate([lengths[:48], lengths[49:]]), 1.0))
        outward = gnp.sum(s.gradients * (s.inputs - s.x(48)), axis=1)
        self.assertTrue(gnp.all(outward >= 0.0))

    def test_empty_cloud(self):
        with self.assertRaises(InvalidArgumentError):
            training_set_from_cloud(gnp.zeros((0, 3)))

    def test_boxes(self):
        cloud = gnp.array([[0.0, 0.0, 0.0], [1.0, 2.0, 2.0]])
        self.assertAlmostEqual(length_from_bounding_box(cloud), 3.0)
        lower, upper = scan_box(cloud, scale=2.0, z_scale=1.5)
        self.assertTrue(gnp.allclose(lower, [-0.5, -1.0, -2.0]))
        self.assertTrue(gnp.allclose(upper, [1.5, 3.0, 4.0]))


class TestLevelSet(unittest.TestCase):

    def test_points_are_near_zero(self):
        cloud = object_cloud()
        gp = laplace_desc().create(training_set_from_cloud(cloud))
        pts = sample_level_set(gp, scan_box(cloud), step=0.01, tol=0.05)
        self.assertGreater(pts.shape[0], 0)
        values, _ = gp.evaluate(pts)
        self.assertTrue(gnp.all(gnp.abs(values) <= 0.05))


class TestSurfaceModel(unittest.TestCase):

    def test_start(self):
        set_seed(0)
        model = SurfaceModel(gp_desc=laplace_desc())
        self.assertFalse(model.started)
        ok = model.start(object_cloud(), n_charts=5, step=0.01, tol=0.05)
        self.assertTrue(ok)
        self.assertTrue(model.started)
        self.assertEqual(model.atlas.count_nodes(), min(5, model.levelset.shape[0]))
        for chart in model.atlas.get_nodes():
            self.assertAlmostEqual(float(gnp.norm(chart.normal)), 1.0)
            self.assertLessEqual(abs(float(model.gp.f(chart.center)[0])), 0.05)

    def test_custom_atlas_factory(self):
        set_seed(0)
        model = SurfaceModel(gp_desc=laplace_desc(), atlas_factory=VarianceFrontierAtlas)
        self.assertTrue(model.start(object_cloud(), n_charts=2, step=0.01, tol=0.05))
        self.assertIsInstance(model.atlas, VarianceFrontierAtlas)

    def test_start_with_default_model(self):
        set_seed(0)
        model = SurfaceModel()
        self.assertEqual(model.gp_desc.covariance.family, "thinplate")
        self.assertEqual(model.gp_desc.noise, 0.0)
        self.assertTrue(model.start(object_cloud(), n_charts=5, step=0.01, tol=0.05))
        self.assertGreater(model.atlas.count_nodes(), 0)
        centroid = gnp.mean(gnp.asarray(object_cloud()), axis=0)
        self.assertLess(float(model.gp.f(centroid)[0]), 0.0)
        for chart in model.atlas.get_nodes():
            self.assertLessEqual(abs(float(model.gp.f(chart.center)[0])), 0.05)

    def test_thinplate_length_from_training_box(self):
        desc = GaussianProcessDesc()
        model = SurfaceModel(gp_desc=desc)
        self.assertTrue(model.start(object_cloud(), n_charts=1, step=0.02, tol=0.5))
        # the descriptor given by the caller is left untouched
        self.assertEqual(desc.covariance.length, 1.0)
        expected = length_from_bounding_box(model.training.inputs)
        self.assertAlmostEqual(math.exp(float(model.gp.covariance.get_log_hyper()[0])), expected)

    def test_failures_expose_nothing(self):
        model = SurfaceModel(gp_desc=laplace_desc())
        with self.assertLogs("gpatlas", level="ERROR"):
            self.assertFalse(model.start(gnp.zeros((0, 3))))
        self.assertFalse(model.started)
        self.assertIsNone(model.atlas)

        bad = SurfaceModel(gp_desc=GaussianProcessDesc(noise=-1.0))
        self.assertFalse(bad.start(object_cloud()))
        self.assertIsNone(bad.gp)

    def test_no_level_set_point(self):
        model = SurfaceModel(gp_desc=laplace_desc())
        far_box = [[5.0, 5.0, 5.0], [5.1, 5.1, 5.1]]
        # a negative tolerance keeps no grid point
        self.assertFalse(model.start(object_cloud(), step=0.05, tol=-1.0, box=far_box))
        self.assertFalse(model.started)


class TestDesigns(unittest.TestCase):

    def test_sphere(self):
        pts = sphere(0.15, center=(1.0, 0.0, 0.0), ang_div=8, lin_div=6)
        self.assertEqual(pts.shape, (48, 3))
        self.assertTrue(np.allclose(np.linalg.norm(pts - [1.0, 0.0, 0.0], axis=1), 0.15))

    def test_half_sphere(self):
        pts = sphere(0.06, ang_div=24, lin_div=20, end_lin=0.03)
        self.assertEqual(pts.shape, (24 * 15, 3))
        self.assertTrue(np.all(pts[:, 2] < 0.03))

    def test_fibonacci_sphere(self):
        pts = fibonacci_sphere(100, radius=2.0)
        self.assertEqual(pts.shape, (100, 3))
        self.assertTrue(np.allclose(np.linalg.norm(pts, axis=1), 2.0))
        self.assertGreater(mindist(pts), 0.0)

    def test_regular_grids(self):
        g = regulargrid(3, [2, 3, 4], [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
        self.assertEqual(g.shape, (24, 3))
        g = regulargrid_step([[0.0, 0.0, 0.0], [1.0, 0.5, 0.0]], 0.25)
        self.assertEqual(g.shape, (5 * 3 * 2, 3))


def test_package_metadata():
    assert isinstance(gpatlas.__version__, str)
    assert get_backend() == "numpy"
    assert get_logger().name == "gpatlas"


def test_set_backend_rejects_unknown():
    try:
        set_backend("torch")
    except ValueError:
        pass
    else:
        raise AssertionError("unsupported backend accepted")


def test_seed_reproducibility():
    set_seed(42)
    a = gnp.rand(3)
    set_seed(42)
    b = gnp.rand(3)
    assert gnp.allclose(a, b)


if __name__ == "__main__":
    unittest.main()
