"""
Unit tests for the SampleSet container (unittest version).
"""

import gpatlas.num as gnp
import unittest

from gpatlas.core import SampleSet
from gpatlas.errors import InvalidArgumentError, OutOfRangeError


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def make_batch(n=5, seed=0):
    gnp.set_seed(seed)
    x = gnp.randn(n, 3)
    y = gnp.randn(n)
    g = gnp.randn(n, 3)
    return x, y, g


# ======================================================================
#                           Test cases
# ======================================================================
class TestSampleSet(unittest.TestCase):

    def test_empty(self):
        s = SampleSet()
        self.assertTrue(s.empty)
        self.assertEqual(len(s), 0)
        self.assertEqual(s.inputs.shape, (0, 3))
        with self.assertRaises(OutOfRangeError):
            s[0]
        with self.assertRaises(OutOfRangeError):
            s.bounding_box()

    def test_add_returns_index_range(self):
        x, y, g = make_batch(5)
        s = SampleSet()
        self.assertEqual(s.add(x[:2], y[:2], g[:2]), (0, 2))
        self.assertEqual(s.add(x[2:], y[2:], g[2:]), (2, 5))
        self.assertEqual(s.rows, 5)
        self.assertEqual(len(s.x_list), 2)

    def test_getitem_across_shards(self):
        x, y, g = make_batch(6)
        s = SampleSet(x[:1], y[:1], g[:1])
        s.add(x[1:4], y[1:4], g[1:4])
        s.add(x[4:], y[4:], g[4:])
        for i in range(6):
            xi, yi, gi = s[i]
            self.assertTrue(gnp.allclose(xi, x[i]))
            self.assertAlmostEqual(yi, float(y[i]))
            self.assertTrue(gnp.allclose(gi, g[i]))
        self.assertTrue(gnp.allclose(s[-1][0], x[5]))
        self.assertTrue(gnp.allclose(s.x(3), x[3]))
        self.assertAlmostEqual(s.y(2), float(y[2]))
        self.assertTrue(gnp.allclose(s.gradient(4), g[4]))
        with self.assertRaises(OutOfRangeError):
            s[6]

    def test_concatenated_views(self):
        x, y, g = make_batch(4)
        s = SampleSet(x[:2], y[:2], g[:2])
        self.assertEqual(s.inputs.shape, (2, 3))
        s.add(x[2:], y[2:], g[2:])
        self.assertTrue(gnp.allclose(s.inputs, x))
        self.assertTrue(gnp.allclose(s.labels, y))
        self.assertTrue(gnp.allclose(s.gradients, g))

    def test_stored_copy(self):
        x, y, g = make_batch(3)
        s = SampleSet(x, y, g)
        x[0, 0] = 100.0
        self.assertNotEqual(float(s.inputs[0, 0]), 100.0)

    def test_gradients_default_to_zero(self):
        x, y, _ = make_batch(3)
        s = SampleSet(x, y)
        self.assertTrue(gnp.allclose(s.gradients, gnp.zeros((3, 3))))

    def test_length_mismatch(self):
        x, y, g = make_batch(3)
        s = SampleSet()
        with self.assertRaises(InvalidArgumentError):
            s.add(x, y[:2])
        with self.assertRaises(InvalidArgumentError):
            s.add(x, y, g[:2])
        self.assertTrue(s.empty)

    def test_non_finite_rejected(self):
        x, y, _ = make_batch(3)
        y[1] = float("nan")
        with self.assertRaises(InvalidArgumentError):
            SampleSet(x, y)

    def test_column_targets_accepted(self):
        x, y, _ = make_batch(3)
        s = SampleSet(x, y.reshape(-1, 1))
        self.assertEqual(s.labels.shape, (3,))

    def test_augmented_targets_order(self):
        x = gnp.zeros((2, 3))
        y = gnp.array([1.0, 2.0])
        g = gnp.array([[3.0, 4.0, 5.0], [6.0, 7.0, 8.0]])
        s = SampleSet(x, y, g)
        expected = gnp.array([1.0, 3.0, 4.0, 5.0, 2.0, 6.0, 7.0, 8.0])
        self.assertTrue(gnp.allclose(s.augmented_targets(), expected))
        self.assertTrue(gnp.allclose(s.augmented_targets(start=1), expected[4:]))

    def test_geometry(self):
        x = gnp.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0], [-1.0, 1.0, 0.0]])
        s = SampleSet(x, gnp.zeros(3))
        lower, upper = s.bounding_box()
        self.assertTrue(gnp.allclose(lower, [-1.0, 0.0, 0.0]))
        self.assertTrue(gnp.allclose(upper, [1.0, 2.0, 3.0]))
        self.assertTrue(gnp.allclose(s.centroid(), [0.0, 1.0, 1.0]))


def test_single_point_promoted():
    s = SampleSet([0.1, 0.2, 0.3], [0.0])
    assert s.rows == 1
    assert s.inputs.shape == (1, 3)


if __name__ == "__main__":
    unittest.main()
