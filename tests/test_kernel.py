"""
Unit tests for the covariance functions and their derivatives.
"""

import math
import unittest
import gpatlas.num as gnp
from gpatlas.errors import InvalidArgumentError
from gpatlas.kernel import (
    SquaredExponential,
    SquaredExponentialARD,
    Laplace,
    ThinPlate,
    CovarianceFunction,
    create_covariance,
)

H = 1e-6


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def all_covariances():
    return [
        SquaredExponential(length=0.5, sigma=1.3),
        SquaredExponentialARD(lengths=(0.5, 0.7, 0.9), sigma=0.8),
        Laplace(length=0.5, sigma=1.1, softening=0.1),
        ThinPlate(length=1.0),
    ]


def point_pairs(n=5):
    gnp.set_seed(0)
    x1 = 0.3 * gnp.randn(n, 3)
    x2 = 0.3 * gnp.randn(n, 3)
    return x1, x2


def unit(axis):
    e = gnp.zeros((3,))
    e[axis] = 1.0
    return e


# ======================================================================
#                           Test cases
# ======================================================================
class TestCovarianceValues(unittest.TestCase):

    def test_symmetry(self):
        x1, x2 = point_pairs()
        for cf in all_covariances():
            for a, b in zip(x1, x2):
                self.assertAlmostEqual(cf.get(a, b), cf.get(b, a), places=12, msg=cf.name)

    def test_self_covariance_closed_form(self):
        x = gnp.array([0.1, -0.2, 0.3])
        self.assertAlmostEqual(SquaredExponential(0.5, 1.3).get(x, x), 1.3**2)
        self.assertAlmostEqual(SquaredExponentialARD((0.5, 0.7, 0.9), 0.8).get(x, x), 0.8**2)
        # softened distance at d = 0 is softening * length
        self.assertAlmostEqual(Laplace(0.5, 1.1, 0.1).get(x, x), 1.1**2 * math.exp(-0.1))
        self.assertAlmostEqual(ThinPlate(1.5).get(x, x), 1.5**3)

    def test_thinplate_closed_form(self):
        cf = ThinPlate(length=2.0)
        x1 = gnp.array([0.0, 0.0, 0.0])
        x2 = gnp.array([0.3, 0.4, 0.0])
        d = 0.5
        self.assertAlmostEqual(cf.get(x1, x2), 2 * d**3 - 3 * 2.0 * d**2 + 2.0**3)

    def test_squared_exponential_closed_form(self):
        cf = SquaredExponential(length=0.5, sigma=2.0)
        x1 = gnp.array([0.0, 0.0, 0.0])
        x2 = gnp.array([0.3, 0.0, 0.4])
        self.assertAlmostEqual(cf.get(x1, x2), 4.0 * math.exp(-0.5 * 0.25 / 0.25))

    def test_ard_reduces_to_isotropic(self):
        x1, x2 = point_pairs()
        iso = SquaredExponential(0.6, 1.2)
        ard = SquaredExponentialARD(0.6, 1.2)
        self.assertTrue(gnp.allclose(iso.covariance(x1, x2), ard.covariance(x1, x2)))


class TestCovarianceDerivatives(unittest.TestCase):

    def test_first_derivative_matches_finite_differences(self):
        x1, x2 = point_pairs()
        for cf in all_covariances():
            for a, b in zip(x1, x2):
                for axis in range(3):
                    e = unit(axis)
                    fd = (cf.get(a + H * e, b) - cf.get(a - H * e, b)) / (2 * H)
                    self.assertAlmostEqual(cf.get_diff(a, b, axis), fd, places=5, msg=cf.name)

    def test_second_derivative_matches_finite_differences(self):
        x1, x2 = point_pairs()
        for cf in all_covariances():
            for a, b in zip(x1, x2):
                for i in range(3):
                    for j in range(3):
                        e = unit(j)
                        fd = (cf.get_diff(a + H * e, b, i) - cf.get_diff(a - H * e, b, i)) / (2 * H)
                        self.assertAlmostEqual(
                            cf.get_diff2(a, b, i, j), fd, places=4, msg=f"{cf.name} {i}{j}"
                        )

    def test_derivatives_finite_at_zero_distance(self):
        x = gnp.array([0.2, 0.1, -0.3])
        for cf in all_covariances():
            k, dk, d2k = cf.profile(gnp.zeros((1, 3)))
            self.assertTrue(gnp.all(gnp.isfinite(dk)), cf.name)
            self.assertTrue(gnp.all(gnp.isfinite(d2k)), cf.name)
            for axis in range(3):
                self.assertEqual(cf.get_diff(x, x, axis), 0.0)

    def test_thinplate_hessian_at_zero(self):
        cf = ThinPlate(length=2.0)
        x = gnp.zeros((3,))
        for i in range(3):
            for j in range(3):
                expected = -6.0 * 2.0 if i == j else 0.0
                self.assertAlmostEqual(cf.get_diff2(x, x, i, j), expected)


class TestAugmentedCovariance(unittest.TestCase):

    def test_shape_and_symmetry(self):
        x1, _ = point_pairs(4)
        for cf in all_covariances():
            K = cf.augmented_covariance(x1)
            self.assertEqual(K.shape, (16, 16))
            self.assertTrue(gnp.allclose(K, K.T), cf.name)

    def test_channel_layout(self):
        """Row 4i + a, column 4j + b holds cov(D_a f(x_i), D_b f(x_j))."""
        x1, x2 = point_pairs(2)
        cf = SquaredExponential(0.5, 1.0)
        K = cf.augmented_covariance(x1, x2)
        a, b = x1[1], x2[0]
        self.assertAlmostEqual(K[4, 0], cf.get(a, b))
        for c in range(3):
            e = unit(c)
            self.assertAlmostEqual(K[4 + 1 + c, 0], cf.get_diff(a, b, c))
            # derivative with respect to the second argument
            fd = (cf.get(a, b + H * e) - cf.get(a, b - H * e)) / (2 * H)
            self.assertAlmostEqual(K[4, 1 + c], fd, places=5)
            for d in range(3):
                e2 = unit(d)
                fd2 = (cf.get_diff(a, b + H * e2, c) - cf.get_diff(a, b - H * e2, c)) / (2 * H)
                self.assertAlmostEqual(K[4 + 1 + c, 1 + d], fd2, places=4)

    def test_prior_covariance(self):
        cf = SquaredExponential(length=0.5, sigma=2.0)
        P = cf.prior_covariance()
        expected = gnp.zeros((4, 4))
        expected[0, 0] = 4.0
        for c in range(1, 4):
            expected[c, c] = 4.0 / 0.25
        self.assertTrue(gnp.allclose(P, expected))

    def test_positive_definite_on_distinct_points(self):
        gnp.set_seed(3)
        x = 0.4 * gnp.rand(6, 3)
        for cf in [SquaredExponential(0.5, 1.0), Laplace(0.5, 1.0)]:
            K = cf.augmented_covariance(x)
            gnp.cholesky(K + 1e-10 * gnp.eye(K.shape[0]))


class TestHyperparameters(unittest.TestCase):

    def test_param_dims(self):
        dims = [cf.param_dim for cf in all_covariances()]
        self.assertEqual(dims, [2, 4, 2, 1])

    def test_set_log_hyper_marks_dirty(self):
        cf = Laplace(0.5, 1.0)
        cf.mark_clean()
        self.assertFalse(cf.loghyper_changed)
        cf.set_log_hyper([math.log(0.3), 0.0])
        self.assertTrue(cf.loghyper_changed)
        self.assertAlmostEqual(float(gnp.exp(cf.get_log_hyper()[0])), 0.3)

    def test_set_log_hyper_rejects_bad_input(self):
        cf = ThinPlate(1.0)
        with self.assertRaises(InvalidArgumentError):
            cf.set_log_hyper([0.0, 1.0])
        with self.assertRaises(ValueError):
            cf.set_log_hyper([float("nan")])

    def test_analytic_gradient_matches_finite_differences(self):
        x1, _ = point_pairs(3)
        cf = SquaredExponential(0.5, 1.3)
        r = cf._differences(x1, None)
        analytic = cf._profile_gradient(r, cf.get_log_hyper())
        numeric = CovarianceFunction._profile_gradient(cf, r, cf.get_log_hyper())
        for a, n in zip(analytic, numeric):
            self.assertTrue(gnp.allclose(a, n, rtol=1e-5, atol=1e-7))

    def test_augmented_covariance_gradient_shape(self):
        x1, _ = point_pairs(3)
        for cf in all_covariances():
            dK = cf.augmented_covariance_gradient(x1)
            self.assertEqual(dK.shape, (cf.param_dim, 12, 12))


def test_create_covariance():
    cf = create_covariance("laplace", length=0.2)
    assert isinstance(cf, Laplace)
    assert isinstance(create_covariance("thinplate", length=2.0), ThinPlate)
    assert isinstance(create_covariance("se_ard", lengths=[0.1, 0.2, 0.3]), SquaredExponentialARD)


def test_create_covariance_unknown_family():
    try:
        create_covariance("matern")
    except InvalidArgumentError:
        pass
    else:
        raise AssertionError("unknown family accepted")


if __name__ == "__main__":
    unittest.main()
