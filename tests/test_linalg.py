"""
Unit tests for the growable Cholesky factor and tangent bases.
"""

import unittest
import numpy as np
import gpatlas.num as gnp
from gpatlas.core import GrowableCholesky, compute_tangent_basis
from gpatlas.errors import InvalidArgumentError, NumericalFailureError


def make_spd(n, seed=0):
    gnp.set_seed(seed)
    A = gnp.randn(n, n)
    return gnp.matmul(A, A.T) + n * gnp.eye(n)


class TestGrowableCholesky(unittest.TestCase):

    def test_factorize(self):
        K = make_spd(6)
        chol = GrowableCholesky(4)
        L = chol.factorize(K)
        self.assertEqual(chol.size, 6)
        self.assertGreaterEqual(chol.capacity, 6)
        self.assertTrue(gnp.allclose(gnp.matmul(L, L.T), K))

    def test_extend_matches_batch_factor(self):
        K = make_spd(9, seed=1)
        chol = GrowableCholesky(2)
        chol.factorize(K[:3, :3])
        chol.extend(K[:3, 3:5], K[3:5, 3:5])
        chol.extend(K[:5, 5:], K[5:, 5:])
        self.assertEqual(chol.size, 9)
        self.assertTrue(gnp.allclose(chol.L, gnp.cholesky(K), atol=1e-10))

    def test_upper_block_stays_zero_after_growth(self):
        K = make_spd(5, seed=2)
        chol = GrowableCholesky(1)
        chol.factorize(K[:2, :2])
        chol.extend(K[:2, 2:], K[2:, 2:])
        L = chol.L
        self.assertTrue(gnp.allclose(L, gnp.where(gnp.arange(5)[:, None] >= gnp.arange(5)[None, :], L, 0.0)))
        self.assertTrue(gnp.allclose(gnp.matmul(L, L.T), K))

    def test_solves_and_logdet(self):
        K = make_spd(5, seed=3)
        b = gnp.arange(5) * 1.0
        chol = GrowableCholesky()
        chol.factorize(K)
        self.assertTrue(gnp.allclose(gnp.matmul(K, chol.cho_solve(b)), b))
        _, logdet = np.linalg.slogdet(K)
        self.assertAlmostEqual(float(chol.logdet()), float(logdet))

    def test_failure_on_indefinite_matrix(self):
        K = gnp.array([[1.0, 2.0], [2.0, 1.0]])
        chol = GrowableCholesky(2)
        with self.assertRaises(NumericalFailureError):
            chol.factorize(K)
        with self.assertRaises(gnp.LinAlgError):
            chol.factorize(K)

    def test_failure_on_extension(self):
        chol = GrowableCholesky(2)
        chol.factorize(gnp.eye(1))
        with self.assertRaises(NumericalFailureError):
            # Schur complement 1 - 4 < 0
            chol.extend(gnp.array([[2.0]]), gnp.array([[1.0]]))
        self.assertEqual(chol.size, 1)

    def test_reset(self):
        chol = GrowableCholesky(3)
        chol.factorize(gnp.eye(3))
        chol.reset()
        self.assertEqual(chol.size, 0)
        self.assertEqual(chol.L.shape, (0, 0))


class TestTangentBasis(unittest.TestCase):

    def check_frame(self, normal):
        n = gnp.asarray(normal) / gnp.norm(normal)
        tx, ty = compute_tangent_basis(normal)
        self.assertAlmostEqual(float(gnp.norm(tx)), 1.0)
        self.assertAlmostEqual(float(gnp.norm(ty)), 1.0)
        self.assertAlmostEqual(float(gnp.dot(tx, ty)), 0.0)
        self.assertAlmostEqual(float(gnp.dot(tx, n)), 0.0)
        self.assertAlmostEqual(float(gnp.dot(ty, n)), 0.0)

    def test_axis_aligned_normals(self):
        for axis in range(3):
            for s in (1.0, -1.0):
                n = gnp.zeros((3,))
                n[axis] = s
                self.check_frame(n)

    def test_random_normals(self):
        gnp.set_seed(0)
        for _ in range(20):
            self.check_frame(gnp.randn(3))

    def test_unnormalized_normal(self):
        self.check_frame(gnp.array([0.0, 3.0, 4.0]))

    def test_invalid_normal(self):
        with self.assertRaises(InvalidArgumentError):
            compute_tangent_basis(gnp.zeros((3,)))
        with self.assertRaises(InvalidArgumentError):
            compute_tangent_basis(gnp.array([float("nan"), 0.0, 1.0]))


if __name__ == "__main__":
    unittest.main()
