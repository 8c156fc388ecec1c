# gpatlas/core/likelihood.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Log marginal likelihood of the derivative-augmented GP and its gradient.

Both functions work on quantities the GP engine already caches: the
Cholesky factor of the augmented covariance and the weight vector
alpha = K^{-1} y.
"""
import gpatlas.num as gnp


def log_likelihood(chol, alpha, y):
    """Log marginal likelihood of a zero-mean GP.

    .. math::
        \\log p(y) = -\\frac{1}{2} y^T \\alpha
                     - \\sum_i \\log L_{ii}
                     - \\frac{N}{2} \\log 2\\pi

    Parameters
    ----------
    chol : gpatlas.core.linalg.GrowableCholesky
        Factor of K, size N.
    alpha : gnp.array, shape (N,)
        K^{-1} y.
    y : gnp.array, shape (N,)
        Augmented targets.

    Returns
    -------
    float
    """
    N = y.shape[0]
    norm2 = gnp.dot(y, alpha)
    L = -0.5 * (norm2 + chol.logdet() + N * gnp.log2pi)
    return float(L)


def log_likelihood_gradient(chol, alpha, dK):
    """Gradient of the log marginal likelihood w.r.t. log-hyperparameters.

    .. math::
        \\frac{\\partial \\log p(y)}{\\partial \\theta_p}
        = \\frac{1}{2} \\mathrm{tr}\\left((\\alpha\\alpha^T - K^{-1})
          \\frac{\\partial K}{\\partial \\theta_p}\\right)

    Parameters
    ----------
    chol : gpatlas.core.linalg.GrowableCholesky
        Factor of K, size N.
    alpha : gnp.array, shape (N,)
        K^{-1} y.
    dK : gnp.array, shape (p, N, N)
        Derivatives of K.

    Returns
    -------
    gnp.array, shape (p,)
    """
    N = alpha.shape[0]
    Kinv = chol.cho_solve(gnp.eye(N))
    # dK is symmetric, so tr(A dK) = sum(A * dK)
    W = gnp.outer(alpha, alpha) - Kinv
    return 0.5 * gnp.einsum("ij,pij->p", W, dK)
