# gpatlas/kernel/laplace.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
from math import log
import gpatlas.num as gnp
from gpatlas.errors import InvalidArgumentError
from .base import CovarianceFunction, radial_profile


def laplace_kernel(h):
    """Laplace (exponential) kernel.

    .. math::
        k(h) = \\exp(-h)

    Parameters
    ----------
    h : gnp.array, shape (n,)
        Distances between points.

    Returns
    -------
    gnp.array, shape (n,)
        Kernel values.
    """
    return gnp.exp(-h)


class Laplace(CovarianceFunction):
    """Laplace covariance on a softened distance.

    .. math::
        k(x, y) = \\sigma^2 \\exp(-s / \\ell), \\qquad
        s = \\sqrt{|x - y|^2 + (\\varepsilon \\ell)^2}

    The plain Laplace kernel has no second derivative at the origin,
    which the derivative-augmented covariance needs. The softened
    distance keeps the kernel positive definite (it is a completely
    monotone function of |x - y|^2) and smooth, and recovers the
    Laplace kernel as epsilon -> 0.

    Log-hyperparameters: ``[log(length), log(sigma)]``. The softening
    ratio epsilon is fixed at construction.
    """

    name = "Laplace"

    def __init__(self, length=1.0, sigma=1.0, softening=0.1):
        if softening <= 0.0:
            raise InvalidArgumentError("softening must be > 0.")
        self.softening = softening
        super().__init__([log(length), log(sigma)])

    def _profile(self, r, loghyper):
        ell = gnp.exp(loghyper[0])
        sigma2 = gnp.exp(2.0 * loghyper[1])
        c2 = (self.softening * ell) ** 2
        s = gnp.sqrt(gnp.sum(r**2, axis=-1) + c2)
        phi = sigma2 * laplace_kernel(s / ell)
        psi = -phi / (ell * s)
        chi = phi / (ell * s) ** 2 + phi / (ell * s**3)
        return radial_profile(r, phi, psi, chi)
