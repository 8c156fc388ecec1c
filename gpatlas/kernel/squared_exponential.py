# gpatlas/kernel/squared_exponential.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
from math import log
import gpatlas.num as gnp
from .base import CovarianceFunction, radial_profile


def squared_exponential_kernel(h):
    """Squared-exponential kernel.

    .. math::
        k(h) = \\exp(-h^2 / 2)

    Parameters
    ----------
    h : gnp.array
        Scaled distances between points.

    Returns
    -------
    gnp.array
        Kernel values.
    """
    return gnp.exp(-0.5 * h**2)


class SquaredExponential(CovarianceFunction):
    """Isotropic squared-exponential covariance.

    .. math::
        k(x, y) = \\sigma^2 \\exp\\left(-\\frac{|x - y|^2}{2\\ell^2}\\right)

    Log-hyperparameters: ``[log(length), log(sigma)]``.
    """

    name = "SquaredExponential"

    def __init__(self, length=1.0, sigma=1.0):
        super().__init__([log(length), log(sigma)])

    def _profile(self, r, loghyper):
        ell2 = gnp.exp(2.0 * loghyper[0])
        sigma2 = gnp.exp(2.0 * loghyper[1])
        d = gnp.norm(r, axis=-1)
        phi = sigma2 * squared_exponential_kernel(d / gnp.sqrt(ell2))
        return radial_profile(r, phi, -phi / ell2, phi / ell2**2)

    def _profile_gradient(self, r, loghyper):
        # d/dlog(sigma) scales everything by 2; d/dlog(length) multiplies a
        # term carrying (1/l^2)^m by (u - 2m), with u = d^2/l^2
        k, dk, d2k = self._profile(r, loghyper)
        ell2 = gnp.exp(2.0 * loghyper[0])
        u = gnp.sum(r**2, axis=-1) / ell2
        psi = -k / ell2
        chi = k / ell2**2
        g_k = k * u
        g_dk = (psi * (u - 2.0))[..., None] * r
        g_d2k = (psi * (u - 2.0))[..., None, None] * gnp.eye(3) + (chi * (u - 4.0))[
            ..., None, None
        ] * (r[..., :, None] * r[..., None, :])
        return (
            gnp.stack([g_k, 2.0 * k]),
            gnp.stack([g_dk, 2.0 * dk]),
            gnp.stack([g_d2k, 2.0 * d2k]),
        )


class SquaredExponentialARD(CovarianceFunction):
    """Squared-exponential covariance with one length per axis.

    .. math::
        k(x, y) = \\sigma^2 \\exp\\left(-\\frac{1}{2}\\sum_a \\frac{(x_a - y_a)^2}{\\ell_a^2}\\right)

    Log-hyperparameters: ``[log(l_x), log(l_y), log(l_z), log(sigma)]``.
    """

    name = "SquaredExponentialARD"

    def __init__(self, lengths=(1.0, 1.0, 1.0), sigma=1.0):
        lengths = gnp.array(lengths).reshape(-1)
        if lengths.shape[0] == 1:
            lengths = gnp.full((3,), lengths[0])
        super().__init__(gnp.concatenate([gnp.log(lengths), gnp.array([log(sigma)])]))

    def _profile(self, r, loghyper):
        inv_ell2 = gnp.exp(-2.0 * loghyper[:3])
        sigma2 = gnp.exp(2.0 * loghyper[3])
        s = r * inv_ell2
        k = sigma2 * gnp.exp(-0.5 * gnp.sum(r * s, axis=-1))
        dk = -k[..., None] * s
        d2k = k[..., None, None] * (s[..., :, None] * s[..., None, :] - gnp.eye(3) * inv_ell2)
        return k, dk, d2k
