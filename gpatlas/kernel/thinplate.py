# gpatlas/kernel/thinplate.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
from math import log
import gpatlas.num as gnp
from .base import CovarianceFunction, radial_profile, safe_inverse


def thinplate_kernel(h, length):
    """Thin-plate kernel in R^3.

    .. math::
        k(h) = 2 h^3 - 3 \\ell h^2 + \\ell^3

    Parameters
    ----------
    h : gnp.array
        Distances between points.
    length : float
        Length parameter, should bound the distances of interest.

    Returns
    -------
    gnp.array
        Kernel values.
    """
    return 2.0 * h**3 - 3.0 * length * h**2 + length**3


class ThinPlate(CovarianceFunction):
    """Thin-plate covariance.

    The kernel is a valid covariance on sets whose diameter is at most
    `length`; it is usually set to the diagonal of the bounding box of
    the training inputs.

    With d = |x - y|, the radial derivatives are

    .. math::
        \\phi'(d)/d = 6d - 6\\ell, \\qquad
        \\nabla^2 \\phi = (6d - 6\\ell) I + 6\\, r r^T / d,

    and the last term vanishes at d = 0.

    Log-hyperparameters: ``[log(length)]``.
    """

    name = "ThinPlate"

    def __init__(self, length=1.0):
        super().__init__([log(length)])

    @property
    def length(self):
        return float(gnp.exp(self._loghyper[0]))

    def _profile(self, r, loghyper):
        ell = gnp.exp(loghyper[0])
        d = gnp.norm(r, axis=-1)
        phi = thinplate_kernel(d, ell)
        psi = 6.0 * d - 6.0 * ell
        chi = 6.0 * safe_inverse(d)
        return radial_profile(r, phi, psi, chi)
