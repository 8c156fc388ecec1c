# gpatlas/kernel/base.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Base class of stationary covariance functions on R^3 with derivatives.

A covariance function k(x1, x2) = phi(x1 - x2) is described by its
*profile*: for difference vectors r = x1 - x2 it returns

- the value phi(r), shape (...),
- the gradient d phi / d x1, shape (..., 3),
- the Hessian d^2 phi / d x1 d x1, shape (..., 3, 3).

From the profile, the class assembles the derivative-augmented
covariance used by the GP engine. Each point contributes four
channels (f, df/dx, df/dy, df/dz), laid out sample by sample: the
channel c of point i is row 4*i + c. For stationary kernels,

.. math::
    \\mathrm{cov}(f(x), f(y)) = \\phi(r),\\quad
    \\mathrm{cov}(\\partial_a f(x), f(y)) = \\partial_a \\phi(r),\\quad
    \\mathrm{cov}(f(x), \\partial_b f(y)) = -\\partial_b \\phi(r),\\quad
    \\mathrm{cov}(\\partial_a f(x), \\partial_b f(y)) = -\\partial_a\\partial_b \\phi(r),

with r = x - y.
"""
import gpatlas.num as gnp
from gpatlas.errors import InvalidArgumentError

NCHANNELS = 4


def radial_profile(r, phi, psi, chi):
    """Assemble value, gradient and Hessian of an isotropic profile.

    For phi(d) with d = |r|, writing psi = phi'(d)/d and
    chi = (phi''(d) - psi)/d^2,

    .. math::
        \\nabla \\phi = \\psi\\, r, \\qquad
        \\nabla^2 \\phi = \\psi I + \\chi\\, r r^T.

    Parameters
    ----------
    r : gnp.array, shape (..., 3)
        Difference vectors.
    phi, psi, chi : gnp.array, shape (...)
        Radial functions evaluated at d = |r|. They must be finite at
        d = 0 except `chi`, which only needs chi * d^2 -> 0.

    Returns
    -------
    k, dk, d2k : gnp.array
        Shapes (...), (..., 3), (..., 3, 3).
    """
    dk = psi[..., None] * r
    d2k = psi[..., None, None] * gnp.eye(3) + chi[..., None, None] * (
        r[..., :, None] * r[..., None, :]
    )
    return phi, dk, d2k


def safe_inverse(d):
    """Return 1/d where d > 0 and 0 elsewhere."""
    positive = d > 0.0
    return gnp.where(positive, 1.0 / gnp.where(positive, d, 1.0), 0.0)


class CovarianceFunction:
    """Stationary covariance function with first and second derivatives.

    Hyperparameters are stored in log space. Setting them raises the
    `loghyper_changed` flag which tells the GP engine that its
    covariance matrix must be recomputed.

    Subclasses implement `_profile(r, loghyper)` and may override
    `_profile_gradient(r, loghyper)` with an analytic expression.
    """

    name = "covariance"

    def __init__(self, loghyper):
        self._loghyper = gnp.array(loghyper).reshape(-1)
        self.loghyper_changed = True

    def __repr__(self):
        return f"<gpatlas.kernel.{self.__class__.__name__} loghyper={self._loghyper.tolist()}>"

    # ------------------------------------------------------------------
    # Hyperparameters
    # ------------------------------------------------------------------
    @property
    def param_dim(self):
        return self._loghyper.shape[0]

    def get_log_hyper(self):
        return gnp.copy(self._loghyper)

    def set_log_hyper(self, loghyper):
        loghyper = gnp.array(loghyper).reshape(-1)
        if loghyper.shape[0] != self.param_dim:
            raise InvalidArgumentError(
                f"{self.name} expects {self.param_dim} hyperparameters, got {loghyper.shape[0]}"
            )
        if not gnp.all(gnp.isfinite(loghyper)):
            raise InvalidArgumentError("hyperparameters must be finite")
        self._loghyper = loghyper
        self.loghyper_changed = True

    def mark_clean(self):
        self.loghyper_changed = False

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------
    def _profile(self, r, loghyper):
        raise NotImplementedError

    def profile(self, r):
        """Value, gradient and Hessian (w.r.t. x1) at differences r = x1 - x2."""
        return self._profile(gnp.asarray(r), self._loghyper)

    def _profile_gradient(self, r, loghyper):
        """Derivatives of the profile w.r.t. each log-hyperparameter.

        Returns arrays with a leading axis of length `param_dim`.
        Default implementation uses 5-point finite differences.
        """
        fd = gnp.grad(lambda p: gnp.concatenate(
            [a.reshape(-1) for a in self._profile(r, p)]
        ))
        g = fd(loghyper)
        sizes = [r.shape[:-1], r.shape[:-1] + (3,), r.shape[:-1] + (3, 3)]
        out, start = [], 0
        for shape in sizes:
            size = int(gnp.prod(shape)) if len(shape) > 0 else 1
            out.append(g[:, start:start + size].reshape((self.param_dim,) + shape))
            start += size
        return tuple(out)

    # ------------------------------------------------------------------
    # Scalar contract
    # ------------------------------------------------------------------
    @staticmethod
    def _pair(x1, x2):
        return (gnp.asarray(x1).reshape(3) - gnp.asarray(x2).reshape(3)).reshape(1, 3)

    def get(self, x1, x2):
        """k(x1, x2)."""
        return float(self.profile(self._pair(x1, x2))[0][0])

    def get_diff(self, x1, x2, axis):
        """d k(x1, x2) / d x1[axis]."""
        return float(self.profile(self._pair(x1, x2))[1][0, axis])

    def get_diff2(self, x1, x2, axis1, axis2):
        """d^2 k(x1, x2) / d x1[axis1] d x1[axis2]."""
        return float(self.profile(self._pair(x1, x2))[2][0, axis1, axis2])

    # ------------------------------------------------------------------
    # Matrices
    # ------------------------------------------------------------------
    @staticmethod
    def _differences(x, y):
        x = gnp.asarray(x).reshape(-1, 3)
        y = x if y is None else gnp.asarray(y).reshape(-1, 3)
        return x[:, None, :] - y[None, :, :]

    def covariance(self, x, y=None):
        """Value-only covariance matrix, shape (n, m)."""
        return self.profile(self._differences(x, y))[0]

    @staticmethod
    def _augment(k, dk, d2k):
        n, m = k.shape
        A = gnp.empty((n, NCHANNELS, m, NCHANNELS))
        A[:, 0, :, 0] = k
        A[:, 1:, :, 0] = dk.transpose(0, 2, 1)
        A[:, 0, :, 1:] = -dk
        A[:, 1:, :, 1:] = -d2k.transpose(0, 2, 1, 3)
        return A.reshape(NCHANNELS * n, NCHANNELS * m)

    def augmented_covariance(self, x, y=None):
        """Derivative-augmented covariance, shape (4n, 4m).

        Entries only depend on a pair of points, so the assembly can be
        split into independent blocks of rows.
        """
        return self._augment(*self.profile(self._differences(x, y)))

    def augmented_covariance_gradient(self, x, y=None):
        """d K_aug / d loghyper, shape (param_dim, 4n, 4m)."""
        r = self._differences(x, y)
        gk, gdk, gd2k = self._profile_gradient(r, self._loghyper)
        return gnp.stack(
            [self._augment(gk[p], gdk[p], gd2k[p]) for p in range(self.param_dim)]
        )

    def prior_covariance(self):
        """Prior covariance of (f, grad f) at a single point, shape (4, 4)."""
        return self._augment(*self.profile(gnp.zeros((1, 1, 3))))
