# gpatlas/core/gaussian_process.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Gaussian Process regression with gradient observations.

The model observes, at every training point x_j, the value f(x_j) and
the gradient of f at x_j. The joint covariance of these 4n
observations is the derivative-augmented matrix built by
`gpatlas.kernel.CovarianceFunction.augmented_covariance`, with rows
ordered sample by sample: (f, df/dx, df/dy, df/dz) of sample 0, then
of sample 1, and so on. New samples therefore append a trailing block
of rows, and the Cholesky factor is extended instead of recomputed.
"""
import time
import gpatlas.num as gnp
from gpatlas.config import get_logger
from gpatlas.errors import InvalidArgumentError
from gpatlas.kernel.base import NCHANNELS
from . import likelihood
from .linalg import GrowableCholesky, compute_tangent_basis
from .sampleset import SampleSet
from .utils import ensure_points

logger = get_logger()

# relative diagonal loading, in units of the prior variance of each channel
JITTER = 1e-8


class GaussianProcess:
    """GP implicit-surface regressor.

    Parameters
    ----------
    covariance : gpatlas.kernel.CovarianceFunction
        Covariance function. The GP keeps a reference and watches its
        `loghyper_changed` flag.
    noise : float, optional
        Observation noise variance, added to the value channel.
    initial_size : int, optional
        Number of samples the Cholesky buffer is allocated for.
    sampleset : SampleSet, optional
        Training data. It is read, never modified, except through
        `add_patterns`.
    optimiser : object, optional
        Hyperparameter optimiser with a ``find(gp)`` method, run by
        `set`.

    Attributes
    ----------
    alpha_needs_update : bool
        True when the weight vector K^{-1} y must be recomputed.
    k_star : gnp.array or None
        Last cross-covariance block, shape (4, 4n).

    Examples
    --------
    >>> import gpatlas.num as gnp
    >>> from gpatlas.kernel import ThinPlate
    >>> from gpatlas.core import GaussianProcess
    >>> x = gnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    >>> gp = GaussianProcess(ThinPlate(length=2.0))
    >>> gp.add_patterns(x, [-1.0, 0.0])
    >>> value, dx, dy, dz = gp.f([0.5, 0.0, 0.0])
    """

    def __init__(self, covariance, noise=0.0, initial_size=100, sampleset=None, optimiser=None):
        if noise < 0.0:
            raise InvalidArgumentError(f"noise must be >= 0, got {noise}")
        if initial_size <= 0:
            raise InvalidArgumentError(f"initial_size must be > 0, got {initial_size}")
        self.covariance = covariance
        self.noise = float(noise)
        self.initial_size = int(initial_size)
        self.optimiser = optimiser
        self.sampleset = SampleSet() if sampleset is None else sampleset
        self._chol = GrowableCholesky(NCHANNELS * self.initial_size)
        self._n_factored = 0
        self._alpha = None
        self.alpha_needs_update = True
        self.k_star = None

    def __repr__(self):
        return f"<gpatlas.core.GaussianProcess object> {hex(id(self))}"

    def __str__(self):
        return (
            f"Gaussian Process:\n"
            f"  Covariance: {self.covariance.name}\n"
            f"  Log-hyperparameters: {self.covariance.get_log_hyper().tolist()}\n"
            f"  Noise: {self.noise}\n"
            f"  Samples: {self.size}"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def size(self):
        """Number of training samples."""
        return self.sampleset.rows

    @property
    def capacity(self):
        """Number of samples the Cholesky buffer holds without growing."""
        return self._chol.capacity // NCHANNELS

    @property
    def L(self):
        """Current Cholesky factor (view), shape (4n, 4n)."""
        return self._chol.L

    @property
    def alpha(self):
        self._ensure_ready()
        return self._alpha

    def _diagonal_loading(self, n):
        prior = gnp.diag(self.covariance.prior_covariance())
        per_sample = JITTER * prior
        per_sample[0] += self.noise
        return gnp.tile(per_sample, n)

    def _training_block(self, start, stop):
        x = self.sampleset.inputs
        K = self.covariance.augmented_covariance(x[start:stop])
        K[gnp.arange(K.shape[0]), gnp.arange(K.shape[0])] += self._diagonal_loading(stop - start)
        return K

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def set(self, sampleset):
        """Replace the training data and refit.

        Runs a full recompute, then the optimiser if one is attached.
        """
        self.sampleset = sampleset
        self._chol.reset()
        self._n_factored = 0
        self.alpha_needs_update = True
        self.k_star = None
        if self.sampleset.empty:
            return
        self.compute(force=True)
        if self.optimiser is not None:
            self.optimiser.find(self)

    def add_patterns(self, inputs, targets, gradients=None):
        """Append training samples.

        The first batch triggers a full recompute; later batches extend
        the Cholesky factor with the new block of rows.

        Parameters
        ----------
        inputs : array_like, shape (k, 3)
        targets : array_like, shape (k,)
        gradients : array_like, shape (k, 3), optional

        Raises
        ------
        InvalidArgumentError
            If `inputs` and `targets` lengths differ.
        NumericalFailureError
            If the extended matrix is not positive definite. The GP is
            then in an undefined state and must be rebuilt.
        """
        start, stop = self.sampleset.add(inputs, targets, gradients)
        self.alpha_needs_update = True
        if stop == start:
            return
        if self._n_factored == 0 or self.covariance.loghyper_changed:
            self.compute(force=True)
        else:
            self._extend(self._n_factored)

    def _extend(self, start):
        tic = time.time()
        stop = self.sampleset.rows
        x = self.sampleset.inputs
        K_cross = self.covariance.augmented_covariance(x[:start], x[start:stop])
        K_new = self._training_block(start, stop)
        self._chol.extend(K_cross, K_new)
        self._n_factored = stop
        self.alpha_needs_update = True
        logger.debug(
            "add_patterns: extended factor %d -> %d samples in %.4fs",
            start,
            stop,
            time.time() - tic,
        )

    def compute(self, force=False, verbose=False):
        """Assemble the augmented covariance and factorize it.

        Skipped unless the covariance hyperparameters changed or
        `force` is True.

        Returns
        -------
        bool
            True if a factorization took place.
        """
        if not (force or self.covariance.loghyper_changed):
            return False
        n = self.sampleset.rows
        if n == 0:
            return False
        tic = time.time()
        K = self._training_block(0, n)
        self._chol.reset()
        self._n_factored = 0
        self._chol.factorize(K)
        self.covariance.mark_clean()
        self._n_factored = n
        self.alpha_needs_update = True
        log = logger.info if verbose else logger.debug
        log("compute: %dx%d factorization in %.4fs", 4 * n, 4 * n, time.time() - tic)
        return True

    def _ensure_ready(self):
        n = self.sampleset.rows
        if n == 0:
            raise InvalidArgumentError("the training set is empty")
        if self.covariance.loghyper_changed or self._n_factored == 0:
            self.compute(force=True)
        elif self._n_factored < n:
            # samples added to the shared set behind our back
            self._extend(self._n_factored)
        if self.alpha_needs_update:
            self._alpha = self._chol.cho_solve(self.sampleset.augmented_targets())
            self.alpha_needs_update = False

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def update_k_star(self, x):
        """Cross-covariance between (f, grad f)(x) and the training channels."""
        x = ensure_points(x, "x")
        self.k_star = self.covariance.augmented_covariance(x, self.sampleset.inputs)
        return self.k_star

    def f(self, x):
        """Posterior mean of (f, df/dx, df/dy, df/dz) at a point, shape (4,).

        Raises
        ------
        InvalidArgumentError
            If the training set is empty.
        """
        self._ensure_ready()
        return gnp.matmul(self.update_k_star(x), self._alpha)

    def gradient(self, x):
        """Posterior mean of the gradient at a point, shape (3,)."""
        return self.f(x)[1:]

    def var(self, x, full=False):
        """Posterior variance at a point.

        Parameters
        ----------
        x : array_like, shape (3,)
        full : bool, optional
            If True, return the 4x4 posterior covariance of
            (f, grad f) instead of the variance of f.

        Returns
        -------
        float or gnp.array
            Zero (or a zero matrix) when there is no training data.
        """
        if self.sampleset.empty:
            return gnp.zeros((NCHANNELS, NCHANNELS)) if full else 0.0
        self._ensure_ready()
        k_star = self.update_k_star(x)
        prior = self.covariance.prior_covariance()
        if full:
            v = self._chol.solve_lower(k_star.T)
            return prior - gnp.matmul(v.T, v)
        v = self._chol.solve_lower(k_star[0])
        return max(float(prior[0, 0] - gnp.dot(v, v)), 0.0)

    def evaluate(self, points, with_frames=False, batch_size=1024):
        """Batched posterior mean and variance of f.

        Parameters
        ----------
        points : array_like, shape (m, 3)
        with_frames : bool, optional
            Also return gradients, unit normals and tangent bases.
        batch_size : int, optional
            Number of points per block. Blocks are independent.

        Returns
        -------
        values : gnp.array, shape (m,)
        variances : gnp.array, shape (m,)
        gradients : gnp.array, shape (m, 3)
            Only if `with_frames`.
        normals : gnp.array, shape (m, 3)
            Only if `with_frames`. Zero where the gradient vanishes.
        tangents : gnp.array, shape (m, 2, 3)
            Only if `with_frames`. Zero where the gradient vanishes.
        """
        points = ensure_points(points, "points")
        self._ensure_ready()
        x = self.sampleset.inputs
        prior_var = self.covariance.prior_covariance()[0, 0]
        m = points.shape[0]
        means = gnp.empty((m, NCHANNELS))
        variances = gnp.empty((m,))
        for b in range(0, m, batch_size):
            block = points[b : b + batch_size]
            K = self.covariance.augmented_covariance(block, x)
            means[b : b + batch_size] = gnp.matmul(K, self._alpha).reshape(-1, NCHANNELS)
            v = self._chol.solve_lower(K[::NCHANNELS].T)
            variances[b : b + batch_size] = gnp.maximum(prior_var - gnp.sum(v**2, axis=0), 0.0)

        values = means[:, 0]
        if not with_frames:
            return values, variances

        gradients = means[:, 1:]
        normals = gnp.zeros((m, 3))
        tangents = gnp.zeros((m, 2, 3))
        lengths = gnp.norm(gradients, axis=1)
        for i in range(m):
            if lengths[i] > 0.0:
                normals[i] = gradients[i] / lengths[i]
                tangents[i, 0], tangents[i, 1] = compute_tangent_basis(normals[i])
        return values, variances, gradients, normals, tangents

    # ------------------------------------------------------------------
    # Likelihood
    # ------------------------------------------------------------------
    def log_likelihood(self):
        """Log marginal likelihood of the training data."""
        self._ensure_ready()
        return likelihood.log_likelihood(
            self._chol, self._alpha, self.sampleset.augmented_targets()
        )

    def log_likelihood_gradient(self):
        """Gradient of `log_likelihood` w.r.t. the covariance log-hyperparameters."""
        self._ensure_ready()
        dK = self.covariance.augmented_covariance_gradient(self.sampleset.inputs)
        return likelihood.log_likelihood_gradient(self._chol, self._alpha, dK)
