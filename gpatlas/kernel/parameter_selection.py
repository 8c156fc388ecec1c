# gpatlas/kernel/parameter_selection.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Covariance parameter selection by maximum likelihood.

Two optimisers work on the log-hyperparameters of the covariance
function attached to a `gpatlas.core.GaussianProcess`:

RProp
    Sign-based first-order method with one adaptive step per
    parameter.
select_parameters_with_scipy
    Minimisation of the negative log-likelihood with
    ``scipy.optimize.minimize``.

Both only use the contract ``gp.covariance.get_log_hyper()``,
``gp.covariance.set_log_hyper(p)``, ``gp.log_likelihood()`` and
``gp.log_likelihood_gradient()``, and leave the best visited
parameters on the covariance.
"""

import time
import numpy as np
from scipy.optimize import minimize
import gpatlas.num as gnp
from gpatlas.config import get_logger

logger = get_logger()


def _evaluate_or_inf(fun, default):
    """Call `fun`; return `default` if it fails with a linear-algebra error."""
    try:
        return fun()
    except Exception as exc:
        if gnp.is_linalg_exception(exc):
            return default
        raise


class RProp:
    """Resilient backpropagation on the log-likelihood.

    Parameters
    ----------
    desc : gpatlas.desc.OptimisationDesc, optional
        Step sizes and stopping rules. Defaults are used when omitted.

    Notes
    -----
    At each iteration, with g the gradient of the negative
    log-likelihood:

    - where g has the same sign as at the previous iteration, the step
      grows by `eta_plus` (at most `delta_max`);
    - where the sign flipped, the step shrinks by `eta_minus` (at least
      `delta_min`) and no move is made for that parameter;
    - each parameter moves by ``-sign(g) * delta``.

    The loop stops when ``|g| < eps_stop`` or after `max_iter`
    iterations. When the likelihood cannot be evaluated (Cholesky
    failure), the parameters go back to the best point and all steps
    are shrunk.
    """

    def __init__(self, desc=None):
        if desc is None:
            from gpatlas.desc import OptimisationDesc

            desc = OptimisationDesc()
        self.delta0 = desc.delta0
        self.delta_min = desc.delta_min
        self.delta_max = desc.delta_max
        self.eta_minus = desc.eta_minus
        self.eta_plus = desc.eta_plus
        self.eps_stop = desc.eps_stop
        self.max_iter = desc.max_iter
        self.history = []

    def find(self, gp, verbose=False):
        """Tune ``gp.covariance`` in place.

        Returns
        -------
        best_params : gnp.array
            Log-hyperparameters with the highest log-likelihood seen.
        best : float
            The corresponding log-likelihood.
        """
        tic = time.time()
        cf = gp.covariance
        params = cf.get_log_hyper()
        p = params.shape[0]
        delta = gnp.full((p,), self.delta0)
        grad_old = gnp.zeros((p,))

        best = _evaluate_or_inf(gp.log_likelihood, -gnp.inf)
        best_params = gnp.copy(params)
        self.history = [(gnp.copy(params), best)]
        log = logger.info if verbose else logger.debug
        log("RProp: iter=0 lik=%f params=%s", best, params.tolist())

        for i in range(self.max_iter):
            g = _evaluate_or_inf(gp.log_likelihood_gradient, None)
            if g is None:
                # failed point: restart from the best one with smaller steps
                params = gnp.copy(best_params)
                delta = gnp.maximum(delta * self.eta_minus, self.delta_min)
                grad_old = gnp.zeros((p,))
                cf.set_log_hyper(params)
                continue
            grad = -g
            agreement = grad_old * grad
            delta = gnp.where(
                agreement > 0,
                gnp.minimum(delta * self.eta_plus, self.delta_max),
                gnp.where(agreement < 0, gnp.maximum(delta * self.eta_minus, self.delta_min), delta),
            )
            grad = gnp.where(agreement < 0, 0.0, grad)
            params = params - gnp.sign(grad) * delta
            grad_old = grad
            if gnp.norm(grad_old) < self.eps_stop:
                break
            cf.set_log_hyper(params)
            lik = _evaluate_or_inf(gp.log_likelihood, -gnp.inf)
            self.history.append((gnp.copy(params), lik))
            log("RProp: iter=%d lik=%f params=%s", i + 1, lik, params.tolist())
            if lik > best:
                best = lik
                best_params = gnp.copy(params)

        cf.set_log_hyper(best_params)
        gp.compute()
        logger.info(
            "RProp: best lik=%f params=%s (%.4fs)", best, best_params.tolist(), time.time() - tic
        )
        return best_params, best


def autoselect_parameters(p0, criterion, gradient, bounds=None, bounds_delta=10.0, method="L-BFGS-B", silent=True):
    """Minimize a scalar criterion with SciPy, returning the best visited point.

    Parameters
    ----------
    p0 : array_like
        Initial parameter vector.
    criterion : callable
        ``criterion(p) -> float``. Linear-algebra failures are mapped to
        ``+inf``.
    gradient : callable
        ``gradient(p) -> array_like``.
    bounds : sequence of tuple, optional
        Box constraints. By default a tube of half-width `bounds_delta`
        around `p0`.
    method : {"L-BFGS-B", "SLSQP"}
    silent : bool
        If False, enable solver output.

    Returns
    -------
    p_opt : numpy.ndarray
    r : scipy.optimize.OptimizeResult
        With extra fields ``history_params``, ``history_criterion``,
        ``best_value_returned`` and ``total_time``.
    """
    tic = time.time()
    if bounds is None:
        bounds = [(param - bounds_delta, param + bounds_delta) for param in p0]

    history_params, history_criterion = [], []
    best_params, best_criterion = np.array(p0, dtype=float), float("inf")

    def criterion_with_history(p):
        nonlocal best_params, best_criterion
        J = _evaluate_or_inf(lambda: criterion(p), np.inf)
        history_params.append(p.copy())
        history_criterion.append(J)
        if J < best_criterion:
            best_criterion, best_params = J, p.copy()
        return J

    options = {"disp": not silent}
    if method == "L-BFGS-B":
        options.update(dict(maxcor=20, ftol=1e-6, gtol=1e-5, maxiter=1000, maxls=40))
    elif method == "SLSQP":
        options.update(dict(ftol=1e-6, maxiter=1000))
    else:
        raise ValueError("Optimization method not implemented.")

    r = minimize(
        criterion_with_history,
        np.asarray(p0, dtype=float),
        method=method,
        jac=gradient,
        bounds=bounds,
        options=options,
    )

    # ensure returning best seen
    if r.fun > best_criterion:
        r.x, r.fun, r.best_value_returned = best_params, best_criterion, False
    else:
        r.best_value_returned = True
    r.history_params = history_params
    r.history_criterion = history_criterion
    r.total_time = time.time() - tic
    return r.x, r


def select_parameters_with_scipy(gp, method="L-BFGS-B", bounds_delta=10.0, silent=True, info=False):
    """Maximum-likelihood selection of the covariance log-hyperparameters.

    Parameters
    ----------
    gp : gpatlas.core.GaussianProcess
        Model with training data. Its covariance is updated in place.
    method : {"L-BFGS-B", "SLSQP"}, optional
    bounds_delta : float, optional
        Half-width of the search box around the current parameters.
    silent : bool, optional
    info : bool, optional
        If True, also return the SciPy result.

    Returns
    -------
    params : numpy.ndarray
        Selected log-hyperparameters.
    r : scipy.optimize.OptimizeResult
        Only if `info` is True.
    """
    cf = gp.covariance
    p0 = gnp.to_np(cf.get_log_hyper())

    def criterion(p):
        cf.set_log_hyper(p)
        return -gp.log_likelihood()

    def gradient(p):
        cf.set_log_hyper(p)
        return _evaluate_or_inf(lambda: -gnp.to_np(gp.log_likelihood_gradient()), np.zeros_like(p))

    p_opt, r = autoselect_parameters(
        p0, criterion, gradient, bounds_delta=bounds_delta, method=method, silent=silent
    )
    cf.set_log_hyper(p_opt)
    gp.compute()
    logger.info(
        "select_parameters_with_scipy: lik=%f params=%s (%d evaluations, %.4fs)",
        -r.fun,
        list(p_opt),
        len(r.history_criterion),
        r.total_time,
    )
    return (p_opt, r) if info else p_opt
