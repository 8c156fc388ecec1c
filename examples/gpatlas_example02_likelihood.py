"""
Select the covariance parameters of a GP implicit surface by maximum
likelihood (RProp and SciPy) and plot a slice of the posterior mean

Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
Copyright (c) 2022-2026, CentraleSupelec
License: GPLv3 (see LICENSE)
"""

import numpy as np
import matplotlib.pyplot as plt
import gpatlas.num as gnp
import gpatlas as ga
from gpatlas.kernel import RProp, SquaredExponential, select_parameters_with_scipy
from gpatlas.surface import training_set_from_cloud


def generate_data():
    cloud = ga.misc.designs.fibonacci_sphere(60, radius=0.06)
    return training_set_from_cloud(cloud)


def slice_values(gp, half_width=0.2, n=81):
    """Posterior mean and standard deviation on the plane z = 0."""
    t = np.linspace(-half_width, half_width, n)
    xx, yy = np.meshgrid(t, t)
    points = np.stack([xx.ravel(), yy.ravel(), np.zeros(n * n)], axis=1)
    values, variances = gp.evaluate(points)
    shape = xx.shape
    return xx, yy, gnp.to_np(values).reshape(shape), np.sqrt(gnp.to_np(variances)).reshape(shape)


def main():
    training = generate_data()

    gp = ga.GaussianProcess(SquaredExponential(length=0.2, sigma=1.0), noise=1e-4)
    gp.set(training)
    print(f"initial log-likelihood: {gp.log_likelihood():.3f}")

    best_params, best = RProp().find(gp, verbose=True)
    print(f"RProp: log-likelihood {best:.3f}, length {np.exp(best_params[0]):.4f}")

    params = select_parameters_with_scipy(gp)
    print(f"SciPy: log-likelihood {gp.log_likelihood():.3f}, length {np.exp(params[0]):.4f}")

    xx, yy, mean, std = slice_values(gp)
    fig, axes = plt.subplots(1, 2, figsize=(10, 4))
    c0 = axes[0].contourf(xx, yy, mean, levels=30)
    axes[0].contour(xx, yy, mean, levels=[0.0], colors="k")
    axes[0].set_title("posterior mean, z = 0")
    fig.colorbar(c0, ax=axes[0])
    c1 = axes[1].contourf(xx, yy, std, levels=30)
    axes[1].set_title("posterior std, z = 0")
    fig.colorbar(c1, ax=axes[1])
    for ax in axes:
        ax.set_aspect("equal")
    plt.show()


if __name__ == '__main__':
    main()
