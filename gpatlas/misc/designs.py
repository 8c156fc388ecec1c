# gpatlas/misc/designs.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Point designs in R^3: grids and spheres.
"""
import numpy as np
from scipy.spatial.distance import pdist


def mindist(sample):
    """
    Calculate the minimum distance (separation) between any pair of points in the sample.

    Parameters
    ----------
    sample : numpy.ndarray
        Array of points in the sample.

    Returns
    -------
    float
        Minimum distance between any pair of points in the sample.
    """
    return np.min(pdist(sample))


def regulargrid(dim, n, box):
    """
    Build a regular grid in the dim-dimensional hyperrectangle.

    If n is an integer, a grid of size n^dim is built;

    If n is a list of length dim, a grid of size prod(n) is built,
    with n_i points on coordinate i.

    Parameters
    ----------
    dim : int
        Number of dimensions.
    n : int or list
        Number of points per dimension or a list with the number of points per dimension.
    box : list of lists
        List of lists containing the lower and upper bounds of the box.

    Returns
    -------
    x : numpy.ndarray, shape (prod(n), dim)
        Regular grid, last coordinate varying fastest.
    """
    if not isinstance(n, (list, tuple)):
        n = [n for i in range(dim)]

    xmin, xmax = box[0], box[1]
    levels = [np.linspace(xmin[i], xmax[i], n[i]) for i in range(dim)]
    Xv = np.meshgrid(*levels, indexing="ij")
    return np.stack([v.reshape(-1) for v in Xv], axis=1)


def regulargrid_step(box, step):
    """Regular grid with spacing `step` (at least 2 levels per axis)."""
    xmin, xmax = np.asarray(box[0], dtype=float), np.asarray(box[1], dtype=float)
    n = [max(int(np.floor((xmax[i] - xmin[i]) / step)) + 1, 2) for i in range(xmin.shape[0])]
    return regulargrid(xmin.shape[0], n, box)


def sphere(radius, center=(0.0, 0.0, 0.0), ang_div=8, lin_div=6, end_lin=None):
    """
    Latitude/longitude sphere.

    The vertical diameter is cut into `lin_div` slices of height
    ``h = 2 r / lin_div``; on each slice, at height
    ``z = -r + (k + 1/2) h``, `ang_div` points are evenly spaced on the
    circle of radius ``sqrt(r^2 - z^2)``.

    Parameters
    ----------
    radius : float
    center : array_like, shape (3,)
    ang_div : int
        Points per slice.
    lin_div : int
        Number of slices.
    end_lin : float, optional
        Keep only slices with ``z < end_lin``. ``radius / 2`` gives the
        truncated sphere used for partial views.

    Returns
    -------
    numpy.ndarray, shape (ang_div * k, 3)
    """
    end_lin = radius if end_lin is None else end_lin
    lin_step = 2.0 * radius / lin_div
    lins = -radius + (np.arange(lin_div) + 0.5) * lin_step
    lins = lins[lins < end_lin]
    angles = np.arange(ang_div) * 2.0 * np.pi / ang_div
    rho = np.sqrt(radius**2 - lins**2)
    x = np.outer(rho, np.cos(angles))
    y = np.outer(rho, np.sin(angles))
    z = np.outer(lins, np.ones(ang_div))
    return np.stack([x.reshape(-1), y.reshape(-1), z.reshape(-1)], axis=1) + np.asarray(center)


def fibonacci_sphere(n, radius=1.0, center=(0.0, 0.0, 0.0)):
    """
    Nearly uniform points on a sphere (golden-angle spiral).

    Parameters
    ----------
    n : int
    radius : float
    center : array_like, shape (3,)

    Returns
    -------
    numpy.ndarray, shape (n, 3)
    """
    k = np.arange(n) + 0.5
    z = 1.0 - 2.0 * k / n
    rho = np.sqrt(1.0 - z**2)
    theta = np.pi * (3.0 - np.sqrt(5.0)) * k
    points = np.stack([rho * np.cos(theta), rho * np.sin(theta), z], axis=1)
    return radius * points + np.asarray(center)
