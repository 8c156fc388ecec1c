# gpatlas/misc/plotutils.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Matplotlib views of atlases and level-set samples.

matplotlib is imported when a plot is requested, so that the rest of
gpatlas runs without a display backend.
"""
import sys
import numpy as np


class Figure:
    """3-D figure manager.

    Parameters
    ----------
    isinteractive : bool
        Switch matplotlib to interactive mode when running in an
        interpreter.
    **kargs
        Passed to ``matplotlib.pyplot.figure``.
    """

    def __init__(self, isinteractive=True, **kargs):
        import matplotlib.pyplot as plt
        from matplotlib import interactive

        self.interpreter = bool(getattr(sys, "ps1", None)) or bool(sys.flags.interactive)
        if isinteractive and self.interpreter:
            interactive(True)
        self.fig = plt.figure(**kargs)
        self.ax = self.fig.add_subplot(1, 1, 1, projection="3d")

    def show(self, block=None):
        import matplotlib.pyplot as plt

        plt.show(block=block)


def chart_outline(chart, n=32):
    """Closed polyline of the chart disc boundary, shape (n + 1, 3)."""
    theta = np.linspace(0.0, 2.0 * np.pi, n + 1)
    r = chart.radius
    return chart.to_world(r * np.cos(theta), r * np.sin(theta))


def plot_atlas(atlas, ax=None, points=None, normal_length=None, show_edges=True):
    """Draw the charts of an atlas.

    Parameters
    ----------
    atlas : gpatlas.atlas.AtlasBase
    ax : mpl_toolkits.mplot3d.Axes3D, optional
        Created if omitted.
    points : array_like, shape (m, 3), optional
        Extra points (e.g. level-set samples) drawn as a scatter.
    normal_length : float, optional
        Length of the normal arrows; defaults to the chart radius.
    show_edges : bool
        Draw the adjacency as segments between chart centers.

    Returns
    -------
    ax
    """
    if ax is None:
        ax = Figure().ax
    if points is not None:
        points = np.asarray(points)
        ax.scatter(points[:, 0], points[:, 1], points[:, 2], s=1, c="0.6")
    for chart in atlas.get_nodes():
        outline = chart_outline(chart)
        ax.plot(outline[:, 0], outline[:, 1], outline[:, 2], color="C0")
        c = chart.center
        n = chart.normal * (chart.radius if normal_length is None else normal_length)
        ax.quiver(c[0], c[1], c[2], n[0], n[1], n[2], color="C3")
        if show_edges:
            for other in atlas.get_connections(chart.id):
                if other > chart.id:
                    d = atlas.nodes[other].center
                    ax.plot([c[0], d[0]], [c[1], d[1]], [c[2], d[2]], color="C2")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    return ax
