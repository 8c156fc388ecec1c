"""
Grow an atlas of charts on the GP implicit surface of a half sphere

Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
Copyright (c) 2022-2026, CentraleSupelec
License: GPLv3 (see LICENSE)
"""

import gpatlas.num as gnp
import gpatlas as ga
from gpatlas.surface import SurfaceModel


def generate_data():
    """
    Object point cloud: the lower half of a sphere of radius 0.06.

    Returns
    -------
    numpy.ndarray, shape (m, 3)
    """
    radius = 0.06
    return ga.misc.designs.sphere(radius, ang_div=24, lin_div=20, end_lin=radius / 2)


def grow(atlas, n_steps):
    """Expand the atlas from its last chart until a solution is met."""
    current = atlas.count_nodes() - 1
    for _ in range(n_steps):
        if atlas.is_solution(current):
            print(f"chart {current} is a solution (variance {atlas.get_node(current).variance:.3e})")
            break
        center = atlas.get_next_state(current)
        new = atlas.create_node(center)
        atlas.connect(current, new)
        current = new
    return current


def main():
    cloud = generate_data()

    # default model: noise-free thin-plate GP, length from the training box
    model = SurfaceModel()
    if not model.start(cloud, n_charts=20, step=0.005, tol=1e-3):
        raise SystemExit("could not build the surface model")
    print(model.gp)

    gnp.set_seed(0)
    last = grow(model.atlas, n_steps=30)
    print(f"atlas: {model.atlas.count_nodes()} charts, last chart {last}")

    # Visualization
    print('\nVisualization')
    print('-------------')
    fig = ga.misc.plotutils.Figure(isinteractive=True)
    ga.misc.plotutils.plot_atlas(model.atlas, ax=fig.ax, points=cloud)
    fig.show()


if __name__ == '__main__':
    main()
