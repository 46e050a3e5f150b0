import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from delaunay2d.visualize import plot_triangulation_uv
from delaunay2d.voronoi import compute_triangulation


def test_plot_triangulation_draws_triangles_and_ring():
    ring = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    t = compute_triangulation(ring)

    ax = plot_triangulation_uv(t.triangles, ring=ring)
    assert len(ax.lines) == t.triangle_count() + 1
    assert ax.get_title() == "Triangulation (UV)"
    plt.close(ax.figure)
