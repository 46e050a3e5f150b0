import math

import numpy as np
from delaunay2d.datastructures import Site
from delaunay2d.geometry import (
    breakpoint_x,
    circumcircle,
    orientation,
    parabola_y,
    point_in_polygon,
    segment_intersection,
    triangle_area,
    triangle_centroid,
    triangle_lengths,
)


def test_orientation_sign():
    assert orientation((0, 0), (1, 0), (0, 1)) > 0
    assert orientation((0, 0), (0, 1), (1, 0)) < 0
    assert orientation((0, 0), (1, 1), (2, 2)) == 0


def test_circumcircle_right_triangle():
    cx, cy, r = circumcircle((0.0, 0.0), (2.0, 0.0), (0.0, 2.0))
    assert np.isclose(cx, 1.0)
    assert np.isclose(cy, 1.0)
    assert np.isclose(r, math.sqrt(2.0))


def test_circumcircle_collinear_is_none():
    assert circumcircle((0.0, 0.0), (1.0, 1.0), (2.0, 2.0)) is None


def test_breakpoint_equal_height_is_midpoint():
    assert breakpoint_x((-1.0, 3.0), (5.0, 3.0), 0.0) == 2.0


def test_breakpoint_on_both_parabolas():
    left, right, sweep = (0.0, 2.0), (3.0, 1.0), 0.0
    x = breakpoint_x(left, right, sweep)

    assert np.isclose(parabola_y(left, x, sweep), parabola_y(right, x, sweep))
    # the left arc is the lower one just left of the breakpoint
    assert parabola_y(left, x - 0.1, sweep) < parabola_y(right, x - 0.1, sweep)
    assert parabola_y(left, x + 0.1, sweep) > parabola_y(right, x + 0.1, sweep)


def test_breakpoint_focus_on_sweep_line():
    assert breakpoint_x((0.0, 2.0), (0.7, 1.0), 1.0) == 0.7
    assert breakpoint_x((0.3, 1.0), (0.0, 2.0), 1.0) == 0.3


def test_segment_intersection_crossing():
    p = segment_intersection((0, 0), (2, 2), (0, 2), (2, 0))
    assert np.allclose(p, (1.0, 1.0))


def test_segment_intersection_rejects_near_endpoint():
    # t = 0.005 along the first segment, inside the 1% band
    assert segment_intersection((0, 0), (2, 0), (0.01, -1), (0.01, 1)) is None
    assert segment_intersection((0, 0), (2, 0), (0.01, -1), (0.01, 1), band=0.0) is not None


def test_segment_intersection_parallel_and_disjoint():
    assert segment_intersection((0, 0), (1, 0), (0, 1), (1, 1)) is None
    assert segment_intersection((0, 0), (1, 0), (2, -1), (2, 1)) is None


def test_point_in_polygon_square():
    ring = [(0, 0), (1, 0), (1, 1), (0, 1)]
    assert point_in_polygon((0.5, 0.5), ring)
    assert not point_in_polygon((1.5, 0.5), ring)
    assert not point_in_polygon((0.5, -0.2), ring)


def test_point_in_polygon_tolerance_on_right_edge():
    ring = [(0, 0), (1, 0), (1, 1), (0, 1)]
    assert point_in_polygon((1.0005, 0.5), ring)
    assert not point_in_polygon((1.0005, 0.5), ring, tolerance=0.0)


def test_point_in_polygon_concave():
    ring = [(0, 0), (2, 0), (2, 2), (1, 2), (1, 1), (0, 1)]
    assert point_in_polygon((0.5, 0.5), ring)
    assert point_in_polygon((1.5, 1.5), ring)
    assert not point_in_polygon((0.5, 1.5), ring)


def test_triangle_helpers():
    tri = (Site(0.0, 0.0, 0), Site(3.0, 0.0, 1), Site(0.0, 4.0, 2))
    assert triangle_lengths(tri) == (3.0, 4.0, 5.0)
    assert np.allclose(triangle_centroid(tri), (1.0, 4.0 / 3.0))
    assert triangle_area(tri) == 6.0
