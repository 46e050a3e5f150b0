import math

import numpy as np
from shapely.geometry import Polygon
from shapely.ops import unary_union
from delaunay2d.voronoi import compute_triangulation
from polymeasure.config import MeasureConfig
from polymeasure.refinement import check_sleekness, check_terrain, refine_mesh
from polymeasure.surface import SurfaceModel, TangentFrame

R = 1.0e6


def _surface(height_fn, extent=1000.0):
    frame = TangentFrame(
        center=np.array([0.0, 0.0, R]),
        normal=np.array([0.0, 0.0, 1.0]),
        east=np.array([1.0, 0.0, 0.0]),
        north=np.array([0.0, 1.0, 0.0]),
        radius=R,
        extent=extent,
    )
    return SurfaceModel(frame, height_fn)


def _bump(lng, lat):
    # plane coordinates are roughly 1000x the angles
    x, y = lng * 1000.0, lat * 1000.0
    return 100.0 + 50.0 * math.exp(-4.0 * (x * x + y * y))


def _flat(lng, lat):
    return 0.0


def _coarse(ring):
    return compute_triangulation(ring).triangles


def _polygons(triangles):
    return [Polygon([s.xy for s in t]) for t in triangles]


SQUARE = [(-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)]


def test_sleekness_accepts_equilateral():
    pts = [(0.0, 0.0), (1.0, 0.0), (0.5, math.sqrt(3) / 2)]
    added, high_churn = check_sleekness(pts)
    assert added == []
    assert not high_churn


def test_sleekness_splits_flat_triangle():
    added, high_churn = check_sleekness([(0.0, 0.0), (10.0, 0.0), (5.0, 0.1)])
    assert added == [(5.0, 0.0)]
    assert not high_churn


def test_sleekness_splits_long_edges_of_sharp_triangle():
    added, _ = check_sleekness([(0.0, 0.0), (1.0, 0.0), (0.5, 10.0)])
    assert sorted(added) == [(0.25, 5.0), (0.75, 5.0)]


def test_terrain_constant_height_needs_nothing():
    surface = _surface(lambda lng, lat: 100.0)
    assert check_terrain((-0.5, 0.0), (0.5, 0.0), surface) == []


def test_terrain_bump_adds_midpoint():
    surface = _surface(_bump)
    pts = check_terrain((-0.5, 0.0), (0.5, 0.0), surface)
    assert len(pts) == 1
    assert np.allclose(pts[0], (0.0, 0.0))


def test_terrain_probes_thirds_when_midpoint_agrees():
    # two humps: the midpoint sits in the trough, level with the ends
    def double(lng, lat):
        x = lng * 1000.0
        return 100.0 + 50.0 * math.sin(2.0 * math.pi * x) ** 2

    surface = _surface(double)
    h_end = surface.height_at((-0.5, 0.0))
    assert np.isclose(surface.height_at((0.0, 0.0)), h_end, rtol=1e-6)

    pts = check_terrain((-0.5, 0.0), (0.5, 0.0), surface)
    assert len(pts) == 2
    assert np.allclose(sorted(p[0] for p in pts), [-1.0 / 6.0, 1.0 / 6.0])


def test_flat_square_is_left_alone():
    result = refine_mesh(_coarse(SQUARE), SQUARE, _surface(_flat))

    assert len(result.triangles) == 2
    assert result.attempts == 1
    assert result.fine
    assert result.point_count == 6
    assert result.history == [6, 6]


def test_bump_refines_and_keeps_coverage():
    config = MeasureConfig(max_points=300)
    result = refine_mesh(_coarse(SQUARE), SQUARE, _surface(_bump), config)

    assert result.point_count > 6
    assert 1 <= result.attempts <= config.max_attempts
    assert all(a <= b for a, b in zip(result.history, result.history[1:]))

    polys = _polygons(result.triangles)
    assert math.isclose(sum(p.area for p in polys), 1.0, rel_tol=1e-9)
    assert math.isclose(unary_union(polys).area, 1.0, rel_tol=1e-9)


def test_point_and_pass_limits():
    config = MeasureConfig(max_points=20, max_attempts=3)
    result = refine_mesh(_coarse(SQUARE), SQUARE, _surface(_bump), config)

    assert result.attempts <= 3
    # a pass only starts below the cap and never adds past it
    assert all(n < config.max_points for n in result.history[:-1])
    assert all(n <= config.max_points for n in result.history)
    assert result.point_count == result.history[-1]
    assert result.point_count <= config.max_points


def _star(n, seed):
    rng = np.random.default_rng(seed)
    angles = np.sort(rng.uniform(0.0, 2.0 * math.pi, size=n))
    radii = rng.uniform(0.2, 0.5, size=n)
    return [(float(r * math.cos(a)), float(r * math.sin(a))) for r, a in zip(radii, angles)]


def test_flat_thin_rectangle_takes_one_pass():
    rect = [(-0.5, -0.05), (0.5, -0.05), (0.5, 0.05), (-0.5, 0.05)]
    result = refine_mesh(_coarse(rect), rect, _surface(_flat))

    # sliver midpoints are added, but they do not ask for another pass
    assert result.point_count > 6
    assert result.attempts == 1
    assert result.fine
    assert math.isclose(sum(p.area for p in _polygons(result.triangles)), 0.1, rel_tol=1e-9)


def test_flat_irregular_polygon_stays_within_budget():
    ring = _star(11, seed=19)
    coarse = _coarse(ring)

    result = refine_mesh(coarse, ring, _surface(_flat))
    assert result.attempts == 1
    assert result.point_count <= MeasureConfig().max_points

    start = 3 * len(result.cells)
    config = MeasureConfig(max_points=start + 4)
    capped = refine_mesh(coarse, ring, _surface(_flat), config)
    assert capped.point_count <= config.max_points
    assert capped.history[0] == start


def test_cells_outside_concave_ring_are_dropped():
    ring = [(0.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0), (1.0, 2.0), (0.0, 2.0)]
    ring = [(0.25 * x - 0.25, 0.25 * y - 0.25) for x, y in ring]

    coarse = _coarse(ring)
    result = refine_mesh(coarse, ring, _surface(_flat))

    assert len(result.cells) == len(coarse) - 1
    assert math.isclose(sum(p.area for p in _polygons(result.triangles)), 3 * 0.0625, rel_tol=1e-9)
    assert Polygon(ring).buffer(1e-9).contains(unary_union(_polygons(result.triangles)))
