from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import structlog

from delaunay2d.datastructures import Site, Triangle, Triangulation, TriangulationEdge
from delaunay2d.geometry import point_in_polygon, triangle_centroid, triangle_lengths
from delaunay2d.voronoi import compute_triangulation

from .config import MeasureConfig
from .surface import SurfaceModel

logger = structlog.get_logger()

Point2 = Tuple[float, float]


@dataclass
class RefinementResult:
    triangles: List[Triangle] = field(default_factory=list)
    edges: List[TriangulationEdge] = field(default_factory=list)
    cells: List[List[Point2]] = field(default_factory=list)
    attempts: int = 0
    point_count: int = 0
    fine: bool = True
    history: List[int] = field(default_factory=list)


def _cell_triangulation(points: Sequence[Point2]) -> Triangulation:
    return compute_triangulation([Site(x, y, i) for i, (x, y) in enumerate(points)])


def _midpoint(a: Site, b: Site) -> Point2:
    return 0.5 * (a.x + b.x), 0.5 * (a.y + b.y)


def _within(points: List[Point2], budget: int) -> List[Point2]:
    return points[:max(budget, 0)]


def check_sleekness(points: Sequence[Point2], min_angle: float = 15.0) -> Tuple[List[Point2], bool]:
    """
    Midpoints for the edges of triangles with an angle below `min_angle`
    degrees (too sharp) or above 180 - 2*min_angle (too flat).

    Each edge is split at most once per call. Returns the new points and
    whether they outnumber the existing points by more than 1.5x, in which
    case the terrain check is skipped for this pass.
    """
    theta = math.radians(min_angle)
    s1 = 1.0 / math.sin(theta)
    s2 = 1.0 / math.cos(theta)

    tri = _cell_triangulation(points)
    seen = set()
    added: List[Point2] = []

    for t in tri.triangles:
        l12, l13, l23 = triangle_lengths(t)
        candidates = (
            (l12, l13, l23, t[0], t[1]),
            (l13, l12, l23, t[0], t[2]),
            (l23, l12, l13, t[1], t[2]),
        )
        for length, o1, o2, a, b in candidates:
            if o1 * s1 < length or o2 * s1 < length or o1 + o2 < length * s2:
                key = frozenset((a.addr, b.addr))
                if key in seen:
                    continue
                seen.add(key)
                added.append(_midpoint(a, b))

    return added, len(added) > 1.5 * len(points)


def _exceeds(h_true: float, h_lin: float, threshold: float) -> bool:
    if h_true == h_lin:
        return False
    if h_true == 0.0 or h_lin == 0.0:
        return True
    return h_true / h_lin > threshold or h_lin / h_true > threshold


def check_terrain(a: Point2, b: Point2, surface: SurfaceModel, threshold: float = 1.002) -> List[Point2]:
    """
    Sample the terrain along a-b and return the points where the true height
    departs from the linear interpolation by more than `threshold` (a ratio).

    The midpoint is tried first; only when it agrees are the thirds, quarters
    and fifths probed, stopping at the first subdivision that yields points.
    """
    h1 = surface.height_at(a)
    h2 = surface.height_at(b)

    mid = (0.5 * (a[0] + b[0]), 0.5 * (a[1] + b[1]))
    if _exceeds(surface.height_at(mid), 0.5 * (h1 + h2), threshold):
        return [mid]

    for j in (3, 4, 5):
        found = []
        for i in range(1, j):
            p = ((i * a[0] + (j - i) * b[0]) / j, (i * a[1] + (j - i) * b[1]) / j)
            h_lin = (i * h1 + (j - i) * h2) / j
            if _exceeds(surface.height_at(p), h_lin, threshold):
                found.append(p)
        if found:
            return found
    return []


def refine_mesh(
    triangles: Sequence[Triangle],
    ring: Sequence[Point2],
    surface: SurfaceModel,
    config: Optional[MeasureConfig] = None,
) -> RefinementResult:
    """
    Refine every coarse triangle whose centroid lies inside `ring`.

    Each kept triangle becomes a cell holding its own point set, re-triangulated
    every pass. A pass adds midpoints for badly shaped triangles and terrain
    samples for edges that misrepresent the height field. Only terrain samples
    ask for another pass, so refinement stops once the terrain is represented,
    after `max_attempts` passes, or when the total point count reaches
    `max_points`; no point is added beyond that cap. The returned triangles
    are those of the last pass.
    """
    config = config or MeasureConfig()
    cells: List[List[Point2]] = []
    for tri in triangles:
        if point_in_polygon(triangle_centroid(tri), ring, config.edge_tolerance):
            cells.append([s.xy for s in tri])

    point_count = sum(len(c) for c in cells)
    result = RefinementResult(cells=cells, point_count=point_count, history=[point_count])
    if not cells:
        return result

    # mesh of the unrefined cells, kept if no pass gets to run
    for cell in cells:
        tri = _cell_triangulation(cell)
        result.triangles.extend(tri.triangles)
        result.edges.extend(tri.edges)

    fine = False
    attempt = 0
    while not fine and attempt < config.max_attempts and point_count < config.max_points:
        attempt += 1
        fine = True
        pass_triangles: List[Triangle] = []
        pass_edges: List[TriangulationEdge] = []

        for cell in cells:
            # shape splits alone never keep the loop going
            added, high_churn = check_sleekness(cell, config.min_angle)
            added = _within(added, config.max_points - point_count)
            cell.extend(added)
            point_count += len(added)

            tri = _cell_triangulation(cell)

            if not high_churn and attempt < config.max_attempts:
                for e in tri.edges:
                    if point_count >= config.max_points:
                        break
                    extra = check_terrain(e.first.xy, e.second.xy, surface, config.height_diff)
                    extra = _within(extra, config.max_points - point_count)
                    if extra:
                        cell.extend(extra)
                        point_count += len(extra)
                        fine = False

            pass_triangles.extend(tri.triangles)
            pass_edges.extend(tri.edges)

        result.triangles = pass_triangles
        result.edges = pass_edges
        result.history.append(point_count)
        logger.debug("Refinement pass", attempt=attempt, points=point_count, fine=fine)

    result.attempts = attempt
    result.point_count = point_count
    result.fine = fine
    return result
