from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np

from delaunay2d.datastructures import Triangle

from .plane import BestFitPlane
from .surface import SurfaceModel


def _area(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return 0.5 * float(np.linalg.norm(np.cross(b - a, c - a)))


def find_crossing(
    pa: np.ndarray,
    pb: np.ndarray,
    hl_a: float,
    surface: SurfaceModel,
    plane: BestFitPlane,
    resolution: int = 32,
) -> Optional[np.ndarray]:
    """
    Walk the great-circle arc pa -> pb (sphere points) in `resolution` steps
    and return the sphere point where the terrain passes through the plane,
    linearly interpolated between the two samples that bracket it.
    """
    R = surface.radius
    above = hl_a > 0
    prev_p, prev_h = None, None
    for i in range(resolution + 1):
        f = i / resolution
        p = (1.0 - f) * pa + f * pb
        p = p / np.linalg.norm(p) * R
        hl = plane.height_above(p, surface.height_of(p), R)
        if (hl > 0) != above:
            if prev_p is None:
                return p
            return prev_p - (p - prev_p) * prev_h / (hl - prev_h)
        prev_p, prev_h = p, hl
    return None


def triangle_area_volume(
    tri: Triangle,
    surface: SurfaceModel,
    plane: BestFitPlane,
    resolution: int = 32,
) -> Tuple[float, float, float]:
    """
    (terrain area, volume above the plane, volume below the plane) of one
    plane-coordinate triangle. The volume below is returned as a negative number.

    When the terrain crosses the plane on exactly two edges the triangle is cut
    into a small triangle around the isolated vertex and a quadrilateral, each
    integrated with its own sign. Any other crossing pattern uses the mean
    height over the whole triangle.
    """
    R = surface.radius
    sphere = [surface.sphere_point(s.xy) for s in tri]
    heights = [surface.height_of(p) for p in sphere]

    terrain = [p * ((R + h) / R) for p, h in zip(sphere, heights)]
    area = _area(*terrain)

    hl = [plane.height_above(p, h, R) for p, h in zip(sphere, heights)]
    base = [plane.project_radially(p) for p in sphere]

    pos = neg = 0.0
    if all(h > 0 for h in hl) or all(h < 0 for h in hl):
        vol = _area(*base) * sum(hl) / 3.0
        if vol > 0:
            pos = vol
        else:
            neg = vol
        return area, pos, neg

    crossings = {}
    for i, j in ((0, 1), (0, 2), (1, 2)):
        if (hl[i] > 0) != (hl[j] > 0):
            crossings[(i, j)] = find_crossing(sphere[i], sphere[j], hl[i], surface, plane, resolution)

    split = None
    if len(crossings) == 2 and all(c is not None for c in crossings.values()):
        for iso, j, k in ((0, 1, 2), (1, 0, 2), (2, 0, 1)):
            if (min(iso, j), max(iso, j)) in crossings and (min(iso, k), max(iso, k)) in crossings:
                split = iso, j, k
                break

    if split is None:
        vol = _area(*base) * sum(hl) / 3.0
        if vol > 0:
            pos = vol
        else:
            neg = vol
        return area, pos, neg

    iso, j, k = split
    m_j = plane.project_radially(crossings[(min(iso, j), max(iso, j))])
    m_k = plane.project_radially(crossings[(min(iso, k), max(iso, k))])

    small = _area(base[iso], m_j, m_k) * hl[iso] / 3.0
    quad = (_area(m_j, base[j], base[k]) + _area(m_j, base[k], m_k)) * (hl[j] + hl[k]) / 4.0

    if hl[iso] > 0:
        pos, neg = small, quad
    else:
        pos, neg = quad, small
    return area, pos, neg


def integrate(
    triangles: Iterable[Triangle],
    surface: SurfaceModel,
    plane: BestFitPlane,
    resolution: int = 32,
) -> Tuple[float, float, float]:
    area = pos = neg = 0.0
    for tri in triangles:
        a, p, n = triangle_area_volume(tri, surface, plane, resolution)
        area += a
        pos += p
        neg += n
    return area, pos, neg
