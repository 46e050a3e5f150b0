import math
from typing import Optional, Sequence, Tuple

Point2 = Tuple[float, float]


def orientation(a: Point2, b: Point2, c: Point2) -> float:
    """
    Signed cross product (b - a) x (c - a).
    > 0 counter-clockwise, < 0 clockwise, 0 collinear.
    """
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def circumcircle(a: Point2, b: Point2, c: Point2) -> Optional[Tuple[float, float, float]]:
    """
    Center and radius of the circle through a, b, c; None for collinear input.
    """
    ax, ay = a
    bx, by = b
    cx, cy = c
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if d == 0.0:
        return None

    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return ux, uy, math.hypot(ax - ux, ay - uy)


def parabola_y(focus: Point2, x: float, sweep: float) -> float:
    """
    Height of the arc of `focus` above x for a horizontal sweep line at y=sweep.
    """
    fx, fy = focus
    if fy == sweep:
        return fy
    return ((x - fx) ** 2 + fy * fy - sweep * sweep) / (2.0 * (fy - sweep))


def breakpoint_x(left: Point2, right: Point2, sweep: float) -> float:
    """
    x of the intersection between the arc of `left` and the arc of `right`
    (in that order along the beachline) for the given sweep line.

    The sweep moves towards -y; the beachline is the lower envelope of the arcs,
    so the breakpoint is the root where (left arc - right arc) changes sign from
    negative to positive.
    """
    lx, ly = left
    rx, ry = right

    if ly == ry:
        return 0.5 * (lx + rx)
    # a focus lying on the sweep line is a vertical ray
    if ly == sweep:
        return lx
    if ry == sweep:
        return rx

    d1 = 1.0 / (2.0 * (ly - sweep))
    d2 = 1.0 / (2.0 * (ry - sweep))
    a = d1 - d2
    b = 2.0 * (rx * d2 - lx * d1)
    c = (lx * lx + ly * ly - sweep * sweep) * d1 - (rx * rx + ry * ry - sweep * sweep) * d2

    disc = max(b * b - 4.0 * a * c, 0.0)
    return (-b + math.sqrt(disc)) / (2.0 * a)


def segment_intersection(
    p1: Point2, p2: Point2, p3: Point2, p4: Point2, band: float = 0.01
) -> Optional[Point2]:
    """
    Proper intersection of segments p1-p2 and p3-p4.

    Intersections closer than `band` (relative, measured along each segment) to
    any of the four endpoints are rejected as numerically unreliable.
    """
    d1x, d1y = p2[0] - p1[0], p2[1] - p1[1]
    d2x, d2y = p4[0] - p3[0], p4[1] - p3[1]

    denom = d1x * d2y - d1y * d2x
    scale = math.hypot(d1x, d1y) * math.hypot(d2x, d2y)
    if scale == 0.0 or abs(denom) <= 1e-12 * scale:
        return None

    wx, wy = p3[0] - p1[0], p3[1] - p1[1]
    t = (wx * d2y - wy * d2x) / denom
    u = (wx * d1y - wy * d1x) / denom

    if t <= band or t >= 1.0 - band or u <= band or u >= 1.0 - band:
        return None

    return p1[0] + t * d1x, p1[1] + t * d1y


def point_in_polygon(point: Point2, ring: Sequence[Point2], tolerance: float = 1e-3) -> bool:
    """
    Ray-crossing test towards +x. A crossing that lies within `tolerance` to the
    left of the point still counts as being on the ray.
    """
    px, py = point
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross or abs(px - x_cross) < tolerance:
                inside = not inside
        j = i
    return inside


def triangle_lengths(tri) -> Tuple[float, float, float]:
    """
    Edge lengths |s1 s2|, |s1 s3|, |s2 s3| of a triangle of sites.
    """
    s1, s2, s3 = tri
    return (
        math.hypot(s1.x - s2.x, s1.y - s2.y),
        math.hypot(s1.x - s3.x, s1.y - s3.y),
        math.hypot(s2.x - s3.x, s2.y - s3.y),
    )


def triangle_centroid(tri) -> Point2:
    s1, s2, s3 = tri
    return (s1.x + s2.x + s3.x) / 3.0, (s1.y + s2.y + s3.y) / 3.0


def triangle_area(tri) -> float:
    s1, s2, s3 = tri
    return 0.5 * abs(orientation(s1.xy, s2.xy, s3.xy))
