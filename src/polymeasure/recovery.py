from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from delaunay2d.datastructures import Site, Triangulation
from delaunay2d.geometry import segment_intersection
from delaunay2d.voronoi import compute_triangulation

from .config import MeasureConfig

logger = structlog.get_logger()

Point2 = Tuple[float, float]


@dataclass
class RecoveryResult:
    ring: List[Point2]
    triangulation: Triangulation
    conforming: bool
    attempts: int
    missing: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def triangles(self):
        return self.triangulation.triangles


def ring_sites(ring: Sequence[Point2]) -> List[Site]:
    return [Site(float(x), float(y), i) for i, (x, y) in enumerate(ring)]


def missing_boundary_edges(n: int, triangulation: Triangulation) -> List[Tuple[int, int]]:
    """
    Ring edges (i, i+1 mod n) that are not edges of the triangulation.
    """
    present = {e.addrs for e in triangulation.edges}
    return [(i, (i + 1) % n) for i in range(n) if frozenset((i, (i + 1) % n)) not in present]


def edge_crossings(
    p1: Point2, p2: Point2, triangulation: Triangulation, band: float
) -> List[Point2]:
    """
    Points where triangulation edges cut the segment p1-p2, ordered from p1 to p2.
    """
    dx, dy = p2[0] - p1[0], p2[1] - p1[1]
    length2 = dx * dx + dy * dy
    if length2 == 0.0:
        return []

    hits = []
    for e in triangulation.edges:
        pt = segment_intersection(p1, p2, e.first.xy, e.second.xy, band)
        if pt is not None:
            t = ((pt[0] - p1[0]) * dx + (pt[1] - p1[1]) * dy) / length2
            hits.append((t, pt))
    hits.sort()

    out: List[Point2] = []
    last_t = None
    for t, pt in hits:
        if last_t is not None and t - last_t < 1e-12:
            continue
        out.append(pt)
        last_t = t
    return out


def insert_crossings(ring: Sequence[Point2], crossings: Dict[int, List[Point2]]) -> List[Point2]:
    """
    New ring with the crossings of edge i placed right after vertex i.
    Addresses are implied by position, so later vertices shift automatically.
    """
    out: List[Point2] = []
    for i, p in enumerate(ring):
        out.append(p)
        out.extend(crossings.get(i, ()))
    return out


def recover_boundary(ring: Sequence[Point2], config: Optional[MeasureConfig] = None) -> RecoveryResult:
    """
    Triangulate the ring and insert Steiner points on boundary edges that the
    Delaunay triangulation cut through, until every ring edge is present or
    `config.recovery_attempts` triangulations have been tried.

    Best effort: a non-conforming result is returned (with a warning) rather
    than raising.
    """
    config = config or MeasureConfig()
    ring = [(float(x), float(y)) for x, y in ring]
    triangulation = None
    missing: List[Tuple[int, int]] = []
    attempt = 0

    while attempt < config.recovery_attempts:
        attempt += 1
        triangulation = compute_triangulation(ring_sites(ring))
        missing = missing_boundary_edges(len(ring), triangulation)
        logger.debug("Boundary recovery pass", attempt=attempt, points=len(ring), missing=len(missing))

        if not missing:
            return RecoveryResult(ring=ring, triangulation=triangulation, conforming=True, attempts=attempt)

        if attempt == config.recovery_attempts:
            break

        crossings = {}
        for i, j in missing:
            hits = edge_crossings(ring[i], ring[j], triangulation, config.safety_band)
            if hits:
                crossings[i] = hits

        if not crossings:
            # nothing left to insert, another pass would reproduce the same mesh
            break

        ring = insert_crossings(ring, crossings)

    logger.warning(
        "Boundary edges missing from triangulation, area may be wrong for a "
        "concave or self-intersecting polygon",
        attempts=attempt,
        missing=len(missing),
    )
    return RecoveryResult(
        ring=ring, triangulation=triangulation, conforming=False, attempts=attempt, missing=missing
    )
