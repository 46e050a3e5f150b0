import math
from collections import defaultdict
from typing import List, Sequence, Union

import numpy as np
import structlog

from .beachline import Beachline
from .datastructures import Site, Triangulation, TriangulationEdge
from .events import CircleQueue, SiteQueue
from .geometry import circumcircle, orientation

logger = structlog.get_logger()

# triples flatter than this (relative cross product) never schedule a circle event
COLLINEAR_EPS = 1e-10


def _as_sites(sites) -> List[Site]:
    if isinstance(sites, np.ndarray):
        arr = np.asarray(sites, dtype=np.float64)
        if arr.size == 0:
            return []
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError("sites must be (N,2)")
        return [Site(float(x), float(y), i) for i, (x, y) in enumerate(arr)]

    out = []
    for i, s in enumerate(sites):
        if isinstance(s, Site):
            out.append(s)
        elif len(s) == 2:
            out.append(Site(float(s[0]), float(s[1]), i))
        else:
            raise ValueError(f"Cannot interpret {s!r} as a site")
    return out


class VoronoiGenerator:
    """
    Fortune's sweep producing the Voronoi edges and the dual Delaunay
    triangulation of a set of sites.

    Every call to `parse` builds its own beachline and queues; nothing is
    shared between runs.
    """

    def __init__(self):
        self._reset([])

    def _reset(self, sites: List[Site]) -> None:
        self._sites = sites
        self._edges: List[TriangulationEdge] = []
        self._edge_keys = set()
        self._triangles = []
        self._sweep = 0.0
        self._circles = CircleQueue()
        self._beachline = None

    @property
    def sweep_line(self) -> float:
        return self._sweep

    def add_triangulation_edge(self, a: Site, b: Site) -> None:
        key = frozenset((a.xy, b.xy))
        if a.same_position(b) or key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self._edges.append(TriangulationEdge(a, b))

    def parse(self, sites: Union[Sequence[Site], np.ndarray]) -> Triangulation:
        sites = _as_sites(sites)
        self._reset(sites)

        if not sites:
            return Triangulation(sites=[])

        ys = [s.y for s in sites]
        xs = [s.x for s in sites]
        min_y, max_y = min(ys), max(ys)
        span = max(max(xs) - min(xs), max_y - min_y, 1.0)

        queue = SiteQueue(sites)
        if len(queue) < len(sites):
            logger.debug("Dropped duplicate sites", dropped=len(sites) - len(queue))

        self._beachline = Beachline(self.add_triangulation_edge, ceiling=max_y + span)

        while len(queue) or len(self._circles):
            site_y = queue.peek_y()
            circle_y = self._circles.peek_y()

            if circle_y is None or (site_y is not None and site_y >= circle_y):
                site = queue.pop()
                self._set_sweep(site.y)
                self._process_site(site)
            else:
                event = self._circles.pop()
                if not self._beachline.is_current(event):
                    continue
                self._set_sweep(event.y)
                self._process_circle(event)

        voronoi_edges = self._beachline.finish(min_y - 2.0 * span)

        neighbors = defaultdict(list)
        for e in self._edges:
            neighbors[e.first.addr].append(e.second)
            neighbors[e.second.addr].append(e.first)

        result = Triangulation(
            sites=list(sites),
            voronoi_edges=list(voronoi_edges),
            edges=list(self._edges),
            triangles=list(self._triangles),
            neighbors=dict(neighbors),
            min_y=min_y,
            max_y=max_y,
        )
        # transient sweep structures do not outlive the run
        self._beachline = None
        self._circles = CircleQueue()
        return result

    def _set_sweep(self, y: float) -> None:
        self._sweep = y
        self._beachline.sweep = y

    def _process_site(self, site: Site) -> None:
        bl = self._beachline
        new = bl.insert_arc(site)
        left, right = bl.neighbors(new)
        if left is not None:
            self._add_circle_event(left)
        if right is not None:
            self._add_circle_event(right)

    def _process_circle(self, event) -> None:
        bl = self._beachline
        left, right = bl.neighbors(event.arc)
        self._triangles.append((bl.arcs[left].site, bl.arcs[event.arc].site, bl.arcs[right].site))

        left, right = bl.remove_arc(event.arc, event.center)
        self._add_circle_event(left)
        self._add_circle_event(right)

    def _add_circle_event(self, h: int) -> None:
        bl = self._beachline
        left, right = bl.neighbors(h)
        if left is None or right is None:
            return

        a = bl.arcs[left].site
        b = bl.arcs[h].site
        c = bl.arcs[right].site
        if a.same_position(c):
            return

        # breakpoints only converge for a clockwise turn
        scale = math.hypot(b.x - a.x, b.y - a.y) * math.hypot(c.x - b.x, c.y - b.y)
        if orientation(a.xy, b.xy, c.xy) >= -COLLINEAR_EPS * scale:
            return

        circle = circumcircle(a.xy, b.xy, c.xy)
        if circle is None:
            return
        cx, cy, r = circle
        y = cy - r
        if y > self._sweep + 1e-9 * (1.0 + abs(self._sweep)):
            return

        self._circles.push(min(y, self._sweep), (cx, cy), h, bl.arcs[h].generation)


def compute_triangulation(sites: Union[Sequence[Site], np.ndarray]) -> Triangulation:
    """
    Delaunay triangulation (plus Voronoi edges) of `sites` via Fortune's sweep.

    sites: list of Site, list of (x, y) pairs, or (N,2) array; for plain
    coordinates the row index becomes the site address.
    """
    return VoronoiGenerator().parse(sites)
