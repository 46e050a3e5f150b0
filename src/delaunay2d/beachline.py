from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .datastructures import Site, VoronoiEdge
from .events import CircleEvent
from .geometry import breakpoint_x, parabola_y


@dataclass
class Arc:
    """
    Parabolic arc of one site. Neighbours are breakpoint handles.
    `generation` moves on every time the arc's neighbourhood changes, which
    makes any circle event scheduled for an older generation stale.
    """
    site: Site
    left_break: Optional[int] = None
    right_break: Optional[int] = None
    generation: int = 0
    alive: bool = True


@dataclass
class Breakpoint:
    """
    Boundary between two adjacent arcs. Its position is never stored: it is
    recomputed from both foci and the current sweep line.
    """
    left_arc: int
    right_arc: int
    start: Tuple[float, float]
    alive: bool = True


class Beachline:
    """
    Ordered sequence of arcs (left to right) stored as handles into arenas.

    The order list plays the role of the breakpoint search tree: lookups
    bisect it with the dynamic breakpoint positions, insertions and removals
    happen at positions known from the arc structure.
    """

    def __init__(self, on_edge: Callable[[Site, Site], None], ceiling: float = 0.0):
        self.arcs: List[Arc] = []
        self.breakpoints: List[Breakpoint] = []
        self.sweep: float = 0.0
        self.ceiling = float(ceiling)
        self.finished_edges: List[VoronoiEdge] = []
        self._order: List[int] = []
        self._on_edge = on_edge

    def __len__(self) -> int:
        return len(self._order)

    def sites(self) -> List[Site]:
        return [self.arcs[h].site for h in self._order]

    # ---------- arena helpers ----------

    def _new_arc(self, site: Site) -> int:
        self.arcs.append(Arc(site=site))
        return len(self.arcs) - 1

    def _new_breakpoint(self, left: int, right: int, start: Tuple[float, float]) -> int:
        self.breakpoints.append(Breakpoint(left_arc=left, right_arc=right, start=start))
        h = len(self.breakpoints) - 1
        self.arcs[left].right_break = h
        self.arcs[right].left_break = h
        return h

    def _finish_breakpoint(self, h: int, end: Tuple[float, float]) -> None:
        bp = self.breakpoints[h]
        bp.alive = False
        self.finished_edges.append(VoronoiEdge(start=bp.start, end=end))

    # ---------- queries ----------

    def breakpoint_x(self, h: int) -> float:
        bp = self.breakpoints[h]
        return breakpoint_x(
            self.arcs[bp.left_arc].site.xy, self.arcs[bp.right_arc].site.xy, self.sweep
        )

    def breakpoint_position(self, h: int) -> Tuple[float, float]:
        bp = self.breakpoints[h]
        left = self.arcs[bp.left_arc].site
        right = self.arcs[bp.right_arc].site
        x = breakpoint_x(left.xy, right.xy, self.sweep)
        focus = right if left.y == self.sweep else left
        return x, parabola_y(focus.xy, x, self.sweep)

    def neighbors(self, h: int) -> Tuple[Optional[int], Optional[int]]:
        arc = self.arcs[h]
        left = self.breakpoints[arc.left_break].left_arc if arc.left_break is not None else None
        right = self.breakpoints[arc.right_break].right_arc if arc.right_break is not None else None
        return left, right

    def arc_under(self, x: float) -> int:
        """
        Position (in the arc order) of the arc directly above x.
        """
        lo, hi = 0, len(self._order) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            rb = self.arcs[self._order[mid]].right_break
            if x < self.breakpoint_x(rb):
                hi = mid
            else:
                lo = mid + 1
        return lo

    def is_current(self, event: CircleEvent) -> bool:
        arc = self.arcs[event.arc]
        return arc.alive and arc.generation == event.generation

    def invalidate(self, h: int) -> None:
        self.arcs[h].generation += 1

    # ---------- updates ----------

    def insert_arc(self, site: Site) -> int:
        """
        Site event: split the arc above `site` and return the new arc handle.
        """
        if not self._order:
            h = self._new_arc(site)
            self._order.append(h)
            return h

        pos = self.arc_under(site.x)
        broken = self._order[pos]
        self.invalidate(broken)
        old = self.arcs[broken]
        new = self._new_arc(site)

        if site.y == old.site.y:
            # both foci on the sweep line: one breakpoint on the vertical bisector
            start = (0.5 * (site.x + old.site.x), self.ceiling)
            if site.x < old.site.x:
                lb = old.left_break
                if lb is not None:
                    self.breakpoints[lb].right_arc = new
                    self.arcs[new].left_break = lb
                    self.invalidate(self.breakpoints[lb].left_arc)
                old.left_break = None
                self._new_breakpoint(new, broken, start)
                self._order.insert(pos, new)
            else:
                rb = old.right_break
                if rb is not None:
                    self.breakpoints[rb].left_arc = new
                    self.arcs[new].right_break = rb
                    self.invalidate(self.breakpoints[rb].right_arc)
                old.right_break = None
                self._new_breakpoint(broken, new, start)
                self._order.insert(pos + 1, new)
        else:
            copy = self._new_arc(old.site)
            start = (site.x, parabola_y(old.site.xy, site.x, self.sweep))

            rb = old.right_break
            if rb is not None:
                self.breakpoints[rb].left_arc = copy
                self.arcs[copy].right_break = rb
            old.right_break = None

            self._new_breakpoint(broken, new, start)
            self._new_breakpoint(new, copy, start)
            self._order[pos + 1:pos + 1] = [new, copy]

        self._on_edge(old.site, site)
        return new

    def remove_arc(self, h: int, vertex: Tuple[float, float]) -> Tuple[int, int]:
        """
        Circle event: drop arc `h`, close its two Voronoi edges at `vertex` and
        join the surviving neighbours with a fresh breakpoint.
        """
        arc = self.arcs[h]
        if arc.left_break is None or arc.right_break is None:
            raise ValueError("Only an arc with two neighbours can vanish")

        left, right = self.neighbors(h)

        self._finish_breakpoint(arc.left_break, vertex)
        self._finish_breakpoint(arc.right_break, vertex)

        self.invalidate(h)
        self.invalidate(left)
        self.invalidate(right)
        arc.alive = False

        self._new_breakpoint(left, right, vertex)
        self._order.remove(h)

        self._on_edge(self.arcs[left].site, self.arcs[right].site)
        return left, right

    def finish(self, sweep: float) -> List[VoronoiEdge]:
        """
        Extend every live breakpoint down to `sweep` and close its edge there.
        """
        self.sweep = sweep
        for h, bp in enumerate(self.breakpoints):
            if bp.alive:
                self._finish_breakpoint(h, self.breakpoint_position(h))
        return self.finished_edges
