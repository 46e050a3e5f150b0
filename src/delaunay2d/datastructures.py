from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple, Dict


@dataclass(frozen=True)
class Site:
    x: float
    y: float
    addr: int  # position in the boundary ring, or a synthetic index

    @property
    def xy(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def same_position(self, other: "Site") -> bool:
        return self.x == other.x and self.y == other.y


@dataclass(frozen=True)
class VoronoiEdge:
    start: Tuple[float, float]
    end: Tuple[float, float]


@dataclass(frozen=True)
class TriangulationEdge:
    first: Site
    second: Site

    @property
    def addrs(self) -> frozenset:
        return frozenset((self.first.addr, self.second.addr))


Triangle = Tuple[Site, Site, Site]


@dataclass
class Triangulation:
    """
    Output of one sweep: the Voronoi edges plus the dual Delaunay graph.
    """
    sites: List[Site]
    voronoi_edges: List[VoronoiEdge] = field(default_factory=list)
    edges: List[TriangulationEdge] = field(default_factory=list)
    triangles: List[Triangle] = field(default_factory=list)
    neighbors: Dict[int, List[Site]] = field(default_factory=dict)
    min_y: float = 0.0
    max_y: float = 0.0

    def edge_count(self) -> int:
        return len(self.edges)

    def triangle_count(self) -> int:
        return len(self.triangles)

    def has_edge(self, a: int, b: int) -> bool:
        key = frozenset((a, b))
        return any(e.addrs == key for e in self.edges)
