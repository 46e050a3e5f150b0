from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import trimesh

from delaunay2d.datastructures import Triangle, TriangulationEdge
from delaunay2d.geometry import orientation

from .plane import BestFitPlane
from .surface import SurfaceModel, TangentFrame


class MeasureStatus(Enum):
    OK = "ok"
    APPROXIMATE = "approximate"  # boundary edges missing after recovery
    DEGENERATE = "degenerate"    # nothing measured, all outputs are zero


@dataclass
class MeasurementResult:
    """
    Outcome of measuring one polygon.

    area is the terrain surface area, positive_volume the volume of terrain
    above the best-fit plane and negative_volume (<= 0) the volume below it.
    bounding_box is (min_lng, max_lng, min_lat, max_lat) in radians.
    """
    area: float = 0.0
    positive_volume: float = 0.0
    negative_volume: float = 0.0
    bounding_box: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    status: MeasureStatus = MeasureStatus.OK
    triangles: List[Triangle] = field(default_factory=list)
    mesh_edges: List[TriangulationEdge] = field(default_factory=list)
    ring: List[Tuple[float, float]] = field(default_factory=list)
    plane: Optional[BestFitPlane] = None
    frame: Optional[TangentFrame] = None
    surface: Optional[SurfaceModel] = None
    recovery_attempts: int = 0
    refinement_attempts: int = 0
    point_count: int = 0
    reason: str = ""

    @classmethod
    def degenerate(cls, bounding_box=(0.0, 0.0, 0.0, 0.0), reason: str = "") -> "MeasurementResult":
        return cls(bounding_box=tuple(bounding_box), status=MeasureStatus.DEGENERATE, reason=reason)

    @property
    def volume(self) -> float:
        """Net volume relative to the plane."""
        return self.positive_volume + self.negative_volume

    def bounding_box_degrees(self) -> Tuple[float, float, float, float]:
        return tuple(math.degrees(v) for v in self.bounding_box)

    def mesh_segments_xyz(self) -> np.ndarray:
        """
        (M,2,3) terrain-lifted endpoints of every refined mesh edge, for display.
        """
        if self.surface is None or not self.mesh_edges:
            return np.zeros((0, 2, 3))
        segs = []
        for e in self.mesh_edges:
            a, _ = self.surface.terrain_point(e.first.xy)
            b, _ = self.surface.terrain_point(e.second.xy)
            segs.append((a, b))
        return np.asarray(segs, dtype=np.float64)

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        Terrain mesh of the measured triangles, faces wound counter-clockwise
        seen from outside the sphere.
        """
        if self.surface is None or not self.triangles:
            return trimesh.Trimesh(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=np.int64), process=False)

        index = {}
        vertices = []
        faces = []
        for tri in self.triangles:
            face = []
            for s in tri:
                if s.xy not in index:
                    index[s.xy] = len(vertices)
                    vertices.append(self.surface.terrain_point(s.xy)[0])
                face.append(index[s.xy])

            if orientation(tri[0].xy, tri[1].xy, tri[2].xy) < 0:
                face[1], face[2] = face[2], face[1]
            faces.append(face)

        return trimesh.Trimesh(
            vertices=np.asarray(vertices, dtype=np.float64),
            faces=np.asarray(faces, dtype=np.int64),
            process=False,
        )
