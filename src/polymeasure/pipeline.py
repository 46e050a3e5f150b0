from __future__ import annotations

import math
from typing import Optional

import numpy as np
import structlog

from .config import MeasureConfig
from .integrator import integrate
from .plane import fit_plane
from .recovery import recover_boundary
from .refinement import refine_mesh
from .result import MeasurementResult, MeasureStatus
from .surface import DegenerateInputError, HeightFn, SurfaceModel, TangentFrame, bounding_box, to_cartesian

logger = structlog.get_logger()


def _drop_repeated(ll: np.ndarray) -> np.ndarray:
    """
    Remove consecutive duplicate vertices, including a closing vertex equal to
    the first one.
    """
    if len(ll) == 0:
        return ll
    keep = [0]
    for i in range(1, len(ll)):
        if not np.array_equal(ll[i], ll[keep[-1]]):
            keep.append(i)
    if len(keep) > 1 and np.array_equal(ll[keep[-1]], ll[keep[0]]):
        keep.pop()
    return ll[keep]


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def measure_polygon(
    lng_lat,
    radius: float,
    height_fn: HeightFn,
    config: Optional[MeasureConfig] = None,
) -> MeasurementResult:
    """
    Measure the terrain enclosed by a closed polygon on a sphere.

    lng_lat:   (N,2) boundary vertices, longitude and latitude in radians,
               the closing vertex may be repeated or omitted
    radius:    sphere radius
    height_fn: terrain height above the sphere at (lng, lat)

    Degenerate input (fewer than three distinct vertices, a polygon spanning
    more than a hemisphere, non-finite coordinates or heights, a singular
    plane fit) yields a zeroed result with status DEGENERATE instead of
    raising.
    """
    config = config or MeasureConfig()

    ll = np.asarray(lng_lat, dtype=np.float64)
    if ll.ndim != 2 or ll.shape[1] != 2:
        raise ValueError("lng_lat must be (N,2)")

    ll = _drop_repeated(ll)
    if not np.all(np.isfinite(ll)):
        logger.warning("Polygon has non-finite coordinates")
        return MeasurementResult.degenerate(reason="non-finite coordinates")

    bbox = bounding_box(ll)
    if len(ll) < 3:
        logger.warning("Polygon needs at least 3 distinct vertices", vertices=len(ll))
        return MeasurementResult.degenerate(bbox, reason="fewer than 3 vertices")

    heights = np.array([height_fn(float(lng), float(lat)) for lng, lat in ll], dtype=np.float64)
    positions = to_cartesian(ll[:, 0], ll[:, 1], radius, heights)

    try:
        frame = TangentFrame.from_positions(positions, radius, config.extent_margin)
        ring = frame.project(positions)
        plane = fit_plane(positions)
    except (DegenerateInputError, np.linalg.LinAlgError) as e:
        logger.warning("Polygon cannot be measured", reason=str(e))
        return MeasurementResult.degenerate(bbox, reason=str(e))

    surface = SurfaceModel(frame, height_fn)

    recovery = recover_boundary([tuple(p) for p in ring], config)
    refinement = refine_mesh(recovery.triangles, recovery.ring, surface, config)
    area, pos, neg = integrate(refinement.triangles, surface, plane, config.crossing_resolution)

    status = MeasureStatus.OK if recovery.conforming else MeasureStatus.APPROXIMATE
    result = MeasurementResult(
        area=_finite(area),
        positive_volume=_finite(pos),
        negative_volume=_finite(neg),
        bounding_box=bbox,
        status=status,
        triangles=refinement.triangles,
        mesh_edges=refinement.edges,
        ring=recovery.ring,
        plane=plane,
        frame=frame,
        surface=surface,
        recovery_attempts=recovery.attempts,
        refinement_attempts=refinement.attempts,
        point_count=refinement.point_count,
    )
    logger.info(
        "Measured polygon",
        area=result.area,
        positive_volume=result.positive_volume,
        negative_volume=result.negative_volume,
        triangles=len(result.triangles),
        status=status.value,
    )
    return result
