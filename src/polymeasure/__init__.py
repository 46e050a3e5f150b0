from .config import MeasureConfig
from .pipeline import measure_polygon
from .result import MeasurementResult, MeasureStatus

__all__ = [
    "MeasureConfig",
    "measure_polygon",
    "MeasurementResult",
    "MeasureStatus",
]

from .surface import DegenerateInputError, SurfaceModel, TangentFrame, to_cartesian, to_lng_lat
from .plane import BestFitPlane, fit_plane
from .recovery import RecoveryResult, recover_boundary
from .refinement import RefinementResult, check_sleekness, check_terrain, refine_mesh
from .integrator import integrate, triangle_area_volume

__all__ += [
    "DegenerateInputError",
    "SurfaceModel",
    "TangentFrame",
    "to_cartesian",
    "to_lng_lat",
    "BestFitPlane",
    "fit_plane",
    "RecoveryResult",
    "recover_boundary",
    "RefinementResult",
    "check_sleekness",
    "check_terrain",
    "refine_mesh",
    "integrate",
    "triangle_area_volume",
]
