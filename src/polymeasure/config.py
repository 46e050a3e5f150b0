from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

# keys used by the measurement tool's persisted settings
_SETTINGS_KEYS = {
    "polygonHeightDiff": "height_diff",
    "polygonMaxAttempt": "max_attempts",
    "polygonMaxPoints": "max_points",
    "polygonSleekness": "min_angle",
}


@dataclass(frozen=True)
class MeasureConfig:
    """
    Tunables for one measurement run. Passed explicitly into every stage.

    height_diff:          ratio between sampled and interpolated terrain height
                          that triggers an extra point (> 1)
    max_attempts:         refinement passes
    max_points:           cap on the total number of refinement points
    min_angle:            minimum triangle angle in degrees for the sliver test
    crossing_resolution:  samples per edge when locating a plane crossing
    recovery_attempts:    triangulations tried while recovering boundary edges
    safety_band:          relative distance to an endpoint inside which an edge
                          intersection is discarded
    edge_tolerance:       band around polygon edges counted as inside
    extent_margin:        safety factor on the tangent-plane normalisation
    """
    height_diff: float = 1.002
    max_attempts: int = 10
    max_points: int = 1000
    min_angle: float = 15.0
    crossing_resolution: int = 32
    recovery_attempts: int = 5
    safety_band: float = 0.01
    edge_tolerance: float = 1e-3
    extent_margin: float = 1.2

    def __post_init__(self):
        if not self.height_diff > 1.0:
            raise ValueError("height_diff must be > 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.max_points < 3:
            raise ValueError("max_points must be >= 3")
        if not 0.0 < self.min_angle < 60.0:
            raise ValueError("min_angle must be in (0, 60) degrees")
        if self.crossing_resolution < 1:
            raise ValueError("crossing_resolution must be >= 1")
        if self.recovery_attempts < 1:
            raise ValueError("recovery_attempts must be >= 1")
        if not 0.0 <= self.safety_band < 0.5:
            raise ValueError("safety_band must be in [0, 0.5)")
        if self.edge_tolerance < 0.0:
            raise ValueError("edge_tolerance must be >= 0")
        if self.extent_margin < 1.0:
            raise ValueError("extent_margin must be >= 1")

    def replace(self, **changes: Any) -> "MeasureConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "MeasureConfig":
        """
        Build a config from a settings mapping. Accepts both the tool's
        persisted keys (e.g. "polygonMaxPoints") and field names; unknown keys
        are ignored.
        """
        names = {f.name for f in dataclasses.fields(cls)}
        values = {}
        for key, value in settings.items():
            name = _SETTINGS_KEYS.get(key, key)
            if name in names:
                values[name] = value
        return cls(**values)
