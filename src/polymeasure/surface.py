from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

HeightFn = Callable[[float, float], float]


class DegenerateInputError(ValueError):
    """The boundary cannot be measured (too large, collapsed, or non-finite)."""


def to_cartesian(lng, lat, radius: float, height=0.0) -> np.ndarray:
    """
    Spherical (lng, lat in radians) -> Cartesian, +y towards the north pole.
    Works on scalars and arrays; returns (..., 3).
    """
    lng = np.asarray(lng, dtype=np.float64)
    lat = np.asarray(lat, dtype=np.float64)
    r = radius + np.asarray(height, dtype=np.float64)
    return np.stack([
        r * np.cos(lat) * np.sin(lng),
        r * np.sin(lat),
        r * np.cos(lat) * np.cos(lng),
    ], axis=-1)


def to_lng_lat(points) -> np.ndarray:
    """
    Cartesian (..., 3) -> (..., 2) longitude/latitude in radians.
    """
    p = np.asarray(points, dtype=np.float64)
    r = np.linalg.norm(p, axis=-1)
    lat = np.arcsin(np.clip(p[..., 1] / r, -1.0, 1.0))
    lng = np.arctan2(p[..., 0], p[..., 2])
    return np.stack([lng, lat], axis=-1)


def bounding_box(lng_lat: np.ndarray) -> Tuple[float, float, float, float]:
    """
    (min_lng, max_lng, min_lat, max_lat) of a ring of lng/lat points.
    """
    ll = np.asarray(lng_lat, dtype=np.float64)
    if len(ll) == 0:
        return 0.0, 0.0, 0.0, 0.0
    mn = ll.min(axis=0)
    mx = ll.max(axis=0)
    return float(mn[0]), float(mx[0]), float(mn[1]), float(mx[1])


def north_direction(normal: np.ndarray) -> np.ndarray:
    nx, ny, nz = normal
    horizontal = nx * nx + nz * nz
    if horizontal < 1e-24:
        # at a pole every tangent direction is "north"
        return np.array([0.0, 0.0, -1.0]) if ny > 0 else np.array([0.0, 0.0, 1.0])
    if ny == 0.0:
        return np.array([0.0, 1.0, 0.0])

    y_north = horizontal / ny
    north = np.array([-nx, y_north, -nz])
    if y_north < 0:
        north = -north
    return north / np.linalg.norm(north)


@dataclass(frozen=True)
class TangentFrame:
    """
    Plane tangent to the sphere below the polygon's mean position.
    Plane coordinates are divided by `extent` so the polygon fits in (-1, 1).
    """
    center: np.ndarray  # (3,) point on the sphere, normal * radius
    normal: np.ndarray  # (3,) unit
    east: np.ndarray    # (3,) unit
    north: np.ndarray   # (3,) unit
    radius: float
    extent: float

    @classmethod
    def from_positions(cls, positions: np.ndarray, radius: float, margin: float = 1.2) -> "TangentFrame":
        """
        positions: (N,3) Cartesian boundary points.
        Raises DegenerateInputError when the polygon spans more than a hemisphere.
        """
        P = np.asarray(positions, dtype=np.float64)
        if P.ndim != 2 or P.shape[1] != 3:
            raise ValueError("positions must be (N,3)")

        mean = P.mean(axis=0)
        max_dist = float(np.max(np.linalg.norm(P - mean, axis=1)))
        if not np.isfinite(max_dist) or max_dist >= radius:
            raise DegenerateInputError("Polygon spans more than one hemisphere")

        norm = float(np.linalg.norm(mean))
        if norm == 0.0 or max_dist == 0.0:
            raise DegenerateInputError("Polygon collapsed to a point")

        normal = mean / norm
        north = north_direction(normal)
        east = -np.cross(normal, north)

        extent = margin * max_dist * radius / np.sqrt(radius ** 2 - max_dist ** 2)
        return cls(
            center=normal * radius,
            normal=normal,
            east=east,
            north=north,
            radius=float(radius),
            extent=float(extent),
        )

    def project(self, positions: np.ndarray) -> np.ndarray:
        """
        Central projection of (N,3) points onto the plane -> (N,2) normalised.
        """
        P = np.atleast_2d(np.asarray(positions, dtype=np.float64))
        denom = P @ self.normal
        with np.errstate(divide="ignore", invalid="ignore"):
            k = float(self.normal @ self.center) / denom
            on_plane = P * k[:, None] - self.center
            uv = np.column_stack([on_plane @ self.east, on_plane @ self.north]) / self.extent
        if np.any(denom <= 0.0) or not np.all(np.isfinite(uv)):
            raise DegenerateInputError("Boundary point cannot be projected onto the tangent plane")
        return uv

    def sphere_point(self, xy) -> np.ndarray:
        """
        Normalised plane coordinates (2,) or (N,2) -> point(s) on the sphere.
        """
        uv = np.asarray(xy, dtype=np.float64)
        p = (self.center
             + self.extent * uv[..., 0:1] * self.east
             + self.extent * uv[..., 1:2] * self.north)
        return p / np.linalg.norm(p, axis=-1, keepdims=True) * self.radius


class SurfaceModel:
    """
    Terrain on top of the sphere, addressed through tangent-plane coordinates.
    """

    def __init__(self, frame: TangentFrame, height_fn: HeightFn):
        self.frame = frame
        self.height_fn = height_fn

    @property
    def radius(self) -> float:
        return self.frame.radius

    def height_of(self, sphere_point: np.ndarray) -> float:
        lng, lat = to_lng_lat(sphere_point)
        return float(self.height_fn(float(lng), float(lat)))

    def height_at(self, xy) -> float:
        return self.height_of(self.frame.sphere_point(xy))

    def sphere_point(self, xy) -> np.ndarray:
        return self.frame.sphere_point(xy)

    def terrain_point(self, xy) -> Tuple[np.ndarray, float]:
        """
        (3D point lifted by the terrain height, the height itself).
        """
        p = self.frame.sphere_point(xy)
        h = self.height_of(p)
        return p * ((self.radius + h) / self.radius), h
