from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .surface import north_direction


@dataclass(frozen=True)
class BestFitPlane:
    """
    Least-squares plane through the terrain boundary points:
    {p : normal . p == offset}.
    """
    normal: np.ndarray  # (3,) unit, oriented away from the sphere center
    point: np.ndarray   # (3,) a point on the plane

    @property
    def offset(self) -> float:
        return float(self.normal @ self.point)

    def ray_distance(self, point: np.ndarray) -> float:
        """
        Distance from the sphere center to the plane along the ray through `point`.
        """
        p = np.asarray(point, dtype=np.float64)
        u = p / np.linalg.norm(p)
        return self.offset / float(self.normal @ u)

    def project_radially(self, point: np.ndarray) -> np.ndarray:
        p = np.asarray(point, dtype=np.float64)
        u = p / np.linalg.norm(p)
        return u * (self.offset / float(self.normal @ u))

    def height_above(self, sphere_point: np.ndarray, terrain_height: float, radius: float) -> float:
        """
        Signed height of a terrain sample over the plane, measured along the
        radial direction of `sphere_point`.
        """
        return float(terrain_height) - (self.ray_distance(sphere_point) - radius)


def fit_plane(points: np.ndarray) -> BestFitPlane:
    """
    Fit height = a*x + b*y + c in a tangent frame at the centroid of `points`
    (N,3), N >= 3, by inverting the 3x3 normal-equations matrix.

    Collinear input makes the matrix singular; numpy.linalg.LinAlgError is
    left to the caller.
    """
    P = np.asarray(points, dtype=np.float64)
    if P.ndim != 2 or P.shape[1] != 3:
        raise ValueError("points must be (N,3)")
    if len(P) < 3:
        raise ValueError("Need at least 3 points to fit a plane")

    centroid = P.mean(axis=0)
    up = centroid / np.linalg.norm(centroid)
    north = north_direction(up)
    east = -np.cross(up, north)

    rel = P - centroid
    x = rel @ east
    y = rel @ north
    z = rel @ up

    mat = np.array([
        [np.sum(x * x), np.sum(x * y), np.sum(x)],
        [np.sum(x * y), np.sum(y * y), np.sum(y)],
        [np.sum(x), np.sum(y), float(len(P))],
    ])
    vec = np.array([np.sum(x * z), np.sum(y * z), np.sum(z)])

    a, b, c = np.linalg.inv(mat) @ vec

    normal = -a * east - b * north + up
    normal = normal / np.linalg.norm(normal)
    if normal @ up < 0:
        normal = -normal

    return BestFitPlane(normal=normal, point=centroid + c * up)
