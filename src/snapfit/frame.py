from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from snapfit.geometry import EPSILON, as_vec3, cross, normalize, perpendicular_vector
from snapfit.validation import DegenerateGeometry


@dataclass(frozen=True)
class SketchPlane:
    """Placement of a 2D sketch in world space.

    Sketch coordinates (x, y) map to ``origin + x * x_dir + y * y_dir``.
    """

    origin: np.ndarray
    x_dir: np.ndarray
    y_dir: np.ndarray
    normal: np.ndarray

    def to_world(self, points: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        return self.origin + np.outer(pts[:, 0], self.x_dir) + np.outer(pts[:, 1], self.y_dir)

    def matrix(self) -> np.ndarray:
        """4x4 transform from sketch-local (x, y, z-along-normal) to world."""
        mat = np.eye(4)
        mat[:3, 0] = self.x_dir
        mat[:3, 1] = self.y_dir
        mat[:3, 2] = self.normal
        mat[:3, 3] = self.origin
        return mat


@dataclass(frozen=True)
class Frame:
    """Snap placement shared by the male and female profiles."""

    origin: np.ndarray
    normal: np.ndarray
    lateral: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vec3(self.origin))
        object.__setattr__(self, "normal", as_vec3(self.normal))
        object.__setattr__(self, "lateral", as_vec3(self.lateral))

    @property
    def binormal(self) -> np.ndarray:
        return cross(self.normal, self.lateral)

    def sketch_plane(self, offset: float = 0.0) -> SketchPlane:
        """Plane perpendicular to the normal, shifted ``offset`` along it."""
        return SketchPlane(
            origin=self.origin + self.normal * float(offset),
            x_dir=self.lateral.copy(),
            y_dir=self.binormal,
            normal=self.normal.copy(),
        )

    def axial_plane(self) -> SketchPlane:
        """Plane containing the normal; x is radial (lateral), y is axial."""
        return SketchPlane(
            origin=self.origin.copy(),
            x_dir=self.lateral.copy(),
            y_dir=self.normal.copy(),
            normal=-self.binormal,
        )

    def to_world(self, points: Sequence[Sequence[float]] | np.ndarray, offset: float = 0.0) -> np.ndarray:
        return self.sketch_plane(offset).to_world(points)


def build_frame(
    male_centroid: Sequence[float],
    female_centroid: Sequence[float],
    position_offset: float,
) -> Frame:
    """Build the placement frame from the two body centroids.

    The normal points from the male body toward the female body; the origin
    sits ``position_offset`` along it from the male centroid.
    """

    male = as_vec3(male_centroid)
    female = as_vec3(female_centroid)
    if not (np.all(np.isfinite(male)) and np.all(np.isfinite(female))):
        raise DegenerateGeometry("Body centroids must be finite.")
    delta = female - male
    if float(np.linalg.norm(delta)) < EPSILON:
        raise DegenerateGeometry("Male and female centroids coincide.")

    normal = normalize(delta)
    origin = male + normal * float(position_offset)
    lateral = perpendicular_vector(normal)
    return Frame(origin=origin, normal=normal, lateral=lateral)


__all__ = ["Frame", "SketchPlane", "build_frame"]
