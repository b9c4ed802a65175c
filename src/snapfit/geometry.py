"""Small vector helpers shared by the frame builder and the kernels."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from snapfit.validation import DegenerateGeometry

EPSILON = 1e-9
# Above this |cos| against world Z the cross product gets too short to trust.
PARALLEL_THRESHOLD = 0.9

WORLD_X = np.array([1.0, 0.0, 0.0])
WORLD_Z = np.array([0.0, 0.0, 1.0])


def as_vec3(value: Sequence[float]) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(3)


def normalize(vector: Sequence[float]) -> np.ndarray:
    arr = as_vec3(vector)
    norm = float(np.linalg.norm(arr))
    if not np.isfinite(norm) or norm < EPSILON:
        raise DegenerateGeometry("Direction vector must be non-zero.")
    return arr / norm


def cross(a: Sequence[float], b: Sequence[float]) -> np.ndarray:
    return np.cross(as_vec3(a), as_vec3(b))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.dot(as_vec3(a), as_vec3(b)))


def perpendicular_vector(direction: Sequence[float]) -> np.ndarray:
    """Return a unit vector orthogonal to ``direction``.

    Uses world Z as the reference axis unless ``direction`` is nearly
    parallel to it, in which case world X is used instead.
    """

    unit = normalize(direction)
    if abs(dot(unit, WORLD_Z)) < PARALLEL_THRESHOLD:
        return normalize(cross(unit, WORLD_Z))
    return normalize(cross(unit, WORLD_X))


__all__ = [
    "EPSILON",
    "PARALLEL_THRESHOLD",
    "WORLD_X",
    "WORLD_Z",
    "as_vec3",
    "cross",
    "dot",
    "normalize",
    "perpendicular_vector",
]
