from __future__ import annotations

from typing import Sequence

import numpy as np

from snapfit.drawing2d import Path2D, Profile2D
from snapfit.frame import SketchPlane
from snapfit.geometry import normalize
from snapfit.mesh import Mesh


def _loop_points(path: Path2D, segments_per_circle: int) -> np.ndarray:
    pts = path.sample(segments_per_circle=segments_per_circle)
    if pts.shape[0] == 0:
        return pts
    if np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    return pts


def _signed_area(points: np.ndarray) -> float:
    if points.shape[0] < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def _ensure_winding(points: np.ndarray, clockwise: bool) -> np.ndarray:
    if points.shape[0] < 3:
        return points
    is_cw = _signed_area(points) < 0
    if is_cw != clockwise:
        return points[::-1].copy()
    return points


def _profile_loops(profile: Profile2D, segments_per_circle: int) -> list[np.ndarray]:
    loops = [_ensure_winding(_loop_points(profile.outer, segments_per_circle), clockwise=False)]
    for hole in profile.holes:
        loops.append(_ensure_winding(_loop_points(hole, segments_per_circle), clockwise=True))
    return loops


def triangulate_profile(
    profile: Profile2D,
    segments_per_circle: int = 64,
) -> tuple[np.ndarray, np.ndarray, list[np.ndarray]]:
    """Triangulate a profile (outer loop plus holes) with earcut."""
    try:
        import mapbox_earcut as earcut
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise ImportError("mapbox_earcut is required for profile triangulation.") from exc

    loops = _profile_loops(profile, segments_per_circle)
    if not loops or loops[0].shape[0] < 3:
        return np.zeros((0, 2), dtype=float), np.zeros((0, 3), dtype=int), loops

    vertices = np.vstack(loops).astype(np.float32)
    ring_ends = []
    offset = 0
    for loop in loops:
        offset += loop.shape[0]
        ring_ends.append(offset)
    ring_end_indices = np.asarray(ring_ends, dtype=np.uint32)
    indices = earcut.triangulate_float32(vertices, ring_end_indices)
    faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    # Keep full precision for placement; earcut only needs float32 for indexing.
    return np.vstack(loops).astype(float), faces, loops


def _cap_faces(vertices: np.ndarray, faces: np.ndarray, expected_normal: np.ndarray) -> np.ndarray:
    if faces.size == 0:
        return faces
    tri = faces.copy()
    v1 = vertices[tri[:, 1]] - vertices[tri[:, 0]]
    v2 = vertices[tri[:, 2]] - vertices[tri[:, 0]]
    normals = np.cross(v1, v2)
    dots = np.einsum("ij,j->i", normals, expected_normal)
    flip = dots < 0
    if np.any(flip):
        tri[flip] = tri[flip][:, [0, 2, 1]]
    return tri


def linear_extrude(
    profile: Profile2D,
    plane: SketchPlane,
    direction: Sequence[float],
    depth: float,
    segments_per_circle: int = 64,
) -> Mesh:
    """Extrude a profile sketched on ``plane`` by ``depth`` along ``direction``."""

    depth = float(depth)
    if depth <= 0:
        raise ValueError("depth must be positive.")
    direction_vec = normalize(direction)
    if abs(float(np.dot(direction_vec, plane.normal))) < 1e-9:
        raise ValueError("Extrude direction must not lie in the sketch plane.")

    vertices_2d, faces_2d, loops = triangulate_profile(profile, segments_per_circle=segments_per_circle)
    if vertices_2d.size == 0:
        return Mesh(np.zeros((0, 3), dtype=float), np.zeros((0, 3), dtype=int))

    base = plane.to_world(vertices_2d)
    top = base + direction_vec * depth
    vertices = np.vstack([base, top])
    n_base = len(base)

    sweep_sign = 1.0 if float(np.dot(direction_vec, plane.normal)) >= 0 else -1.0
    faces = [
        _cap_faces(vertices, faces_2d, expected_normal=-direction_vec),
        _cap_faces(vertices, faces_2d + n_base, expected_normal=direction_vec),
    ]

    # sides
    offset = 0
    for loop in loops:
        count = loop.shape[0]
        for i in range(count):
            j = (i + 1) % count
            b0 = offset + i
            b1 = offset + j
            t0 = b0 + n_base
            t1 = b1 + n_base
            if sweep_sign >= 0:
                faces.append(np.array([[b0, b1, t1], [b0, t1, t0]], dtype=int))
            else:
                faces.append(np.array([[b0, t1, b1], [b0, t0, t1]], dtype=int))
        offset += count

    return Mesh(vertices, np.vstack(faces))


def _rotate_around_axis(points: np.ndarray, origin: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    p = points - origin
    cross = np.cross(axis, p)
    dot = np.dot(p, axis)
    rotated = p * cos_a + cross * sin_a + axis * dot[:, None] * (1 - cos_a)
    return rotated + origin


def rotate_extrude(
    profile: Profile2D,
    plane: SketchPlane,
    axis_origin: Sequence[float],
    axis_direction: Sequence[float],
    angle_deg: float = 360.0,
    segments: int = 64,
    segments_per_circle: int = 64,
) -> Mesh:
    """Revolve a profile sketched on ``plane`` about an axis lying in that plane."""

    axis_origin = np.asarray(axis_origin, dtype=float).reshape(3)
    axis_dir = normalize(axis_direction)
    if abs(float(np.dot(axis_dir, plane.normal))) > 1e-6:
        raise ValueError("Revolve axis must lie in the sketch plane.")
    if np.isclose(angle_deg, 0.0):
        raise ValueError("angle_deg must be non-zero.")

    vertices_2d, faces_2d, loops = triangulate_profile(profile, segments_per_circle=segments_per_circle)
    if vertices_2d.size == 0:
        return Mesh(np.zeros((0, 3), dtype=float), np.zeros((0, 3), dtype=int))

    base_points = plane.to_world(vertices_2d)
    angle_rad = np.deg2rad(angle_deg)
    closed = np.isclose(abs(angle_deg), 360.0)
    steps = max(int(segments), 3)
    if closed:
        angles = np.linspace(0.0, angle_rad, steps, endpoint=False)
    else:
        angles = np.linspace(0.0, angle_rad, steps + 1, endpoint=True)

    vertices = np.vstack([_rotate_around_axis(base_points, axis_origin, axis_dir, angle) for angle in angles])

    ring_size = base_points.shape[0]
    ring_count = len(angles)
    faces = []
    for ring in range(ring_count - (0 if closed else 1)):
        next_ring = (ring + 1) % ring_count
        ring_offset = ring * ring_size
        next_offset = next_ring * ring_size
        for loop in loops:
            count = loop.shape[0]
            for i in range(count):
                j = (i + 1) % count
                b0 = ring_offset + i
                b1 = ring_offset + j
                t0 = next_offset + i
                t1 = next_offset + j
                if angle_deg >= 0:
                    faces.append(np.array([[b0, b1, t1], [b0, t1, t0]], dtype=int))
                else:
                    faces.append(np.array([[b0, t1, b1], [b0, t0, t1]], dtype=int))
            ring_offset += count
            next_offset += count

    if not closed:
        end_offset = (ring_count - 1) * ring_size
        faces.append(_cap_faces(vertices, faces_2d, expected_normal=-plane.normal * np.sign(angle_deg)))
        end_normal = _rotate_around_axis(plane.normal[None, :], np.zeros(3), axis_dir, angle_rad)[0]
        faces.append(_cap_faces(vertices, faces_2d + end_offset, expected_normal=end_normal * np.sign(angle_deg)))

    return Mesh(vertices, np.vstack(faces))


__all__ = ["linear_extrude", "rotate_extrude", "triangulate_profile"]
