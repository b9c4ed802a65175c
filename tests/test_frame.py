from __future__ import annotations

import numpy as np
import pytest

from snapfit.frame import Frame, build_frame
from snapfit.validation import DegenerateGeometry


def test_build_frame_normal_points_male_to_female():
    frame = build_frame((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), position_offset=2.5)
    assert np.allclose(frame.normal, [1.0, 0.0, 0.0])
    assert np.allclose(frame.origin, [2.5, 0.0, 0.0])
    assert abs(np.dot(frame.normal, frame.lateral)) < 1e-9


def test_build_frame_zero_offset_keeps_male_centroid():
    frame = build_frame((1.0, 2.0, 3.0), (1.0, 2.0, 9.0), position_offset=0.0)
    assert np.allclose(frame.origin, [1.0, 2.0, 3.0])
    assert np.allclose(frame.normal, [0.0, 0.0, 1.0])


def test_build_frame_random_pairs_are_orthonormal():
    rng = np.random.default_rng(11)
    for _ in range(200):
        male, female = rng.uniform(-100.0, 100.0, size=(2, 3))
        frame = build_frame(male, female, position_offset=float(rng.uniform(0.0, 5.0)))
        assert np.linalg.norm(frame.normal) == pytest.approx(1.0, abs=1e-9)
        assert np.linalg.norm(frame.lateral) == pytest.approx(1.0, abs=1e-9)
        assert abs(np.dot(frame.normal, frame.lateral)) < 1e-9


def test_build_frame_coincident_centroids():
    with pytest.raises(DegenerateGeometry):
        build_frame((4.0, 5.0, 6.0), (4.0, 5.0, 6.0), position_offset=1.0)


def test_build_frame_near_coincident_centroids():
    with pytest.raises(DegenerateGeometry):
        build_frame((0.0, 0.0, 0.0), (1e-12, 0.0, 0.0), position_offset=0.0)


def test_build_frame_non_finite_centroid():
    with pytest.raises(DegenerateGeometry):
        build_frame((0.0, 0.0, np.nan), (1.0, 0.0, 0.0), position_offset=0.0)


def test_sketch_plane_is_right_handed():
    frame = build_frame((0.0, 0.0, 0.0), (3.0, -2.0, 5.0), position_offset=1.0)
    plane = frame.sketch_plane()
    assert np.allclose(np.cross(plane.x_dir, plane.y_dir), plane.normal)
    assert np.allclose(plane.origin, frame.origin)


def test_sketch_plane_offset_moves_along_normal():
    frame = build_frame((0.0, 0.0, 0.0), (0.0, 0.0, 10.0), position_offset=0.0)
    plane = frame.sketch_plane(offset=4.0)
    assert np.allclose(plane.origin, [0.0, 0.0, 4.0])


def test_axial_plane_contains_normal():
    frame = build_frame((0.0, 0.0, 0.0), (0.0, 7.0, 0.0), position_offset=0.0)
    plane = frame.axial_plane()
    assert np.allclose(plane.y_dir, frame.normal)
    assert abs(np.dot(plane.normal, frame.normal)) < 1e-9
    assert np.allclose(np.cross(plane.x_dir, plane.y_dir), plane.normal)


def test_to_world_maps_lateral_and_binormal():
    frame = Frame(origin=(1.0, 0.0, 0.0), normal=(0.0, 0.0, 1.0), lateral=(0.0, 1.0, 0.0))
    pts = frame.to_world([(2.0, 0.0), (0.0, 3.0)], offset=1.0)
    assert np.allclose(pts[0], [1.0, 2.0, 1.0])
    assert np.allclose(pts[1], [1.0 - 3.0, 0.0, 1.0])


def test_sketch_plane_matrix_matches_to_world():
    frame = build_frame((0.0, 0.0, 0.0), (1.0, 2.0, 3.0), position_offset=0.5)
    plane = frame.sketch_plane(offset=2.0)
    local = np.array([1.5, -0.5, 0.0, 1.0])
    assert np.allclose((plane.matrix() @ local)[:3], plane.to_world([(1.5, -0.5)])[0])
