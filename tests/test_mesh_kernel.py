from __future__ import annotations

import warnings

import numpy as np
import pytest
import pyvista as pv

from snapfit.feature import PostProcessOptions, generate_snap_fit
from snapfit.frame import build_frame
from snapfit.kernel import GeometryKernel
from snapfit.kernel.mesh import KernelError, MeshKernel, Operation, Solid, demo_bodies
from snapfit.mesh import analyze_mesh, combine_meshes
from snapfit.params import CantileverSnap, CylindricalSnap, default_for


def _kernel(**kwargs) -> MeshKernel:
    return MeshKernel(demo_bodies(gap=30.0), **kwargs)


def test_mesh_kernel_satisfies_protocol():
    assert isinstance(_kernel(), GeometryKernel)


def test_requires_bodies():
    with pytest.raises(ValueError):
        MeshKernel({})


def test_unknown_selection():
    with pytest.raises(KernelError):
        _kernel().evaluate_selection("lid")


def test_demo_body_centroids():
    kernel = _kernel()
    assert np.allclose(kernel.centroid(kernel.evaluate_selection("male")), [0.0, 0.0, 0.0], atol=1e-9)
    assert np.allclose(kernel.centroid(kernel.evaluate_selection("female")), [30.0, 0.0, 0.0], atol=1e-9)


def test_cantilever_solids_are_watertight():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"))
    for handle in result.male_features + result.female_features:
        assert isinstance(handle, Solid)
        assert analyze_mesh(handle.mesh).is_watertight


def test_cantilever_male_bounds_in_world():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"))
    male = combine_meshes(handle.mesh for handle in result.male_features)
    # lateral is -Y and binormal is -Z when the normal is +X
    assert male.bounds == pytest.approx((0.0, 5.0, -21.0, 5.0, -2.0, 0.0))


@pytest.mark.parametrize("clearance", [0.0, 0.2, 0.45])
def test_cavity_cutter_is_male_grown_by_clearance(clearance):
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", CantileverSnap(clearance=clearance))
    male = combine_meshes(handle.mesh for handle in result.male_features)
    (cutter,) = result.female_features
    assert cutter.is_cutter
    expected = np.asarray(male.bounds) + np.array([-1, 1, -1, 1, -1, 1]) * clearance
    assert cutter.mesh.bounds == pytest.approx(tuple(expected))


def test_cylindrical_post_and_lip():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cylindrical"))
    post, lip = result.male_features
    xmin, xmax, ymin, ymax, zmin, zmax = post.mesh.bounds
    assert (xmin, xmax) == pytest.approx((0.0, 10.0))
    assert ymax == pytest.approx(4.0, abs=0.01)
    assert zmin == pytest.approx(-4.0, abs=0.01)

    assert lip.operation == "revolve"
    assert lip.mesh.n_faces > 0
    lx_min, lx_max = lip.mesh.bounds[:2]
    assert lx_max == pytest.approx(10.0)
    assert lx_min == pytest.approx(10.0 - 0.8 / np.tan(np.radians(30.0)))
    radial = np.linalg.norm(lip.mesh.vertices[:, 1:], axis=1)
    assert radial.min() == pytest.approx(4.0)
    assert radial.max() < 4.8


def test_cylindrical_female_cutters():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", CylindricalSnap())
    ring, groove, entry = result.female_features
    assert not ring.is_cutter
    assert groove.is_cutter and entry.is_cutter
    assert groove.mesh.bounds[:2] == pytest.approx((9.6, 10.6))
    assert ring.mesh.bounds[3] == pytest.approx(7.0, abs=0.02)


def test_post_processing_history():
    kernel = _kernel()
    options = PostProcessOptions(add_fillets=True, add_draft_angles=True, draft_angle_deg=1.5)
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"), options)
    assert [op.kind for op in kernel.history] == ["fillet", "draft", "draft"]
    fillet, *drafts = kernel.history
    assert fillet.solid is result.male_features[1]
    assert fillet.parameters["radius"] == pytest.approx(0.4)
    for op in drafts:
        assert op.parameters["pull_direction"] == pytest.approx((0.0, 0.0, 1.0))
        assert op.parameters["angle_deg"] == pytest.approx(1.5)
    assert all(isinstance(item, Operation) for item in result.male_features[2:])


def test_findings_are_warned():
    kernel = _kernel()
    with pytest.warns(RuntimeWarning, match="Wall thickness too thin"):
        _, findings = generate_snap_fit(kernel, "male", "female", CantileverSnap(beam_thickness=0.5))
    assert kernel.findings == [("warning", findings[0].message)]


def test_realize_male_without_base():
    kernel = _kernel()
    options = PostProcessOptions(add_fillets=True)
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"), options)
    mesh = kernel.realize(result.male_features)
    assert mesh.n_faces > 0
    assert mesh.bounds == pytest.approx((0.0, 5.0, -21.0, 5.0, -2.0, 0.0))


def test_realize_with_base_keeps_body():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"))
    mesh = kernel.realize(result.male_features, base="male")
    xmin, xmax, ymin, ymax, zmin, zmax = mesh.bounds
    assert xmin == pytest.approx(-10.0)
    assert ymin == pytest.approx(-21.0)


def test_realize_requires_geometry():
    with pytest.raises(KernelError):
        _kernel().realize([])


def test_fillet_rejects_non_positive_radius():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"))
    with pytest.raises(KernelError):
        kernel.fillet(kernel.adjacent_edges(result.male_features[0]), 0.0)


def test_empty_sketch_cannot_extrude():
    kernel = _kernel()
    frame = build_frame((0, 0, 0), (1, 0, 0), 0.0)
    sketch = kernel.create_sketch_plane(frame.sketch_plane())
    with pytest.raises(KernelError):
        kernel.extrude(sketch, frame.normal, 1.0)


@pytest.mark.parametrize("gap, expected", [(20.0, 10.0), (30.0, 20.0), (5.0, 0.0)])
def test_interface_offset_reaches_female_face(gap, expected):
    kernel = MeshKernel(demo_bodies(gap=gap))
    assert kernel.interface_offset("male", "female") == pytest.approx(expected)


def test_female_cut_at_interface_keeps_block():
    kernel = MeshKernel(demo_bodies())
    params = CantileverSnap(position_offset=kernel.interface_offset("male", "female"))
    result, _ = generate_snap_fit(kernel, "male", "female", params)
    cutter = result.female_features[0]
    assert cutter.mesh.bounds[:2] == pytest.approx((9.8, 15.2))
    mesh = kernel.realize(result.female_features, base="female")
    assert mesh.n_faces > 0
    assert mesh.bounds[:2] == pytest.approx((10.0, 30.0), abs=1e-6)


def test_cutter_missing_the_body_leaves_it_alone():
    kernel = _kernel()
    result, _ = generate_snap_fit(kernel, "male", "female", default_for("cantilever"))
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        mesh = kernel.realize(result.female_features, base="female")
    assert mesh.n_faces == 12
    assert mesh.bounds[:2] == pytest.approx((20.0, 40.0))


def test_empty_boolean_result_keeps_uncut_preview(monkeypatch):
    kernel = MeshKernel(demo_bodies())
    params = CantileverSnap(position_offset=10.0)
    result, _ = generate_snap_fit(kernel, "male", "female", params)
    monkeypatch.setattr(pv.PolyData, "boolean_difference", lambda self, other, tolerance=1e-5: pv.PolyData())
    with pytest.warns(RuntimeWarning, match="keeping the uncut preview"):
        mesh = kernel.realize(result.female_features, base="female")
    assert mesh.n_faces == 12
    assert mesh.bounds[:2] == pytest.approx((10.0, 30.0))


def _square(kernel, sketch, size, center=(0.0, 0.0)):
    cx, cy = center
    h = size / 2.0
    corners = [(cx - h, cy - h), (cx + h, cy - h), (cx + h, cy + h), (cx - h, cy + h), (cx - h, cy - h)]
    kernel.add_polyline(sketch, np.array(corners))


def test_sketch_keeps_disjoint_loops_apart():
    kernel = _kernel()
    frame = build_frame((0, 0, 0), (1, 0, 0), 0.0)
    sketch = kernel.create_sketch_plane(frame.sketch_plane())
    _square(kernel, sketch, 2.0)
    _square(kernel, sketch, 2.0, center=(5.0, 0.0))
    profiles = sketch.profiles()
    assert len(profiles) == 2
    assert all(not profile.holes for profile in profiles)
    solid = kernel.extrude(sketch, frame.normal, 1.0)
    assert analyze_mesh(solid.mesh).is_watertight


def test_sketch_nests_inner_loop_as_hole():
    kernel = _kernel()
    frame = build_frame((0, 0, 0), (1, 0, 0), 0.0)
    sketch = kernel.create_sketch_plane(frame.sketch_plane())
    _square(kernel, sketch, 1.0)
    _square(kernel, sketch, 4.0)
    (profile,) = sketch.profiles()
    assert profile.bounds() == pytest.approx((-2.0, -2.0, 2.0, 2.0))
    assert len(profile.holes) == 1
    solid = kernel.extrude(sketch, frame.normal, 1.0)
    assert analyze_mesh(solid.mesh).is_watertight


def test_sketch_closes_loop_through_arc():
    kernel = _kernel()
    frame = build_frame((0, 0, 0), (1, 0, 0), 0.0)
    sketch = kernel.create_sketch_plane(frame.sketch_plane())
    kernel.add_polyline(sketch, np.array([(-1.0, 0.0), (-1.0, -1.0), (1.0, -1.0), (1.0, 0.0)]))
    kernel.add_arc(sketch, np.array([0.0, 0.0]), 1.0, 0.0, 180.0)
    assert sketch.pending == []
    assert len(sketch.profiles()) == 1


def test_open_polyline_cannot_extrude():
    kernel = _kernel()
    frame = build_frame((0, 0, 0), (1, 0, 0), 0.0)
    sketch = kernel.create_sketch_plane(frame.sketch_plane())
    kernel.add_polyline(sketch, np.array([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]))
    with pytest.raises(KernelError, match="open loop"):
        kernel.extrude(sketch, frame.normal, 1.0)
