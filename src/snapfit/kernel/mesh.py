"""Mesh-backed geometry kernel for previews, tests and STL export.

Bodies are PyVista datasets keyed by name. Extrusions and revolutions are
built with numpy; cuts are kept as cutter meshes and only subtracted when a
preview is realized. Fillet and draft requests are recorded in the history
but leave the preview geometry untouched.
"""

from __future__ import annotations

import itertools
import warnings
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pyvista as pv

from snapfit.drawing2d import Arc2D, Line2D, Path2D, Profile2D, Segment2D, make_annulus, make_circle
from snapfit.extrude import _loop_points, _signed_area, linear_extrude, rotate_extrude
from snapfit.frame import SketchPlane
from snapfit.geometry import as_vec3, normalize
from snapfit.mesh import Mesh, combine_meshes, mesh_from_pyvista, mesh_to_pyvista
from snapfit.printability import Severity

_ids = itertools.count(1)


class KernelError(RuntimeError):
    """Raised when the mesh kernel cannot honour a request."""


@dataclass(frozen=True, eq=False)
class Body:
    name: str
    dataset: pv.DataSet


_LOOP_TOLERANCE = 1e-6


def _segment_ends(segment: Segment2D) -> tuple[np.ndarray, np.ndarray]:
    if isinstance(segment, Line2D):
        return segment.start, segment.end
    angles = np.deg2rad([segment.start_angle_deg, segment.end_angle_deg])
    ends = segment.center + segment.radius * np.column_stack([np.cos(angles), np.sin(angles)])
    return ends[0], ends[1]


def _inside(loop: np.ndarray, point: np.ndarray) -> bool:
    x, y = point
    inside = False
    for (x0, y0), (x1, y1) in zip(loop, np.roll(loop, -1, axis=0)):
        if (y0 > y) != (y1 > y) and x < x0 + (y - y0) * (x1 - x0) / (y1 - y0):
            inside = not inside
    return inside


@dataclass
class Sketch:
    """Curves drawn on one sketch plane.

    Polylines and arcs are chained into loops in the order they are added;
    a loop closes once its last point meets its first. ``profiles`` nests
    the closed loops one level deep: a loop lying inside a larger one is
    that loop's hole, every other loop is an outer boundary of its own.
    Circles and annuli are kept as ready-made regions.
    """

    plane: SketchPlane
    loops: list[list[Segment2D]] = field(default_factory=list)
    regions: list[Profile2D] = field(default_factory=list)
    pending: list[Segment2D] = field(default_factory=list)

    def add_segment(self, segment: Segment2D) -> None:
        self.pending.append(segment)
        first, _ = _segment_ends(self.pending[0])
        _, last = _segment_ends(segment)
        if np.linalg.norm(last - first) <= _LOOP_TOLERANCE:
            self.loops.append(self.pending)
            self.pending = []

    def profiles(self, segments_per_circle: int = 64) -> list[Profile2D]:
        if self.pending:
            raise KernelError("Sketch has an open loop; polylines and arcs must end where they start.")
        paths = [Path2D(segments=list(loop), closed=True) for loop in self.loops]
        sampled = [_loop_points(path, segments_per_circle) for path in paths]
        order = sorted(range(len(paths)), key=lambda i: -abs(_signed_area(sampled[i])))

        outers: list[tuple[Profile2D, np.ndarray]] = []
        for index in order:
            host = next((item for item in outers if _inside(item[1], sampled[index][0])), None)
            if host is None:
                outers.append((Profile2D(outer=paths[index]), sampled[index]))
            else:
                host[0].holes.append(paths[index])

        profiles = list(self.regions) + [profile for profile, _ in outers]
        if not profiles:
            raise KernelError("Sketch has no geometry.")
        return profiles


@dataclass(frozen=True, eq=False)
class Solid:
    id: int
    operation: str
    mesh: Mesh

    @property
    def is_cutter(self) -> bool:
        return self.operation == "cut"


@dataclass(frozen=True, eq=False)
class EdgeSelection:
    solid: Solid
    count: int


@dataclass(frozen=True, eq=False)
class FaceSelection:
    solid: Solid
    count: int


@dataclass(frozen=True, eq=False)
class Operation:
    id: int
    kind: str
    solid: Solid
    parameters: Mapping[str, Any]


class MeshKernel:
    """GeometryKernel implementation over named PyVista bodies."""

    def __init__(
        self,
        bodies: Mapping[str, pv.DataSet],
        *,
        segments_per_circle: int = 64,
        revolve_segments: int = 64,
    ) -> None:
        if not bodies:
            raise ValueError("MeshKernel requires at least one body.")
        self.bodies = {name: Body(name, dataset) for name, dataset in bodies.items()}
        self.segments_per_circle = segments_per_circle
        self.revolve_segments = revolve_segments
        self.solids: list[Solid] = []
        self.history: list[Operation] = []
        self.findings: list[tuple[Severity, str]] = []

    def evaluate_selection(self, query: str) -> Body:
        try:
            return self.bodies[query]
        except KeyError:
            raise KernelError(f"No body named '{query}'.") from None

    def centroid(self, handle: Body) -> np.ndarray:
        return np.asarray(handle.dataset.center_of_mass(), dtype=float)

    def interface_offset(self, male: str, female: str) -> float:
        """Distance from the male centroid to the nearest female point along the centroid axis.

        Used as ``position_offset`` it puts the snap root on the face of the
        female body that looks back at the male body.
        """

        start = self.centroid(self.evaluate_selection(male))
        normal = normalize(self.centroid(self.evaluate_selection(female)) - start)
        points = np.asarray(self.evaluate_selection(female).dataset.points, dtype=float)
        return max(float(np.min((points - start) @ normal)), 0.0)

    def create_sketch_plane(self, plane: SketchPlane) -> Sketch:
        return Sketch(plane=plane)

    def add_polyline(self, sketch: Sketch, points: np.ndarray) -> None:
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        if pts.shape[0] < 2:
            raise KernelError("Polyline requires at least two points.")
        for i in range(pts.shape[0] - 1):
            sketch.add_segment(Line2D(pts[i], pts[i + 1]))

    def add_arc(
        self,
        sketch: Sketch,
        center: np.ndarray,
        radius: float,
        start_angle_deg: float,
        end_angle_deg: float,
        clockwise: bool = False,
    ) -> None:
        sketch.add_segment(
            Arc2D(
                center=center,
                radius=radius,
                start_angle_deg=start_angle_deg,
                end_angle_deg=end_angle_deg,
                clockwise=clockwise,
            )
        )

    def add_circle(self, sketch: Sketch, center: np.ndarray, radius: float) -> None:
        sketch.regions.append(make_circle(radius, center))

    def add_annulus(self, sketch: Sketch, center: np.ndarray, inner_radius: float, outer_radius: float) -> None:
        sketch.regions.append(make_annulus(inner_radius, outer_radius, center))

    def _record_solid(self, operation: str, meshes: Iterable[Mesh]) -> Solid:
        solid = Solid(id=next(_ids), operation=operation, mesh=combine_meshes(meshes))
        self.solids.append(solid)
        return solid

    def _sweep(self, operation: str, sketch: Sketch, direction: np.ndarray, depth: float) -> Solid:
        meshes = [
            linear_extrude(
                profile,
                sketch.plane,
                direction,
                depth,
                segments_per_circle=self.segments_per_circle,
            )
            for profile in sketch.profiles(self.segments_per_circle)
        ]
        return self._record_solid(operation, meshes)

    def extrude(self, sketch: Sketch, direction: np.ndarray, depth: float) -> Solid:
        return self._sweep("extrude", sketch, direction, depth)

    def cut(self, sketch: Sketch, direction: np.ndarray, depth: float) -> Solid:
        return self._sweep("cut", sketch, direction, depth)

    def revolve(
        self,
        sketch: Sketch,
        axis_origin: np.ndarray,
        axis_direction: np.ndarray,
        angle_deg: float,
    ) -> Solid:
        meshes = [
            rotate_extrude(
                profile,
                sketch.plane,
                axis_origin,
                axis_direction,
                angle_deg=angle_deg,
                segments=self.revolve_segments,
                segments_per_circle=self.segments_per_circle,
            )
            for profile in sketch.profiles(self.segments_per_circle)
        ]
        return self._record_solid("revolve", meshes)

    def adjacent_edges(self, solid: Solid, feature_angle: float = 30.0) -> EdgeSelection:
        edges = mesh_to_pyvista(solid.mesh).extract_feature_edges(
            feature_angle=feature_angle,
            boundary_edges=False,
            non_manifold_edges=False,
            manifold_edges=False,
            feature_edges=True,
        )
        return EdgeSelection(solid=solid, count=int(edges.n_cells))

    def created_faces(self, solid: Solid) -> FaceSelection:
        return FaceSelection(solid=solid, count=solid.mesh.n_faces)

    def _record_operation(self, kind: str, solid: Solid, **parameters: Any) -> Operation:
        operation = Operation(id=next(_ids), kind=kind, solid=solid, parameters=dict(parameters))
        self.history.append(operation)
        return operation

    def fillet(self, edges: EdgeSelection, radius: float) -> Operation:
        if radius <= 0:
            raise KernelError("Fillet radius must be positive.")
        return self._record_operation("fillet", edges.solid, radius=float(radius), edges=edges.count)

    def draft(self, faces: FaceSelection, angle_deg: float, pull_direction: Sequence[float]) -> Operation:
        pull = normalize(pull_direction)
        return self._record_operation(
            "draft",
            faces.solid,
            angle_deg=float(angle_deg),
            pull_direction=tuple(float(v) for v in pull),
            faces=faces.count,
        )

    def report_finding(self, severity: Severity, message: str) -> None:
        self.findings.append((severity, message))
        warnings.warn(message, RuntimeWarning)

    def realize(self, handles: Iterable[Any], base: str | None = None) -> Mesh:
        """Merge the additive solids in ``handles`` (plus ``base``) and subtract the cutters."""

        solids = [handle for handle in handles if isinstance(handle, Solid)]
        parts: list[pv.PolyData] = []
        if base is not None:
            parts.append(self.evaluate_selection(base).dataset.extract_surface().triangulate())
        parts.extend(mesh_to_pyvista(solid.mesh) for solid in solids if not solid.is_cutter)
        if not parts:
            raise KernelError("Nothing to realize: no body and no additive solids.")

        result = parts[0]
        for part in parts[1:]:
            result = result.merge(part)
        for solid in solids:
            if solid.is_cutter:
                result = _safe_difference(result, mesh_to_pyvista(solid.mesh))
        return mesh_from_pyvista(result)


def _prepare(mesh: pv.DataSet, tolerance: float) -> pv.PolyData:
    mesh = mesh.extract_surface().triangulate()
    mesh = mesh.clean(tolerance=tolerance, inplace=False)
    if mesh.n_cells > 0:
        mesh = mesh.compute_normals(
            cell_normals=True,
            point_normals=False,
            auto_orient_normals=True,
            consistent_normals=True,
            inplace=False,
        )
    return mesh


def _disjoint(a: pv.DataSet, b: pv.DataSet) -> bool:
    lo_a, hi_a = np.asarray(a.bounds[0::2]), np.asarray(a.bounds[1::2])
    lo_b, hi_b = np.asarray(b.bounds[0::2]), np.asarray(b.bounds[1::2])
    return bool(np.any(hi_a < lo_b) or np.any(hi_b < lo_a))


def _safe_difference(base: pv.DataSet, cutter: pv.DataSet, tolerance: float = 1e-4) -> pv.PolyData:
    if _disjoint(base, cutter):
        return base.copy()
    try:
        result = _prepare(base, tolerance).boolean_difference(_prepare(cutter, tolerance), tolerance=tolerance)
        result = _prepare(result, tolerance)
    except Exception as exc:
        warnings.warn(f"Boolean cut failed ({exc}); keeping the uncut preview.", RuntimeWarning)
        return base.copy()
    if result.n_cells == 0:
        warnings.warn("Boolean cut left an empty mesh; keeping the uncut preview.", RuntimeWarning)
        return base.copy()
    return result


def demo_bodies(
    gap: float = 20.0,
    size: Sequence[float] = (20.0, 20.0, 20.0),
    axis: Sequence[float] = (1.0, 0.0, 0.0),
) -> dict[str, pv.PolyData]:
    """Two blocks whose centers are ``gap`` apart along ``axis``.

    With the default size and gap the blocks touch, which is where
    ``MeshKernel.interface_offset`` puts the snap.
    """

    direction = normalize(axis)
    sx, sy, sz = as_vec3(size)
    male_center = np.zeros(3)
    female_center = direction * float(gap)

    def block(center: np.ndarray) -> pv.PolyData:
        return pv.Box(
            bounds=(
                center[0] - sx / 2.0,
                center[0] + sx / 2.0,
                center[1] - sy / 2.0,
                center[1] + sy / 2.0,
                center[2] - sz / 2.0,
                center[2] + sz / 2.0,
            )
        )

    return {"male": block(male_center), "female": block(female_center)}


__all__ = [
    "Body",
    "EdgeSelection",
    "FaceSelection",
    "KernelError",
    "MeshKernel",
    "Operation",
    "Sketch",
    "Solid",
    "demo_bodies",
]
