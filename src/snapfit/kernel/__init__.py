"""Capability interface the feature orchestrator drives.

Any CAD host can back a snap-fit feature by providing these operations; the
orchestrator never inspects the handles it gets back.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np

from snapfit.frame import SketchPlane
from snapfit.printability import Severity

GeometryHandle = Any
SketchHandle = Any
SolidHandle = Any
EdgeSet = Any
FaceSet = Any


@runtime_checkable
class GeometryKernel(Protocol):
    def evaluate_selection(self, query: Any) -> GeometryHandle: ...

    def centroid(self, handle: GeometryHandle) -> Sequence[float]: ...

    def create_sketch_plane(self, plane: SketchPlane) -> SketchHandle: ...

    def add_polyline(self, sketch: SketchHandle, points: np.ndarray) -> None: ...

    def add_arc(
        self,
        sketch: SketchHandle,
        center: np.ndarray,
        radius: float,
        start_angle_deg: float,
        end_angle_deg: float,
        clockwise: bool = False,
    ) -> None: ...

    def add_circle(self, sketch: SketchHandle, center: np.ndarray, radius: float) -> None: ...

    def add_annulus(
        self,
        sketch: SketchHandle,
        center: np.ndarray,
        inner_radius: float,
        outer_radius: float,
    ) -> None: ...

    def extrude(self, sketch: SketchHandle, direction: np.ndarray, depth: float) -> SolidHandle: ...

    def cut(self, sketch: SketchHandle, direction: np.ndarray, depth: float) -> SolidHandle: ...

    def revolve(
        self,
        sketch: SketchHandle,
        axis_origin: np.ndarray,
        axis_direction: np.ndarray,
        angle_deg: float,
    ) -> SolidHandle: ...

    def fillet(self, edges: EdgeSet, radius: float) -> SolidHandle: ...

    def draft(self, faces: FaceSet, angle_deg: float, pull_direction: np.ndarray) -> SolidHandle: ...

    def adjacent_edges(self, solid: SolidHandle) -> EdgeSet: ...

    def created_faces(self, solid: SolidHandle) -> FaceSet: ...

    def report_finding(self, severity: Severity, message: str) -> None: ...


__all__ = [
    "EdgeSet",
    "FaceSet",
    "GeometryHandle",
    "GeometryKernel",
    "SketchHandle",
    "SolidHandle",
]
