from __future__ import annotations

from typing import Any

import numpy as np


class RecordingKernel:
    """GeometryKernel stand-in that logs every call and hands back string handles."""

    def __init__(self, centroids: dict[str, Any] | None = None) -> None:
        self.centroids = centroids or {"male": (0.0, 0.0, 0.0), "female": (0.0, 0.0, 40.0)}
        self.calls: list[tuple[str, tuple]] = []
        self.sketches: list[dict[str, Any]] = []
        self.findings: list[tuple[str, str]] = []

    def _record(self, name: str, *args: Any) -> str:
        self.calls.append((name, args))
        return f"{name}-{len(self.calls)}"

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def evaluate_selection(self, query):
        self._record("evaluate_selection", query)
        return query

    def centroid(self, handle):
        self._record("centroid", handle)
        return np.asarray(self.centroids[handle], dtype=float)

    def create_sketch_plane(self, plane):
        self._record("create_sketch_plane", plane)
        sketch = {"plane": plane, "items": []}
        self.sketches.append(sketch)
        return sketch

    def add_polyline(self, sketch, points):
        self._record("add_polyline", sketch, points)
        sketch["items"].append(("polyline", np.asarray(points, dtype=float)))

    def add_arc(self, sketch, center, radius, start_angle_deg, end_angle_deg, clockwise=False):
        self._record("add_arc", sketch, center, radius)
        sketch["items"].append(("arc", float(radius)))

    def add_circle(self, sketch, center, radius):
        self._record("add_circle", sketch, center, radius)
        sketch["items"].append(("circle", float(radius)))

    def add_annulus(self, sketch, center, inner_radius, outer_radius):
        self._record("add_annulus", sketch, center, inner_radius, outer_radius)
        sketch["items"].append(("annulus", float(inner_radius), float(outer_radius)))

    def extrude(self, sketch, direction, depth):
        return self._record("extrude", sketch, direction, depth)

    def cut(self, sketch, direction, depth):
        return self._record("cut", sketch, direction, depth)

    def revolve(self, sketch, axis_origin, axis_direction, angle_deg):
        return self._record("revolve", sketch, axis_origin, axis_direction, angle_deg)

    def fillet(self, edges, radius):
        return self._record("fillet", edges, radius)

    def draft(self, faces, angle_deg, pull_direction):
        return self._record("draft", faces, angle_deg, pull_direction)

    def adjacent_edges(self, solid):
        return self._record("adjacent_edges", solid)

    def created_faces(self, solid):
        return self._record("created_faces", solid)

    def report_finding(self, severity, message):
        self._record("report_finding", severity, message)
        self.findings.append((severity, message))

    def args_of(self, name: str) -> list[tuple]:
        return [args for call, args in self.calls if call == name]
