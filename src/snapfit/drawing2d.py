from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np

Bounds2D = tuple[float, float, float, float]


def _to_vec2(value: Sequence[float]) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(2)
    return arr


def _require_vec2(value: Sequence[float], label: str) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float).reshape(2)
    except Exception as exc:
        raise ValueError(f"{label} must be a 2D coordinate.") from exc
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{label} must be finite.")
    return arr


def _merge_bounds(items: Iterable[Bounds2D]) -> Bounds2D:
    boxes = list(items)
    if not boxes:
        return (0.0, 0.0, 0.0, 0.0)
    arr = np.asarray(boxes, dtype=float)
    return (float(arr[:, 0].min()), float(arr[:, 1].min()), float(arr[:, 2].max()), float(arr[:, 3].max()))


@dataclass(frozen=True)
class Line2D:
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _require_vec2(self.start, "start"))
        object.__setattr__(self, "end", _require_vec2(self.end, "end"))

    def sample(self) -> np.ndarray:
        return np.vstack([self.start, self.end])

    def bounds(self) -> Bounds2D:
        pts = self.sample()
        return (float(pts[:, 0].min()), float(pts[:, 1].min()), float(pts[:, 0].max()), float(pts[:, 1].max()))


@dataclass(frozen=True)
class Arc2D:
    center: np.ndarray
    radius: float
    start_angle_deg: float
    end_angle_deg: float
    clockwise: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _require_vec2(self.center, "center"))
        if not np.isfinite(self.radius) or self.radius <= 0:
            raise ValueError("radius must be positive.")

    @property
    def is_full_circle(self) -> bool:
        return bool(np.isclose(abs(self.end_angle_deg - self.start_angle_deg), 360.0))

    def _sweep(self) -> tuple[float, float]:
        start = np.deg2rad(self.start_angle_deg)
        end = np.deg2rad(self.end_angle_deg)
        if self.clockwise:
            if end > start:
                end -= 2 * np.pi
        else:
            if end < start:
                end += 2 * np.pi
        return float(start), float(end)

    def sample(self, segments_per_circle: int) -> np.ndarray:
        if segments_per_circle < 3:
            raise ValueError("segments_per_circle must be >= 3.")
        start, end = self._sweep()
        span = abs(end - start)
        steps = max(int(np.ceil(segments_per_circle * (span / (2 * np.pi)))), 2)
        angles = np.linspace(start, end, steps, endpoint=True)
        x = self.center[0] + self.radius * np.cos(angles)
        y = self.center[1] + self.radius * np.sin(angles)
        return np.column_stack([x, y])

    def bounds(self) -> Bounds2D:
        start, end = self._sweep()
        lo, hi = min(start, end), max(start, end)
        angles = [start, end]
        # Cardinal directions crossed by the sweep extend the box.
        k = np.ceil(lo / (np.pi / 2.0))
        while k * (np.pi / 2.0) <= hi + 1e-12:
            angles.append(k * (np.pi / 2.0))
            k += 1
        arr = np.asarray(angles)
        x = self.center[0] + self.radius * np.cos(arr)
        y = self.center[1] + self.radius * np.sin(arr)
        return (float(x.min()), float(y.min()), float(x.max()), float(y.max()))


Segment2D = Line2D | Arc2D


@dataclass
class Path2D:
    segments: List[Segment2D] = field(default_factory=list)
    closed: bool = False

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: bool = True) -> "Path2D":
        pts = [_require_vec2(p, "point") for p in points]
        if len(pts) < 2:
            raise ValueError("Path2D requires at least two points.")
        segments: list[Segment2D] = [Line2D(pts[i], pts[i + 1]) for i in range(len(pts) - 1)]
        if closed and not np.allclose(pts[0], pts[-1]):
            segments.append(Line2D(pts[-1], pts[0]))
        return cls(segments=segments, closed=closed)

    def sample(self, segments_per_circle: int = 64) -> np.ndarray:
        if not self.segments:
            return np.zeros((0, 2), dtype=float)
        points = []
        for idx, segment in enumerate(self.segments):
            if isinstance(segment, Line2D):
                seg_points = segment.sample()
            else:
                seg_points = segment.sample(segments_per_circle)
            if idx > 0 and seg_points.shape[0] > 0:
                seg_points = seg_points[1:]
            points.append(seg_points)
        pts = np.vstack(points)
        if self.closed and pts.shape[0] > 0 and not np.allclose(pts[0], pts[-1]):
            pts = np.vstack([pts, pts[0]])
        return pts

    def bounds(self) -> Bounds2D:
        return _merge_bounds(segment.bounds() for segment in self.segments)


def _line_intersection(p1: np.ndarray, d1: np.ndarray, p2: np.ndarray, d2: np.ndarray) -> np.ndarray | None:
    """Return the intersection point for two 2D lines (point+direction)."""
    cross = d1[0] * d2[1] - d1[1] * d2[0]
    if abs(cross) < 1e-9:
        return None
    t = ((p2[0] - p1[0]) * d2[1] - (p2[1] - p1[1]) * d2[0]) / cross
    return p1 + d1 * t


def round_corners(
    points: Iterable[Sequence[float]],
    radius: float,
    closed: bool = True,
    clamp: bool = True,
    only: Iterable[int] | None = None,
) -> Path2D:
    """Round sharp polyline corners with true arcs.

    ``only`` restricts rounding to the given vertex indices.
    """
    pts = [_require_vec2(p, "point") for p in points]
    if closed and len(pts) > 1 and np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    if len(pts) < (3 if closed else 2):
        raise ValueError("round_corners requires at least three points for closed paths.")
    if radius <= 0:
        raise ValueError("radius must be positive.")
    selected = None if only is None else set(only)

    n = len(pts)
    corners: list[dict[str, np.ndarray | float | bool] | None] = [None] * n
    for i in range(n):
        if not closed and (i == 0 or i == n - 1):
            continue
        if selected is not None and i not in selected:
            continue
        prev = pts[i - 1 if i > 0 else n - 1]
        curr = pts[i]
        nxt = pts[(i + 1) % n]
        v1 = curr - prev
        v2 = nxt - curr
        len1 = np.linalg.norm(v1)
        len2 = np.linalg.norm(v2)
        if len1 < 1e-9 or len2 < 1e-9:
            continue
        u1 = v1 / len1
        u2 = v2 / len2
        dot = float(np.clip(np.dot(u1, u2), -1.0, 1.0))
        angle = float(np.arccos(dot))
        if angle < 1e-6 or abs(np.pi - angle) < 1e-6:
            continue

        max_r = min(len1, len2) / max(np.tan(angle / 2.0), 1e-9)
        r = float(radius)
        if r > max_r:
            if clamp:
                r = max_r
            else:
                continue
        if r <= 0:
            continue

        cross = u1[0] * u2[1] - u1[1] * u2[0]
        if abs(cross) < 1e-9:
            continue
        sign = 1.0 if cross > 0 else -1.0
        n1 = sign * np.array([-u1[1], u1[0]])
        n2 = sign * np.array([-u2[1], u2[0]])
        p1 = curr + n1 * r
        p2 = curr + n2 * r
        center = _line_intersection(p1, u1, p2, u2)
        if center is None:
            continue

        t1 = curr + u1 * np.dot(u1, center - curr)
        t2 = curr + u2 * np.dot(u2, center - curr)
        start = float(np.degrees(np.arctan2(t1[1] - center[1], t1[0] - center[0])))
        end = float(np.degrees(np.arctan2(t2[1] - center[1], t2[0] - center[0])))
        corners[i] = {
            "t1": t1,
            "t2": t2,
            "center": center,
            "radius": float(np.linalg.norm(t1 - center)),
            "start": start,
            "end": end,
            "clockwise": cross < 0,
        }

    def _arc(corner: dict) -> Arc2D:
        return Arc2D(
            center=corner["center"],
            radius=corner["radius"],
            start_angle_deg=corner["start"],
            end_angle_deg=corner["end"],
            clockwise=bool(corner["clockwise"]),
        )

    segments: list[Segment2D] = []
    if closed:
        start_point = corners[0]["t1"] if corners[0] is not None else pts[0]
        prev_anchor = start_point
        for i in range(n):
            corner = corners[i]
            if corner is None:
                line_end = pts[i]
                if not np.allclose(prev_anchor, line_end):
                    segments.append(Line2D(prev_anchor, line_end))
                prev_anchor = line_end
                continue
            t1 = corner["t1"]
            if not np.allclose(prev_anchor, t1):
                segments.append(Line2D(prev_anchor, t1))
            segments.append(_arc(corner))
            prev_anchor = corner["t2"]
        if not np.allclose(prev_anchor, start_point):
            segments.append(Line2D(prev_anchor, start_point))
        return Path2D(segments=segments, closed=True)

    prev_anchor = pts[0]
    for i in range(1, n - 1):
        corner = corners[i]
        if corner is None:
            line_end = pts[i]
            if not np.allclose(prev_anchor, line_end):
                segments.append(Line2D(prev_anchor, line_end))
            prev_anchor = line_end
            continue
        t1 = corner["t1"]
        if not np.allclose(prev_anchor, t1):
            segments.append(Line2D(prev_anchor, t1))
        segments.append(_arc(corner))
        prev_anchor = corner["t2"]

    if not np.allclose(prev_anchor, pts[-1]):
        segments.append(Line2D(prev_anchor, pts[-1]))
    return Path2D(segments=segments, closed=False)


def chamfer_corner(points: Sequence[Sequence[float]], index: int, size: float) -> list[np.ndarray]:
    """Replace the corner at ``index`` of a closed polygon with a straight cut.

    ``size`` is measured along both adjacent edges and is clamped to each edge length.
    """
    pts = [_require_vec2(p, "point") for p in points]
    n = len(pts)
    if n < 3:
        raise ValueError("chamfer_corner requires at least three points.")
    if size <= 0:
        return pts
    curr = pts[index]
    prev = pts[index - 1]
    nxt = pts[(index + 1) % n]
    to_prev = prev - curr
    to_next = nxt - curr
    len_prev = float(np.linalg.norm(to_prev))
    len_next = float(np.linalg.norm(to_next))
    if len_prev < 1e-9 or len_next < 1e-9:
        raise ValueError("chamfer_corner found a zero-length edge.")
    a = curr + to_prev / len_prev * min(size, len_prev)
    b = curr + to_next / len_next * min(size, len_next)
    return pts[:index] + [a, b] + pts[index + 1 :]


@dataclass
class Profile2D:
    outer: Path2D
    holes: List[Path2D] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.outer.closed:
            raise ValueError("Profile2D outer path must be closed.")
        for hole in self.holes:
            if not hole.closed:
                raise ValueError("Profile2D hole paths must be closed.")

    def bounds(self) -> Bounds2D:
        return self.outer.bounds()

    @property
    def is_circle(self) -> bool:
        return (
            not self.holes
            and len(self.outer.segments) == 1
            and isinstance(self.outer.segments[0], Arc2D)
            and self.outer.segments[0].is_full_circle
        )

    @property
    def is_annulus(self) -> bool:
        if len(self.holes) != 1 or len(self.outer.segments) != 1 or len(self.holes[0].segments) != 1:
            return False
        outer = self.outer.segments[0]
        inner = self.holes[0].segments[0]
        return (
            isinstance(outer, Arc2D)
            and isinstance(inner, Arc2D)
            and outer.is_full_circle
            and inner.is_full_circle
            and bool(np.allclose(outer.center, inner.center))
        )


def make_rect(
    size: Sequence[float] = (1.0, 1.0),
    center: Sequence[float] = (0.0, 0.0),
) -> Profile2D:
    sx, sy = float(size[0]), float(size[1])
    if sx <= 0 or sy <= 0:
        raise ValueError("size must be positive.")
    cx, cy = _to_vec2(center)
    hx, hy = sx / 2.0, sy / 2.0
    points = [
        (cx - hx, cy - hy),
        (cx + hx, cy - hy),
        (cx + hx, cy + hy),
        (cx - hx, cy + hy),
    ]
    return Profile2D(outer=Path2D.from_points(points, closed=True))


def make_circle(
    radius: float = 0.5,
    center: Sequence[float] = (0.0, 0.0),
) -> Profile2D:
    if radius <= 0:
        raise ValueError("radius must be positive.")
    center_vec = _to_vec2(center)
    arc = Arc2D(center=center_vec, radius=float(radius), start_angle_deg=0.0, end_angle_deg=360.0)
    return Profile2D(outer=Path2D(segments=[arc], closed=True))


def make_annulus(
    inner_radius: float,
    outer_radius: float,
    center: Sequence[float] = (0.0, 0.0),
) -> Profile2D:
    if inner_radius <= 0:
        raise ValueError("inner_radius must be positive.")
    if outer_radius <= inner_radius:
        raise ValueError("outer_radius must be larger than inner_radius.")
    outer = make_circle(outer_radius, center).outer
    hole = make_circle(inner_radius, center).outer
    return Profile2D(outer=outer, holes=[hole])


def make_polygon(points: Iterable[Sequence[float]]) -> Profile2D:
    pts = list(points)
    if len(pts) < 3:
        raise ValueError("make_polygon requires at least three points.")
    return Profile2D(outer=Path2D.from_points(pts, closed=True))


__all__ = [
    "Arc2D",
    "Line2D",
    "Path2D",
    "Profile2D",
    "chamfer_corner",
    "make_annulus",
    "make_circle",
    "make_polygon",
    "make_rect",
    "round_corners",
]
