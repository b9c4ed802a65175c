from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from snapfit.params import SnapParameters

MIN_OVERHANG_DEG = 10.0
MAX_OVERHANG_DEG = 60.0


class SnapFitError(ValueError):
    """Base error for snap-fit generation failures."""


class InvalidParameter(SnapFitError):
    """Raised when snap parameters are not physically meaningful."""


class DegenerateGeometry(SnapFitError):
    """Raised when placement geometry collapses (coincident points, zero vectors)."""


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidParameter(f"{name} must be finite.")


def _require_positive(name: str, value: float) -> None:
    _require_finite(name, value)
    if value <= 0:
        raise InvalidParameter(f"{name} must be > 0.")


def _require_non_negative(name: str, value: float) -> None:
    _require_finite(name, value)
    if value < 0:
        raise InvalidParameter(f"{name} must be >= 0.")


def validate_snap(params: "SnapParameters") -> None:
    """Check every invariant of a parameter set, raising InvalidParameter on the first violation."""

    _require_non_negative("position_offset", params.position_offset)
    _require_non_negative("clearance", params.clearance)
    _require_positive("snap_depth", params.snap_depth)
    _require_finite("overhang_angle_deg", params.overhang_angle_deg)
    if not (MIN_OVERHANG_DEG <= params.overhang_angle_deg <= MAX_OVERHANG_DEG):
        raise InvalidParameter(
            f"overhang_angle_deg must be in [{MIN_OVERHANG_DEG:g}, {MAX_OVERHANG_DEG:g}]."
        )

    if params.kind == "cantilever":
        _require_positive("beam_length", params.beam_length)
        _require_positive("beam_width", params.beam_width)
        _require_positive("beam_thickness", params.beam_thickness)
    elif params.kind == "cylindrical":
        _require_positive("cylinder_diameter", params.cylinder_diameter)
        _require_positive("post_height", params.post_height)
        _require_positive("ring_height", params.ring_height)
        _require_positive("ring_thickness", params.ring_thickness)
        # Female bore is inset by the clearance; it has to stay open.
        if params.clearance >= params.cylinder_diameter / 2.0:
            raise InvalidParameter("clearance must be smaller than the cylinder radius.")
    else:
        raise InvalidParameter(f"Unsupported snap kind '{params.kind}'.")
