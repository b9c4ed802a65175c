from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Literal, Union

from snapfit._config import unit_settings_for
from snapfit.validation import InvalidParameter, validate_snap

SnapKind = Literal["cantilever", "cylindrical"]

# Angles are never unit-scaled.
_ANGLE_FIELDS = frozenset({"overhang_angle_deg"})


@dataclass(frozen=True)
class CantileverSnap:
    """Cantilever beam snap. Lengths in millimeters."""

    beam_length: float = 20.0
    beam_width: float = 5.0
    beam_thickness: float = 2.0
    snap_depth: float = 1.0
    clearance: float = 0.2
    overhang_angle_deg: float = 30.0
    position_offset: float = 0.0
    kind: Literal["cantilever"] = field(default="cantilever", init=False)

    def __post_init__(self) -> None:
        _coerce_floats(self)
        validate_snap(self)

    @property
    def governing_thickness(self) -> float:
        return self.beam_thickness


@dataclass(frozen=True)
class CylindricalSnap:
    """Cylindrical post-and-ring snap. Lengths in millimeters."""

    cylinder_diameter: float = 8.0
    post_height: float = 10.0
    ring_height: float = 12.0
    ring_thickness: float = 2.0
    snap_depth: float = 0.8
    clearance: float = 0.2
    overhang_angle_deg: float = 30.0
    position_offset: float = 0.0
    kind: Literal["cylindrical"] = field(default="cylindrical", init=False)

    def __post_init__(self) -> None:
        _coerce_floats(self)
        validate_snap(self)

    @property
    def radius(self) -> float:
        return self.cylinder_diameter / 2.0

    @property
    def governing_thickness(self) -> float:
        return self.ring_thickness


SnapParameters = Union[CantileverSnap, CylindricalSnap]

_KINDS: dict[str, type] = {
    "cantilever": CantileverSnap,
    "cylindrical": CylindricalSnap,
}


def _coerce_floats(params: SnapParameters) -> None:
    for item in fields(params):
        if item.name == "kind":
            continue
        value = getattr(params, item.name)
        try:
            object.__setattr__(params, item.name, float(value))
        except (TypeError, ValueError) as exc:
            raise InvalidParameter(f"{item.name} must be a number.") from exc


def _resolve_kind(kind: str) -> type:
    key = kind.strip().lower()
    if key not in _KINDS:
        raise InvalidParameter(f"Unsupported snap kind '{kind}'.")
    return _KINDS[key]


def default_for(kind: SnapKind = "cantilever") -> SnapParameters:
    """Return a printable default parameter set for ``kind``."""

    return _resolve_kind(kind)()


def make_snap(kind: SnapKind = "cantilever", **values: float) -> SnapParameters:
    """Build parameters for ``kind``; unspecified fields keep their defaults."""

    cls = _resolve_kind(kind)
    allowed = {item.name for item in fields(cls) if item.init}
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise InvalidParameter(f"Unknown {kind} parameter(s): {', '.join(unknown)}.")
    return cls(**values)


def from_units(kind: SnapKind = "cantilever", *, units: str = "millimeters", **values: float) -> SnapParameters:
    """Build parameters from lengths expressed in ``units`` (angles stay in degrees)."""

    try:
        scale = unit_settings_for(units).scale_to_mm
    except ValueError as exc:
        raise InvalidParameter(str(exc)) from exc
    converted = {}
    for name, value in values.items():
        converted[name] = value if name in _ANGLE_FIELDS else float(value) * scale
    return make_snap(kind, **converted)


__all__ = [
    "CantileverSnap",
    "CylindricalSnap",
    "SnapKind",
    "SnapParameters",
    "default_for",
    "from_units",
    "make_snap",
]
