"""2D layout of male and female snap profiles in frame-local coordinates.

Sketch-plane steps use x along the frame's lateral axis and y along its
binormal; they are extruded or cut along the frame normal starting at
``offset``. Axial-plane steps use x as the radial distance from the normal
axis and y as the position along it; they are revolved about the normal.

Nothing here validates parameters; callers validate first.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from snapfit.drawing2d import (
    Bounds2D,
    Profile2D,
    _merge_bounds,
    chamfer_corner,
    make_annulus,
    make_circle,
    make_polygon,
    make_rect,
    round_corners,
)
from snapfit.params import CantileverSnap, CylindricalSnap, SnapParameters

ProfileSide = Literal["male", "female"]
StepOperation = Literal["extrude", "cut", "revolve"]
StepPlane = Literal["sketch", "axial"]

MAX_TIP_CHAMFER = 1.0
TIP_CHAMFER_RATIO = 0.2
LIP_FILLET_RATIO = 0.25


@dataclass(frozen=True)
class ProfileStep:
    """One sketch plus the operation that turns it into solid geometry."""

    name: str
    operation: StepOperation
    profile: Profile2D
    depth: float = 0.0
    offset: float = 0.0
    plane: StepPlane = "sketch"
    angle_deg: float = 360.0


@dataclass(frozen=True)
class SnapProfile:
    side: ProfileSide
    steps: tuple[ProfileStep, ...]

    def step(self, name: str) -> ProfileStep:
        for item in self.steps:
            if item.name == name:
                return item
        raise KeyError(name)

    def envelope(self) -> Bounds2D:
        """Bounds of every sketch-plane step as (xmin, ymin, xmax, ymax)."""
        return _merge_bounds(item.profile.bounds() for item in self.steps if item.plane == "sketch")


@dataclass(frozen=True)
class SnapProfiles:
    male: SnapProfile
    female: SnapProfile


def tip_chamfer_size(beam_thickness: float) -> float:
    return min(TIP_CHAMFER_RATIO * beam_thickness, MAX_TIP_CHAMFER)


def entrance_chamfer_size(params: CantileverSnap) -> float:
    return math.tan(math.radians(params.overhang_angle_deg)) * params.beam_thickness


def mouth_chamfer_limit(beam_thickness: float, clearance: float) -> float:
    """Largest cavity mouth chamfer that stays ``clearance`` away from the hook tip chamfer.

    Both chamfers run at 45 degrees, so the cavity cut line is the hook
    chamfer line pushed out by ``clearance`` along its normal.
    """
    return tip_chamfer_size(beam_thickness) + (2.0 - math.sqrt(2.0)) * clearance


def _cantilever_profiles(params: CantileverSnap) -> SnapProfiles:
    length = params.beam_length
    width = params.beam_width
    thickness = params.beam_thickness
    depth = params.snap_depth
    clearance = params.clearance
    tip_x = length + depth

    base = make_rect(size=(width, thickness), center=(-width / 2.0, thickness / 2.0))
    hook_points = [
        (0.0, 0.0),
        (length, 0.0),
        (length, thickness / 2.0),
        (tip_x, thickness / 2.0),
        (tip_x, thickness),
        (0.0, thickness),
    ]
    hook = make_polygon(chamfer_corner(hook_points, 4, tip_chamfer_size(thickness)))

    xmin, xmax = -width - clearance, tip_x + clearance
    ymin, ymax = -clearance, thickness + clearance
    cavity_points = [(xmin, ymin), (xmax, ymin), (xmax, ymax), (xmin, ymax)]
    mouth = min(
        entrance_chamfer_size(params),
        mouth_chamfer_limit(thickness, clearance),
        0.5 * min(xmax - xmin, ymax - ymin),
    )
    cavity = make_polygon(chamfer_corner(cavity_points, 2, mouth))

    male = SnapProfile(
        side="male",
        steps=(
            ProfileStep("beam_base", "extrude", base, depth=width),
            ProfileStep("hook", "extrude", hook, depth=width),
        ),
    )
    female = SnapProfile(
        side="female",
        steps=(ProfileStep("cavity", "cut", cavity, depth=width + 2.0 * clearance, offset=-clearance),),
    )
    return SnapProfiles(male=male, female=female)


def _lip_profile(params: CylindricalSnap) -> Profile2D:
    radius = params.radius
    height = params.post_height
    depth = params.snap_depth
    ramp = depth / math.tan(math.radians(params.overhang_angle_deg))
    points = [
        (radius, height),
        (radius + depth, height - ramp),
        (radius, height - ramp),
    ]
    outer = round_corners(points, radius=LIP_FILLET_RATIO * depth, closed=True, only=[1])
    return Profile2D(outer=outer)


def _cylindrical_profiles(params: CylindricalSnap) -> SnapProfiles:
    radius = params.radius
    depth = params.snap_depth
    clearance = params.clearance
    bore = radius - clearance

    male = SnapProfile(
        side="male",
        steps=(
            ProfileStep("post", "extrude", make_circle(radius), depth=params.post_height),
            ProfileStep("lip", "revolve", _lip_profile(params), plane="axial", angle_deg=360.0),
        ),
    )
    ring_outer = radius + depth + params.ring_thickness + clearance
    female = SnapProfile(
        side="female",
        steps=(
            ProfileStep("ring", "extrude", make_annulus(bore, ring_outer), depth=params.ring_height),
            ProfileStep(
                "groove",
                "cut",
                make_annulus(bore, radius + depth + clearance),
                depth=depth + clearance,
                offset=params.post_height - 0.5 * depth,
            ),
            ProfileStep(
                "entry_chamfer",
                "cut",
                make_annulus(bore, radius + depth / 2.0),
                depth=depth / 2.0,
                offset=0.0,
            ),
        ),
    )
    return SnapProfiles(male=male, female=female)


def generate_profiles(params: SnapParameters) -> SnapProfiles:
    """Lay out the male and female profiles for ``params``."""

    if isinstance(params, CantileverSnap):
        return _cantilever_profiles(params)
    if isinstance(params, CylindricalSnap):
        return _cylindrical_profiles(params)
    raise TypeError(f"Unsupported snap parameters: {type(params).__name__}")


__all__ = [
    "ProfileStep",
    "SnapProfile",
    "SnapProfiles",
    "entrance_chamfer_size",
    "generate_profiles",
    "mouth_chamfer_limit",
    "tip_chamfer_size",
]
