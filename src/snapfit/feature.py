from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from snapfit._config import get_feature_defaults
from snapfit.drawing2d import Arc2D, Line2D, Path2D, Profile2D
from snapfit.frame import Frame, build_frame
from snapfit.kernel import GeometryKernel, SolidHandle
from snapfit.params import SnapParameters
from snapfit.printability import DEFAULT_NOZZLE_DIAMETER, Finding, analyze_printability
from snapfit.profiles import ProfileStep, SnapProfile, generate_profiles
from snapfit.validation import InvalidParameter, validate_snap

FILLET_THICKNESS_RATIO = 0.2
PULL_DIRECTION = (0.0, 0.0, 1.0)

# Step whose root edges carry the bending stress.
_STRESS_STEP = {"cantilever": "hook", "cylindrical": "post"}


@dataclass(frozen=True)
class PostProcessOptions:
    """Optional kernel-side finishing. Radius in millimeters, angle in degrees."""

    add_fillets: bool = False
    fillet_radius: float = 0.5
    add_draft_angles: bool = False
    draft_angle_deg: float = 1.0
    pull_direction: tuple[float, float, float] = PULL_DIRECTION
    nozzle_diameter: float = DEFAULT_NOZZLE_DIAMETER

    @classmethod
    def from_config(cls, *, add_fillets: bool = False, add_draft_angles: bool = False) -> "PostProcessOptions":
        defaults = get_feature_defaults()
        return cls(
            add_fillets=add_fillets,
            fillet_radius=defaults.fillet_radius,
            add_draft_angles=add_draft_angles,
            draft_angle_deg=defaults.draft_angle_deg,
            nozzle_diameter=defaults.nozzle_diameter,
        )

    def validate(self) -> None:
        if self.add_fillets and not self.fillet_radius > 0:
            raise InvalidParameter("fillet_radius must be > 0.")
        if self.add_draft_angles and not (0.0 < self.draft_angle_deg < 90.0):
            raise InvalidParameter("draft_angle_deg must be in (0, 90).")
        if self.add_draft_angles and float(np.linalg.norm(np.asarray(self.pull_direction, dtype=float))) == 0:
            raise InvalidParameter("pull_direction must be non-zero.")


@dataclass(frozen=True)
class FeatureResult:
    """Kernel handles created for each side, in creation order."""

    male_features: tuple[SolidHandle, ...] = ()
    female_features: tuple[SolidHandle, ...] = ()


def fillet_radius_for(params: SnapParameters, requested: float) -> float:
    return min(requested, FILLET_THICKNESS_RATIO * params.governing_thickness)


def _flush_polyline(kernel: GeometryKernel, sketch: Any, points: list[np.ndarray]) -> None:
    if len(points) >= 2:
        kernel.add_polyline(sketch, np.vstack(points))


def _draw_path(kernel: GeometryKernel, sketch: Any, path: Path2D) -> None:
    run: list[np.ndarray] = []
    for segment in path.segments:
        if isinstance(segment, Line2D):
            if not run:
                run.append(segment.start)
            run.append(segment.end)
            continue
        _flush_polyline(kernel, sketch, run)
        run = []
        if isinstance(segment, Arc2D) and segment.is_full_circle:
            kernel.add_circle(sketch, segment.center, segment.radius)
        else:
            kernel.add_arc(
                sketch,
                segment.center,
                segment.radius,
                segment.start_angle_deg,
                segment.end_angle_deg,
                segment.clockwise,
            )
    _flush_polyline(kernel, sketch, run)


def _draw_profile(kernel: GeometryKernel, sketch: Any, profile: Profile2D) -> None:
    if profile.is_annulus:
        outer = profile.outer.segments[0]
        inner = profile.holes[0].segments[0]
        kernel.add_annulus(sketch, outer.center, inner.radius, outer.radius)
        return
    _draw_path(kernel, sketch, profile.outer)
    for hole in profile.holes:
        _draw_path(kernel, sketch, hole)


def _realize_step(kernel: GeometryKernel, frame: Frame, step: ProfileStep) -> SolidHandle:
    plane = frame.axial_plane() if step.plane == "axial" else frame.sketch_plane(step.offset)
    sketch = kernel.create_sketch_plane(plane)
    _draw_profile(kernel, sketch, step.profile)
    if step.operation == "extrude":
        return kernel.extrude(sketch, frame.normal, step.depth)
    if step.operation == "cut":
        return kernel.cut(sketch, frame.normal, step.depth)
    if step.operation == "revolve":
        return kernel.revolve(sketch, frame.origin, frame.normal, step.angle_deg)
    raise ValueError(f"Unsupported profile operation '{step.operation}'.")


def _realize_side(kernel: GeometryKernel, frame: Frame, side: SnapProfile) -> dict[str, SolidHandle]:
    return {step.name: _realize_step(kernel, frame, step) for step in side.steps}


def _post_process(
    kernel: GeometryKernel,
    params: SnapParameters,
    male: dict[str, SolidHandle],
    options: PostProcessOptions,
) -> tuple[SolidHandle, ...]:
    extra: list[SolidHandle] = []
    if options.add_fillets:
        target = male[_STRESS_STEP[params.kind]]
        radius = fillet_radius_for(params, options.fillet_radius)
        extra.append(kernel.fillet(kernel.adjacent_edges(target), radius))
    if options.add_draft_angles:
        pull = np.asarray(options.pull_direction, dtype=float)
        pull = pull / np.linalg.norm(pull)
        for handle in male.values():
            extra.append(kernel.draft(kernel.created_faces(handle), options.draft_angle_deg, pull))
    return tuple(extra)


def generate_snap_fit(
    kernel: GeometryKernel,
    male_selection: Any,
    female_selection: Any,
    params: SnapParameters,
    options: PostProcessOptions | None = None,
) -> tuple[FeatureResult, list[Finding]]:
    """Build a snap-fit between two bodies and return the created handles plus printability findings.

    Parameters are validated before the kernel is touched. Frame errors are
    raised after the centroid queries but before any sketch exists. Kernel
    errors propagate unchanged.
    """

    options = options or PostProcessOptions()
    validate_snap(params)
    options.validate()

    male_body = kernel.evaluate_selection(male_selection)
    female_body = kernel.evaluate_selection(female_selection)
    frame = build_frame(kernel.centroid(male_body), kernel.centroid(female_body), params.position_offset)

    profiles = generate_profiles(params)
    male = _realize_side(kernel, frame, profiles.male)
    female = _realize_side(kernel, frame, profiles.female)
    finishing = _post_process(kernel, params, male, options)

    findings = analyze_printability(params, nozzle_diameter=options.nozzle_diameter)
    for finding in findings:
        kernel.report_finding(finding.severity, finding.message)

    result = FeatureResult(
        male_features=tuple(male.values()) + finishing,
        female_features=tuple(female.values()),
    )
    return result, findings


__all__ = [
    "FeatureResult",
    "PostProcessOptions",
    "fillet_radius_for",
    "generate_snap_fit",
]
