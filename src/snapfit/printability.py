from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Iterable, Literal

from snapfit.params import CantileverSnap, SnapParameters

Severity = Literal["warning"]

MIN_WALL_THICKNESS = 0.8
MAX_UNSUPPORTED_OVERHANG_DEG = 45.0
MAX_CANTILEVER_STRAIN = 0.05
DEFAULT_NOZZLE_DIAMETER = 0.4


@dataclass(frozen=True)
class Finding:
    """Advisory printability note; never blocks generation."""

    severity: Severity
    code: str
    message: str


def _warning(code: str, message: str) -> Finding:
    return Finding(severity="warning", code=code, message=message)


def cantilever_strain(params: CantileverSnap) -> float:
    return params.snap_depth / params.beam_length


def analyze_printability(
    params: SnapParameters,
    *,
    nozzle_diameter: float = DEFAULT_NOZZLE_DIAMETER,
) -> list[Finding]:
    """Run every printability check against the parameters and collect the findings."""

    findings: list[Finding] = []

    thickness = params.governing_thickness
    if thickness < MIN_WALL_THICKNESS:
        findings.append(
            _warning(
                "thin_wall",
                f"Wall thickness too thin: {thickness:.2f}mm is below the {MIN_WALL_THICKNESS:.2f}mm minimum.",
            )
        )

    if params.overhang_angle_deg > MAX_UNSUPPORTED_OVERHANG_DEG:
        findings.append(
            _warning(
                "overhang",
                f"Overhang of {params.overhang_angle_deg:.1f}° may require supports.",
            )
        )

    if isinstance(params, CantileverSnap):
        strain = cantilever_strain(params)
        if strain > MAX_CANTILEVER_STRAIN:
            findings.append(
                _warning(
                    "strain",
                    f"Strain estimate {strain:.3f} exceeds {MAX_CANTILEVER_STRAIN:.3f}; deflection may be too high.",
                )
            )

    if nozzle_diameter > 0 and params.snap_depth < nozzle_diameter:
        findings.append(
            _warning(
                "min_feature",
                f"Snap depth {params.snap_depth:.3f}mm is below nozzle diameter {nozzle_diameter:.3f}mm.",
            )
        )

    return findings


def warn_findings(findings: Iterable[Finding]) -> None:
    for finding in findings:
        warnings.warn(finding.message, RuntimeWarning)


__all__ = [
    "DEFAULT_NOZZLE_DIAMETER",
    "Finding",
    "MAX_CANTILEVER_STRAIN",
    "MAX_UNSUPPORTED_OVERHANG_DEG",
    "MIN_WALL_THICKNESS",
    "Severity",
    "analyze_printability",
    "cantilever_strain",
    "warn_findings",
]
