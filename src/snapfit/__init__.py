"""snapfit – parametric snap-fit connectors between two solid bodies."""

from __future__ import annotations

from .feature import FeatureResult, PostProcessOptions, generate_snap_fit
from .frame import Frame, SketchPlane, build_frame
from .geometry import perpendicular_vector
from .params import CantileverSnap, CylindricalSnap, SnapKind, SnapParameters, default_for, from_units, make_snap
from .printability import Finding, analyze_printability
from .profiles import SnapProfiles, generate_profiles
from .validation import DegenerateGeometry, InvalidParameter, SnapFitError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CantileverSnap",
    "CylindricalSnap",
    "DegenerateGeometry",
    "FeatureResult",
    "Finding",
    "Frame",
    "InvalidParameter",
    "PostProcessOptions",
    "SketchPlane",
    "SnapFitError",
    "SnapKind",
    "SnapParameters",
    "SnapProfiles",
    "analyze_printability",
    "build_frame",
    "default_for",
    "from_units",
    "generate_profiles",
    "generate_snap_fit",
    "make_snap",
    "perpendicular_vector",
]
