"""Example: build a cylindrical snap between two blocks and save STL previews."""

from __future__ import annotations

import warnings
from pathlib import Path

from snapfit import CylindricalSnap, PostProcessOptions, generate_snap_fit
from snapfit.io import write_stl
from snapfit.kernel.mesh import MeshKernel, demo_bodies


def build(output: Path = Path("snapfit_out")) -> list[Path]:
    """Lay out a 6 mm post with a thin ring so the printability check fires."""

    kernel = MeshKernel(demo_bodies(axis=(0.0, 0.0, 1.0)))
    params = CylindricalSnap(
        cylinder_diameter=6.0,
        ring_thickness=0.6,
        snap_depth=0.5,
        position_offset=kernel.interface_offset("male", "female"),
    )
    options = PostProcessOptions(add_fillets=True, fillet_radius=0.3)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        result, findings = generate_snap_fit(kernel, "male", "female", params, options)
    for finding in findings:
        print(f"{finding.code}: {finding.message}")

    return [
        write_stl(kernel.realize(result.male_features, base="male"), output / "male.stl"),
        write_stl(kernel.realize(result.female_features, base="female"), output / "female.stl"),
    ]


if __name__ == "__main__":
    for path in build():
        print(path)
