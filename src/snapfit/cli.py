from __future__ import annotations

import pathlib
import warnings
from dataclasses import fields, replace
from typing import List

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from snapfit._config import get_feature_defaults, get_unit_settings
from snapfit.feature import PostProcessOptions, generate_snap_fit
from snapfit.params import SnapParameters, from_units
from snapfit.printability import Finding, analyze_printability
from snapfit.validation import SnapFitError

console = Console()
app = typer.Typer(help="Lay out snap-fit connectors and check them for printability.")


def _parse_assignments(assignments: List[str]) -> dict[str, float]:
    values: dict[str, float] = {}
    for item in assignments:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{item}'.")
        try:
            values[name.strip().replace("-", "_")] = float(raw)
        except ValueError as exc:
            raise typer.BadParameter(f"{name.strip()} must be a number, got '{raw}'.") from exc
    return values


def _build_params(kind: str, units: str | None, values: dict[str, float]) -> SnapParameters:
    resolved_units = units or get_unit_settings().name
    try:
        return from_units(kind, units=resolved_units, **values)
    except SnapFitError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _print_params(params: SnapParameters) -> None:
    table = Table(title=f"{params.kind.capitalize()} snap", show_header=True, header_style="bold cyan")
    table.add_column("Parameter")
    table.add_column("Value", justify="right")
    for item in fields(params):
        if item.name == "kind":
            continue
        value = getattr(params, item.name)
        unit = "°" if item.name.endswith("_deg") else " mm"
        table.add_row(item.name, f"{value:.3f}{unit}")
    console.print(table)


def _print_findings(findings: List[Finding]) -> None:
    if not findings:
        console.print("[green]No printability findings.[/green]")
        return
    for finding in findings:
        console.print(f"[yellow]{finding.severity.upper()}[/yellow] ({finding.code}) {escape(finding.message)}")


def _next_available_path(path: pathlib.Path) -> pathlib.Path:
    """Return a non-conflicting path by appending ' (n)' before the suffix."""

    if not path.exists():
        return path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix
    n = 1
    while True:
        candidate = parent / f"{stem} ({n}){suffix}"
        if not candidate.exists():
            return candidate
        n += 1


@app.command()
def analyze(
    kind: str = typer.Option("cantilever", "--kind", "-k", help="Snap kind: cantilever or cylindrical."),
    assignments: List[str] = typer.Option(
        [], "--set", "-s", help="Override a parameter, e.g. --set beam_thickness=0.5 (repeatable)."
    ),
    units: str | None = typer.Option(None, "--units", help="Units for lengths given with --set."),
    nozzle: float | None = typer.Option(None, "--nozzle", help="Nozzle diameter in mm for the min-feature check."),
) -> None:
    """
    Validate snap parameters and report printability findings without building geometry.
    """

    params = _build_params(kind, units, _parse_assignments(assignments))
    nozzle_diameter = nozzle if nozzle is not None else get_feature_defaults().nozzle_diameter
    _print_params(params)
    _print_findings(analyze_printability(params, nozzle_diameter=nozzle_diameter))


@app.command()
def export(
    kind: str = typer.Option("cantilever", "--kind", "-k", help="Snap kind: cantilever or cylindrical."),
    assignments: List[str] = typer.Option(
        [], "--set", "-s", help="Override a parameter, e.g. --set snap_depth=1.2 (repeatable)."
    ),
    units: str | None = typer.Option(None, "--units", help="Units for lengths given with --set."),
    output: pathlib.Path = typer.Option(
        pathlib.Path("snapfit_out"), "--output", "-o", help="Directory for male.stl and female.stl."
    ),
    gap: float = typer.Option(
        20.0, "--gap", help="Distance between the two demo block centers (mm); 20 makes them touch."
    ),
    fillets: bool = typer.Option(False, "--fillets/--no-fillets", help="Request stress fillets."),
    draft: bool = typer.Option(False, "--draft/--no-draft", help="Request draft angles."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing existing STL files."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
) -> None:
    """
    Build the snap between two demo blocks with the mesh kernel and save male/female STL previews.
    """

    from snapfit.io import write_stl
    from snapfit.kernel.mesh import MeshKernel, demo_bodies

    values = _parse_assignments(assignments)
    params = _build_params(kind, units, values)
    options = PostProcessOptions.from_config(add_fillets=fillets, add_draft_angles=draft)
    kernel = MeshKernel(demo_bodies(gap=gap))
    if "position_offset" not in values:
        # Root the snap on the female block face.
        try:
            params = replace(params, position_offset=kernel.interface_offset("male", "female"))
        except SnapFitError as exc:
            raise typer.BadParameter(str(exc)) from exc

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result, findings = generate_snap_fit(kernel, "male", "female", params, options)
        except SnapFitError as exc:
            raise typer.BadParameter(str(exc)) from exc
        male = kernel.realize(result.male_features, base="male")
        female = kernel.realize(result.female_features, base="female")

    reported = {finding.message for finding in findings}
    for item in caught:
        if str(item.message) not in reported:
            console.print(f"[yellow]{escape(str(item.message))}[/yellow]")

    written = []
    for name, mesh in (("male", male), ("female", female)):
        target = output / f"{name}.stl"
        if target.exists() and not overwrite:
            alternative = _next_available_path(target)
            console.print(f"[yellow]Output {target} exists; writing to {alternative} instead.[/yellow]")
            target = alternative
        written.append(write_stl(mesh, target, ascii=ascii, name=f"snapfit_{name}"))

    _print_params(params)
    _print_findings(findings)
    mode = "ASCII" if ascii else "binary"
    lines = "\n".join(f"[green]{path}[/green]" for path in written)
    console.print(Panel(f"Wrote {mode} STL previews:\n{lines}", title="Export complete", border_style="green"))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
