from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import typer

from ..core.errors import VtkExportError
from ..sdk.run import ConvertResult, convert, convert_from_config

app = typer.Typer(help="Legacy VTK export utilities")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("cloudvtk").setLevel(numeric)


def _check_output(output: Path) -> None:
    if output.suffix.lower() != ".vtk":
        raise typer.BadParameter(f"Unsupported output extension '{output.suffix}'", param_hint="OUTPUT")


def _report(result: ConvertResult) -> None:
    summary = f"{result.points} points"
    if result.kind == "mesh":
        summary += f", {result.polygons} polygons"
    typer.echo(f"Wrote {summary} → {result.output_path}")


def _execute(source: Path, output: Path, kind: str, precision: int, strict: bool, log_level: str) -> None:
    _configure_logging(log_level)
    _check_output(output)
    try:
        result = convert(source, output, kind=kind, precision=precision, strict=strict)  # type: ignore[arg-type]
    except (VtkExportError, ValueError, OSError, zipfile.BadZipFile) as exc:
        typer.echo(f"Export failed: {exc}", err=True)
        raise typer.Exit(code=1)
    _report(result)


@app.command("cloud")
def cloud(
    source: Path = typer.Argument(..., exists=True, readable=True, help="Input .npz point archive."),
    output: Path = typer.Argument(..., help="Output .vtk path."),
    precision: int = typer.Option(5, "--precision", "-p", min=1, max=17, help="Significant digits for floats."),
    strict: bool = typer.Option(False, "--strict", help="Fail on attribute fields with unexpected datatypes."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Write a point cloud as VTK vertices plus attribute blocks."""

    _execute(source, output, "cloud", precision, strict, log_level)


@app.command("mesh")
def mesh(
    source: Path = typer.Argument(..., exists=True, readable=True, help="Input mesh (.ply, .obj, .stl, ...)."),
    output: Path = typer.Argument(..., help="Output .vtk path."),
    precision: int = typer.Option(5, "--precision", "-p", min=1, max=17, help="Significant digits for floats."),
    strict: bool = typer.Option(False, "--strict", help="Fail on attribute fields with unexpected datatypes."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Write a polygon mesh as VTK points, vertices and polygons."""

    _execute(source, output, "mesh", precision, strict, log_level)


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Run a conversion described by a YAML config."""

    _configure_logging(log_level)
    try:
        result = convert_from_config(config)
    except (VtkExportError, ValueError, OSError, zipfile.BadZipFile) as exc:
        typer.echo(f"Export failed: {exc}", err=True)
        raise typer.Exit(code=1)
    _report(result)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
