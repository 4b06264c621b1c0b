from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Union

from ..config import ExportConfig, load_config
from ..core.exporter import DEFAULT_PRECISION, VtkWriter
from ..io.sources import MESH_SUFFIXES, load_mesh, load_npz_cloud

Kind = Literal["auto", "cloud", "mesh"]


@dataclass(frozen=True)
class ConvertResult:
    """Summary of a single conversion to legacy VTK."""

    output_path: Path
    kind: str
    points: int
    polygons: int


def _resolve_kind(source: Path, kind: str) -> str:
    if kind != "auto":
        return kind
    ext = source.suffix.lower()
    if ext == ".npz":
        return "cloud"
    if ext in MESH_SUFFIXES:
        return "mesh"
    raise ValueError(f"Cannot infer input kind from extension '{ext}'")


def convert(
    source: Union[str, Path],
    output: Union[str, Path],
    *,
    kind: Kind = "auto",
    precision: int = DEFAULT_PRECISION,
    strict: bool = False,
) -> ConvertResult:
    """Convert a point archive or mesh file to a legacy ASCII VTK file.

    Parameters
    ----------
    source:
        ``.npz`` point archive (cloud) or a mesh file readable by trimesh.
    output:
        Destination ``.vtk`` path; parent directories are created.
    kind:
        ``"cloud"``, ``"mesh"`` or ``"auto"`` (decided from the source extension).
    precision:
        Significant digits for every floating point value.
    strict:
        Raise instead of warning when an attribute field has the wrong datatype.
    """

    source = Path(source)
    out_path = Path(output).resolve()
    resolved = _resolve_kind(source, kind)
    writer = VtkWriter(str(out_path), precision=precision, strict=strict)

    if resolved == "mesh":
        mesh = load_mesh(source)
        writer.write_mesh(mesh)
        return ConvertResult(out_path, "mesh", mesh.cloud.nr_points, len(mesh.polygons))

    cloud = load_npz_cloud(source)
    writer.write_cloud(cloud)
    return ConvertResult(out_path, "cloud", cloud.nr_points, 0)


def convert_from_config(config: Union[str, Path, ExportConfig]) -> ConvertResult:
    cfg = load_config(config) if not isinstance(config, ExportConfig) else config
    return convert(
        cfg.input.path,
        cfg.output.path,
        kind=cfg.output.kind,
        precision=cfg.output.precision,
        strict=cfg.output.strict,
    )
