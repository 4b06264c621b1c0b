from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import os
import pathlib
import stat
import tempfile
import warnings

import numpy as np

from .errors import (
    EmptyInputError,
    FieldTypeMismatch,
    FieldTypeMismatchError,
    MissingGeometryError,
    MissingNormalError,
)
from .fields import extract_column, extract_rgb_column
from .pointcloud import FieldDatatype, PointBlob, PointField, Polygon, PolygonMesh
from .utils import format_float, get_logger

_log = get_logger()

DEFAULT_PRECISION = 5
HEADER = "# vtk DataFile Version 3.0\nvtk output\nASCII\nDATASET POLYDATA\n"
XYZ = ("x", "y", "z")
NORMAL_XYZ = ("normal_x", "normal_y", "normal_z")


class _Layout:
    """Per-call view of a blob: point count, step and field lookups."""

    def __init__(self, cloud: PointBlob) -> None:
        if len(cloud.data) == 0:
            _log.error("Input point cloud has no data")
            raise EmptyInputError("Input point cloud has no data")
        if cloud.nr_points == 0:
            _log.error("Input point cloud has no points")
            raise EmptyInputError("Input point cloud has no points")
        cloud.validate()
        self.data = cloud.data
        self.nr_points = cloud.nr_points
        self.point_step = cloud.point_step
        self.fields: Dict[str, PointField] = cloud.field_map()
        self.xyz = _float32_triple(cloud.fields, XYZ)
        self.normals = _float32_triple(cloud.fields, NORMAL_XYZ)

    def column(self, f: PointField) -> np.ndarray:
        return extract_column(self.data, self.nr_points, self.point_step, f)

    def stack(self, triple: Optional[List[PointField]]) -> Optional[np.ndarray]:
        if triple is None:
            return None
        return np.column_stack([self.column(f) for f in triple])


def _float32_triple(fields: Sequence[PointField], names: Sequence[str]) -> Optional[List[PointField]]:
    """First three FLOAT32 fields named in ``names``, kept in declaration order."""
    picked = [f for f in fields if f.datatype == FieldDatatype.FLOAT32 and f.name in names][:3]
    return picked if len(picked) == 3 else None


def _vector_lines(values: np.ndarray, precision: int) -> List[str]:
    return [" ".join(format_float(v, precision) for v in row) + "\n" for row in values]


def _points_section(layout: _Layout, precision: int) -> List[str]:
    xyz = layout.stack(layout.xyz)
    if xyz is None:
        _log.error("Input point cloud has no XYZ data")
        raise MissingGeometryError("Input point cloud has no FLOAT32 x/y/z fields")
    out = [HEADER, f"POINTS {layout.nr_points} float\n"]
    out.extend(_vector_lines(xyz, precision))
    return out


def _vertices_section(n: int) -> List[str]:
    out = [f"\nVERTICES {n} {2 * n}\n"]
    out.extend(f"1 {i}\n" for i in range(n))
    return out


def _polygons_section(polygons: Sequence[Polygon]) -> List[str]:
    total = len(polygons) + sum(len(p) for p in polygons)
    out = [f"\nPOLYGONS {len(polygons)} {total}\n"]
    for p in polygons:
        out.append(f"{len(p)} " + " ".join(str(v) for v in p.vertices) + "\n")
    return out


def _attribute_field(
    layout: _Layout, name: str, expected: FieldDatatype, strict: bool
) -> Optional[PointField]:
    f = layout.fields.get(name)
    if f is None:
        return None
    if f.datatype != expected:
        msg = f"Field '{name}' has datatype {f.datatype.name}, expected {expected.name}; skipping block"
        if strict:
            _log.error(msg)
            raise FieldTypeMismatchError(msg)
        warnings.warn(msg, FieldTypeMismatch, stacklevel=3)
        return None
    return f


def _rgb_lines(layout: _Layout, f: PointField, precision: int) -> List[str]:
    rgb = extract_rgb_column(layout.data, layout.nr_points, layout.point_step, f)
    return _vector_lines(rgb.astype(np.float32) / np.float32(255.0), precision)


def render_vtk_mesh(mesh: PolygonMesh, precision: int = DEFAULT_PRECISION, strict: bool = False) -> str:
    """Render ``mesh`` as a legacy VTK POLYDATA document with POLYGONS."""
    layout = _Layout(mesh.cloud)
    out = _points_section(layout, precision)
    out.extend(_vertices_section(layout.nr_points))
    out.extend(_polygons_section(mesh.polygons))

    rgb = _attribute_field(layout, "rgb", FieldDatatype.FLOAT32, strict)
    if rgb is not None:
        out.append(f"\nPOINT_DATA {layout.nr_points}\nCOLOR_SCALARS scalars 3\n")
        out.extend(_rgb_lines(layout, rgb, precision))
    return "".join(out)


def render_vtk_cloud(cloud: PointBlob, precision: int = DEFAULT_PRECISION, strict: bool = False) -> str:
    """Render ``cloud`` as legacy VTK POLYDATA, one vertex cell per point.

    Attribute blocks follow in the order rgb, intensity, label, normals; the
    ``POINT_DATA`` line precedes the first one written and is never repeated.
    """
    layout = _Layout(cloud)
    n = layout.nr_points
    out = _points_section(layout, precision)
    out.extend(_vertices_section(n))

    blocks: List[List[str]] = []

    f = _attribute_field(layout, "rgb", FieldDatatype.FLOAT32, strict)
    if f is not None:
        blocks.append(["COLOR_SCALARS scalars 3\n"] + _rgb_lines(layout, f, precision))

    f = _attribute_field(layout, "intensity", FieldDatatype.FLOAT32, strict)
    if f is not None:
        block = ["SCALARS intensity_scalars float 1\nLOOKUP_TABLE my_table\n"]
        block.extend(format_float(v, precision) + "\n" for v in layout.column(f))
        blocks.append(block)

    f = _attribute_field(layout, "label", FieldDatatype.UINT32, strict)
    if f is not None:
        block = ["SCALARS labels unsigned_int 1\nLOOKUP_TABLE label_table\n"]
        block.extend(f"{int(v)}\n" for v in layout.column(f))
        blocks.append(block)

    if "normal_x" in layout.fields:
        normals = layout.stack(layout.normals)
        if normals is None:
            _log.error("Input point cloud has no NORMAL_XYZ data")
            raise MissingNormalError("normal_x present without FLOAT32 normal_x/normal_y/normal_z")
        blocks.append(["NORMALS point_normals float\n"] + _vector_lines(normals, precision))

    if blocks:
        out.append(f"\nPOINT_DATA {n}\n")
        for i, block in enumerate(blocks):
            if i:
                out.append("\n")
            out.extend(block)
    _log.debug("Rendered %d points with %d attribute block(s)", n, len(blocks))
    return "".join(out)


def _target_mode(path: pathlib.Path) -> int:
    """Mode of the file being replaced, else what ``open(path, "w")`` would give."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_atomic(path: pathlib.Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="ascii", newline="\n") as f:
            f.write(text)
        # mkstemp creates the file 0600
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


@dataclass
class VtkWriter:
    """Legacy ASCII VTK writer.

    The whole document is rendered before the destination is touched, then
    written to a sibling temporary file and moved into place, so a failed
    export never leaves a truncated file behind.
    """
    path: str
    precision: int = DEFAULT_PRECISION
    strict: bool = False

    def __post_init__(self) -> None:
        if self.precision < 1:
            raise ValueError(f"precision must be >= 1, got {self.precision}")

    def write_mesh(self, mesh: PolygonMesh) -> None:
        text = render_vtk_mesh(mesh, self.precision, self.strict)
        path = pathlib.Path(self.path)
        _write_atomic(path, text)
        _log.info("Wrote %s (%d points, %d polygons)", path.name, mesh.cloud.nr_points, len(mesh.polygons))

    def write_cloud(self, cloud: PointBlob) -> None:
        text = render_vtk_cloud(cloud, self.precision, self.strict)
        path = pathlib.Path(self.path)
        _write_atomic(path, text)
        _log.info("Wrote %s (%d points)", path.name, cloud.nr_points)


def write_vtk_mesh(path: str | os.PathLike, mesh: PolygonMesh, precision: int = DEFAULT_PRECISION, strict: bool = False) -> None:
    VtkWriter(os.fspath(path), precision=precision, strict=strict).write_mesh(mesh)


def write_vtk_cloud(path: str | os.PathLike, cloud: PointBlob, precision: int = DEFAULT_PRECISION, strict: bool = False) -> None:
    VtkWriter(os.fspath(path), precision=precision, strict=strict).write_cloud(cloud)
