from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

from .errors import InvalidLayoutError


class FieldDatatype(IntEnum):
    INT8 = 1
    UINT8 = 2
    INT16 = 3
    UINT16 = 4
    INT32 = 5
    UINT32 = 6
    FLOAT32 = 7
    FLOAT64 = 8

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_DTYPES[self])

    @property
    def size(self) -> int:
        return self.dtype.itemsize


_DTYPES: Dict[FieldDatatype, str] = {
    FieldDatatype.INT8: "i1",
    FieldDatatype.UINT8: "u1",
    FieldDatatype.INT16: "<i2",
    FieldDatatype.UINT16: "<u2",
    FieldDatatype.INT32: "<i4",
    FieldDatatype.UINT32: "<u4",
    FieldDatatype.FLOAT32: "<f4",
    FieldDatatype.FLOAT64: "<f8",
}


@dataclass(frozen=True)
class PointField:
    """One column of a point row: ``count`` values of ``datatype`` at ``offset``."""
    name: str
    offset: int
    datatype: FieldDatatype
    count: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "datatype", FieldDatatype(self.datatype))
        # older converters write 0 for single-valued fields
        if self.count == 0:
            object.__setattr__(self, "count", 1)
        if self.offset < 0 or self.count < 0:
            raise ValueError(f"Field '{self.name}' has negative offset/count")

    @property
    def nbytes(self) -> int:
        return self.datatype.size * self.count


@dataclass
class PointBlob:
    """Row-major point storage described by a list of fields.

    ``width * height`` rows of identical size; the row size (``point_step``)
    is derived from the buffer length rather than stored.
    """
    data: bytes
    width: int
    height: int = 1
    fields: List[PointField] = field(default_factory=list)

    @property
    def nr_points(self) -> int:
        return self.width * self.height

    @property
    def point_step(self) -> int:
        n = self.nr_points
        if n == 0:
            raise InvalidLayoutError("Cannot derive point step for a blob without points")
        return len(self.data) // n

    def field_map(self) -> Dict[str, PointField]:
        """Name -> first field carrying that name."""
        out: Dict[str, PointField] = {}
        for f in self.fields:
            out.setdefault(f.name, f)
        return out

    def validate(self) -> None:
        n = self.nr_points
        if n <= 0:
            raise InvalidLayoutError(f"Point count must be positive, got {self.width}x{self.height}")
        if len(self.data) % n != 0:
            raise InvalidLayoutError(
                f"Buffer of {len(self.data)} bytes is not divisible into {n} points"
            )
        step = len(self.data) // n
        for f in self.fields:
            if f.offset + f.nbytes > step:
                raise InvalidLayoutError(
                    f"Field '{f.name}' ({f.offset}+{f.nbytes} bytes) exceeds point step {step}"
                )


@dataclass(frozen=True)
class Polygon:
    vertices: Tuple[int, ...]

    def __post_init__(self) -> None:
        verts = tuple(int(v) for v in self.vertices)
        if not verts:
            raise ValueError("Polygon needs at least one vertex index")
        if any(v < 0 for v in verts):
            raise ValueError(f"Polygon has negative vertex index: {verts}")
        object.__setattr__(self, "vertices", verts)

    def __len__(self) -> int:
        return len(self.vertices)


@dataclass
class PolygonMesh:
    cloud: PointBlob
    polygons: List[Polygon] = field(default_factory=list)

    @classmethod
    def from_faces(cls, cloud: PointBlob, faces: Sequence[Sequence[int]]) -> "PolygonMesh":
        return cls(cloud=cloud, polygons=[Polygon(tuple(f)) for f in faces])


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """(N, 3) uint8 colours -> float32 with bytes B, G, R, 0 per point."""
    rgb = np.asarray(rgb)
    if rgb.ndim != 2 or rgb.shape[1] != 3:
        raise ValueError(f"rgb must have shape (N, 3), got {rgb.shape}")
    c = rgb.astype(np.uint32)
    packed = (c[:, 0] << 16) | (c[:, 1] << 8) | c[:, 2]
    return packed.astype("<u4").view("<f4")


def pack_points(
    xyz: np.ndarray,
    rgb: Optional[np.ndarray] = None,
    intensity: Optional[np.ndarray] = None,
    label: Optional[np.ndarray] = None,
    normals: Optional[np.ndarray] = None,
    height: int = 1,
) -> PointBlob:
    """Pack per-point arrays into an unorganized (or ``height``-row) PointBlob."""
    xyz = np.asarray(xyz, dtype=np.float32)
    if xyz.ndim != 2 or xyz.shape[1] != 3:
        raise ValueError(f"xyz must have shape (N, 3), got {xyz.shape}")
    n = len(xyz)
    if height <= 0 or n % height != 0:
        raise ValueError(f"{n} points cannot be arranged in {height} rows")

    columns: List[tuple] = [
        ("x", FieldDatatype.FLOAT32, xyz[:, 0]),
        ("y", FieldDatatype.FLOAT32, xyz[:, 1]),
        ("z", FieldDatatype.FLOAT32, xyz[:, 2]),
    ]
    if rgb is not None:
        columns.append(("rgb", FieldDatatype.FLOAT32, pack_rgb(rgb)))
    if intensity is not None:
        columns.append(("intensity", FieldDatatype.FLOAT32, np.asarray(intensity, dtype=np.float32)))
    if label is not None:
        columns.append(("label", FieldDatatype.UINT32, np.asarray(label, dtype=np.uint32)))
    if normals is not None:
        nrm = np.asarray(normals, dtype=np.float32)
        if nrm.ndim != 2 or nrm.shape[1] != 3:
            raise ValueError(f"normals must have shape (N, 3), got {nrm.shape}")
        columns.extend([
            ("normal_x", FieldDatatype.FLOAT32, nrm[:, 0]),
            ("normal_y", FieldDatatype.FLOAT32, nrm[:, 1]),
            ("normal_z", FieldDatatype.FLOAT32, nrm[:, 2]),
        ])

    for name, _, values in columns:
        if values.ndim != 1 or len(values) != n:
            raise ValueError(f"Attribute '{name}' length {len(values)} != {n}")

    dtype = np.dtype([(name, dt.dtype) for name, dt, _ in columns])
    rows = np.zeros(n, dtype=dtype)
    for name, _, values in columns:
        rows[name] = values
    fields = [
        PointField(name=name, offset=dtype.fields[name][1], datatype=dt, count=1)
        for name, dt, _ in columns
    ]
    return PointBlob(data=rows.tobytes(), width=n // height, height=height, fields=fields)
