"""Decoding of single field values out of a raw point buffer.

Every field is treated as single valued: writers read repetition 0 only.
Callers that need another repetition pass ``element`` explicitly and get an
``IndexError`` when it exceeds the declared count.
"""
from __future__ import annotations
from typing import Tuple, Union
import numpy as np

from .pointcloud import FieldDatatype, PointField

Buffer = Union[bytes, bytearray, memoryview]


def _address(row: int, point_step: int, field: PointField, element: int) -> int:
    if element < 0 or element >= field.count:
        raise IndexError(f"Field '{field.name}' has {field.count} element(s), requested {element}")
    return row * point_step + field.offset + element * field.datatype.size


def extract(data: Buffer, row: int, point_step: int, field: PointField, element: int = 0) -> Union[float, int]:
    """Decode one value of ``field`` from point ``row``."""
    addr = _address(row, point_step, field, element)
    value = np.frombuffer(data, dtype=field.datatype.dtype, count=1, offset=addr)[0]
    if field.datatype in (FieldDatatype.FLOAT32, FieldDatatype.FLOAT64):
        return float(value)
    return int(value)


def extract_rgb(data: Buffer, row: int, point_step: int, field: PointField) -> Tuple[int, int, int]:
    """Packed colour at ``field``: bytes are stored B, G, R (then alpha)."""
    addr = _address(row, point_step, field, 0)
    b, g, r = bytes(data[addr:addr + 3])
    return r, g, b


def extract_column(data: Buffer, nr_points: int, point_step: int, field: PointField) -> np.ndarray:
    """Strided view of ``field`` (repetition 0) over all ``nr_points`` rows."""
    return np.ndarray(
        shape=(nr_points,),
        dtype=field.datatype.dtype,
        buffer=data,
        offset=field.offset,
        strides=(point_step,),
    )


def extract_rgb_column(data: Buffer, nr_points: int, point_step: int, field: PointField) -> np.ndarray:
    """(N, 3) uint8 array of R, G, B for every row."""
    bgr = np.ndarray(
        shape=(nr_points, 3),
        dtype=np.uint8,
        buffer=data,
        offset=field.offset,
        strides=(point_step, 1),
    )
    return bgr[:, ::-1]
