import numpy as np
import pytest

from cloudvtk.core.fields import extract, extract_column, extract_rgb, extract_rgb_column
from cloudvtk.core.pointcloud import FieldDatatype, PointField, pack_points


def _padded_xyz_rows() -> bytes:
    # x, y, z followed by 4 bytes of padding, 16-byte rows
    dtype = np.dtype({"names": ["x", "y", "z"], "formats": ["<f4"] * 3,
                      "offsets": [0, 4, 8], "itemsize": 16})
    rows = np.zeros(2, dtype=dtype)
    rows["x"] = [1.0, 4.0]
    rows["y"] = [2.0, 5.0]
    rows["z"] = [3.0, 6.0]
    return rows.tobytes()


def test_extract_float_uses_row_and_offset() -> None:
    data = _padded_xyz_rows()
    y = PointField("y", 4, FieldDatatype.FLOAT32)
    assert extract(data, 0, 16, y) == 2.0
    assert extract(data, 1, 16, y) == 5.0


def test_extract_uint32_returns_int() -> None:
    blob = pack_points(np.zeros((3, 3)), label=np.array([7, 8, 4_000_000_000], dtype=np.uint32))
    label = blob.field_map()["label"]
    value = extract(blob.data, 2, blob.point_step, label)
    assert isinstance(value, int)
    assert value == 4_000_000_000


def test_extract_element_is_bounded_by_count() -> None:
    data = np.array([0.5, 1.5, 2.5], dtype="<f4").tobytes()
    f = PointField("normal", 0, FieldDatatype.FLOAT32, count=3)
    assert extract(data, 0, 12, f, element=2) == 2.5
    with pytest.raises(IndexError):
        extract(data, 0, 12, f, element=3)


def test_extract_rgb_reads_packed_channels() -> None:
    blob = pack_points(np.zeros((2, 3)), rgb=np.array([[255, 128, 0], [1, 2, 3]], dtype=np.uint8))
    rgb = blob.field_map()["rgb"]
    assert extract_rgb(blob.data, 0, blob.point_step, rgb) == (255, 128, 0)
    assert extract_rgb(blob.data, 1, blob.point_step, rgb) == (1, 2, 3)


def test_columns_match_row_extraction() -> None:
    data = _padded_xyz_rows()
    z = PointField("z", 8, FieldDatatype.FLOAT32)
    col = extract_column(data, 2, 16, z)
    np.testing.assert_array_equal(col, np.array([3.0, 6.0], dtype=np.float32))
    assert [extract(data, i, 16, z) for i in range(2)] == col.tolist()


def test_rgb_column() -> None:
    colors = np.array([[10, 20, 30], [40, 50, 60]], dtype=np.uint8)
    blob = pack_points(np.zeros((2, 3)), rgb=colors)
    out = extract_rgb_column(blob.data, blob.nr_points, blob.point_step, blob.field_map()["rgb"])
    np.testing.assert_array_equal(out, colors)
