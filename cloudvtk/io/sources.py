from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import trimesh  # type: ignore

from ..core.pointcloud import PointBlob, PolygonMesh, pack_points
from ..core.utils import get_logger

_log = get_logger()

MESH_SUFFIXES = {".ply", ".obj", ".stl", ".off", ".glb", ".gltf"}


def load_npz_cloud(path: str | Path) -> PointBlob:
    """Load an ``.npz`` point archive (``xyz`` plus optional per-point attrs).

    Recognised keys: ``xyz`` (N,3), ``rgb`` (N,3 uint8), ``intensity`` (N,)
    or ``intensity01``, ``label`` (N,), ``normal`` (N,3). Other keys are ignored.
    """
    path = Path(path)
    with np.load(path) as data:
        if "xyz" not in data.files:
            raise ValueError(f"{path.name} has no 'xyz' array")
        arrays: Dict[str, np.ndarray] = {k: data[k] for k in data.files}

    intensity: Optional[np.ndarray] = arrays.get("intensity")
    if intensity is None:
        intensity = arrays.get("intensity01")
    rgb = arrays.get("rgb")
    if rgb is not None and rgb.dtype != np.uint8:
        if rgb.max() > 255:
            rgb = rgb // 257  # 0..65535 -> 0..255
        rgb = rgb.astype(np.uint8)

    blob = pack_points(
        arrays["xyz"],
        rgb=rgb,
        intensity=intensity,
        label=arrays.get("label"),
        normals=arrays.get("normal"),
    )
    _log.debug("Loaded %d points from %s (%s)", blob.nr_points, path.name,
               ", ".join(f.name for f in blob.fields))
    return blob


def load_mesh(path: str | Path) -> PolygonMesh:
    """Load a surface mesh through trimesh; vertex colours become an rgb field."""
    path = Path(path)
    mesh = trimesh.load_mesh(str(path), process=False)
    if not isinstance(mesh, trimesh.Trimesh):
        raise ValueError(f"{path.name} does not contain a single triangle mesh")
    vertices = np.asarray(mesh.vertices, dtype=np.float32)
    faces = np.asarray(mesh.faces, dtype=np.int64)
    rgb = None
    if mesh.visual.kind == "vertex":
        rgb = np.asarray(mesh.visual.vertex_colors[:, :3], dtype=np.uint8)
    blob = pack_points(vertices, rgb=rgb)
    _log.debug("Loaded mesh %s: %d vertices, %d faces", path.name, len(vertices), len(faces))
    return PolygonMesh.from_faces(blob, faces.tolist())
