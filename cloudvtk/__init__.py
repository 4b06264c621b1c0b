"""cloudvtk – point blob → legacy VTK (ASCII POLYDATA) export.

Components:
- PointBlob / PointField / PolygonMesh (core.pointcloud)
- Field extraction from raw point rows (core.fields)
- Mesh and cloud VTK writers (core.exporter)
- npz / mesh readers (io.sources), conversion SDK (sdk.run) and CLI (cli.main)
"""

from .core.pointcloud import (FieldDatatype, PointField, PointBlob,
                              Polygon, PolygonMesh, pack_points, pack_rgb)
from .core.fields import extract, extract_rgb, extract_column, extract_rgb_column
from .core.errors import (
    VtkExportError, EmptyInputError, InvalidLayoutError, MissingGeometryError,
    MissingNormalError, FieldTypeMismatchError, FieldTypeMismatch
)
from .core.exporter import (VtkWriter, render_vtk_cloud, render_vtk_mesh,
                            write_vtk_cloud, write_vtk_mesh)
