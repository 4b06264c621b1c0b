from __future__ import annotations


class VtkExportError(Exception):
    """Base class for failures while exporting a point blob to VTK."""


class EmptyInputError(VtkExportError):
    """The point blob holds no data (or no points)."""


class InvalidLayoutError(VtkExportError):
    """Buffer size or field offsets do not fit the declared point layout."""


class MissingGeometryError(VtkExportError):
    """A point lacks FLOAT32 x, y and z fields."""


class MissingNormalError(VtkExportError):
    """normal_x is present but the full FLOAT32 normal triple is not."""


class FieldTypeMismatchError(VtkExportError):
    """A known attribute field carries an unsupported datatype (strict mode)."""


class FieldTypeMismatch(UserWarning):
    """A known attribute field carries an unsupported datatype; block skipped."""
