"""Readers that turn on-disk point/mesh data into point blobs."""

from .sources import load_mesh, load_npz_cloud

__all__ = ["load_mesh", "load_npz_cloud"]
