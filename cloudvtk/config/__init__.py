"""Configuration loading utilities for cloudvtk."""

from .schema import (
    ExportConfig,
    load_config,
)

__all__ = ["ExportConfig", "load_config"]
