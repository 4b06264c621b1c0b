from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator


class InputConfig(BaseModel):
    path: Path


class OutputConfig(BaseModel):
    path: Path
    kind: Literal["auto", "cloud", "mesh"] = "auto"
    precision: int = Field(default=5, ge=1, le=17)
    strict: bool = False

    @model_validator(mode="after")
    def _validate_suffix(self) -> "OutputConfig":
        if self.path.suffix.lower() != ".vtk":
            raise ValueError(f"output path must end with .vtk, got '{self.path.name}'")
        return self


class ExportConfig(BaseModel):
    input: InputConfig
    output: OutputConfig


def load_config(path: str | Path) -> ExportConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ExportConfig.model_validate(data)
    if not cfg.input.path.is_absolute():
        cfg.input.path = (path.parent / cfg.input.path).resolve()
    if not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
