from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from ..core.models import Constraints, Layers, Scenarios, Settings, VehicleType


class VendorOverrides(BaseModel):
    camera: Optional[str] = None
    radar: Optional[str] = None
    ultrasonic: Optional[str] = None
    lidar: Optional[str] = None


class NoiseConfig(BaseModel):
    sigma_angle_deg: float = Field(default=0.0, ge=0.0)


class PointCloudOutputConfig(BaseModel):
    path: Path
    format: Literal["las", "laz", "npz", "ply"] = "las"
    compress: Optional[bool] = None
    point_format: int = 6

    @model_validator(mode="after")
    def _validate_format(self) -> "PointCloudOutputConfig":
        if self.format == "laz" and self.compress is False:
            raise ValueError("format 'laz' implies compress=True")
        return self


class OutputConfig(BaseModel):
    report: Optional[Path] = None
    layout: Optional[Path] = None
    pointcloud: Optional[PointCloudOutputConfig] = None


class StudyConfig(BaseModel):
    """A layout study: where the sensors come from and what to produce."""

    vehicle: VehicleType = "sedan"
    preset: Optional[str] = None
    layout: Optional[Path] = None
    vendors: VendorOverrides = VendorOverrides()
    constraints: Optional[Constraints] = None
    layers: Optional[Layers] = None
    settings: Optional[Settings] = None
    scenarios: Optional[Scenarios] = None
    noise: Optional[NoiseConfig] = None
    outputs: OutputConfig = OutputConfig()

    @model_validator(mode="after")
    def _check_source(self) -> "StudyConfig":
        if self.preset is not None and self.layout is not None:
            raise ValueError("Study takes either a preset or a layout file, not both")
        if self.preset is None and self.layout is None:
            raise ValueError("Study requires a preset or a layout file")
        return self


def _resolve(base: Path, value: Optional[Path]) -> Optional[Path]:
    if value is None or value.is_absolute():
        return value
    return (base / value).resolve()


def load_config(path: str | Path) -> StudyConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = StudyConfig.model_validate(data)
    base = path.parent
    cfg.layout = _resolve(base, cfg.layout)
    cfg.outputs.report = _resolve(base, cfg.outputs.report)
    cfg.outputs.layout = _resolve(base, cfg.outputs.layout)
    if cfg.outputs.pointcloud is not None:
        cfg.outputs.pointcloud.path = _resolve(base, cfg.outputs.pointcloud.path)
    return cfg
