from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config import StudyConfig
from ..core.exporter import LasWriter, NpzWriter, PlyWriter
from ..core.models import LayoutState, VendorSelection
from ..core.serialization import import_state
from ..core.state import (
    ApplyPreset,
    ImportState,
    SetConstraints,
    SetLayers,
    SetScenarios,
    SetSettings,
    SetVehicle,
    SetVendors,
    create_initial_state,
    reduce,
)
from ..sensors.noise import AngularJitter

POINTCLOUD_FORMATS = {"las", "laz", "npz", "ply"}


def load_layout(path: Path) -> LayoutState:
    """Read and validate a layout JSON file; a bad document is a ``ValueError``."""
    result = import_state(Path(path).read_text(encoding="utf-8"))
    if not result.ok or result.data is None:
        raise ValueError(f"{path}: {result.error}")
    return reduce(create_initial_state(), ImportState(result.data))


def build_vendors(cfg: StudyConfig, base: VendorSelection) -> VendorSelection:
    overrides = cfg.vendors.model_dump(exclude_none=True)
    return base.model_copy(update=overrides) if overrides else base


def build_state(cfg: StudyConfig, preset: Optional[str] = None) -> LayoutState:
    """Assemble the layout a study describes.

    ``preset`` overrides the configured source. Settings sections present in
    the config are applied through the reducer, so the constraint solver runs
    the same way it does for interactive edits.
    """
    preset = preset or cfg.preset
    if preset is not None:
        state = create_initial_state()
        state = reduce(state, SetVehicle(cfg.vehicle))
        state = reduce(state, ApplyPreset(preset))
    else:
        assert cfg.layout is not None
        state = load_layout(cfg.layout)

    if cfg.constraints is not None:
        state = reduce(state, SetConstraints(cfg.constraints))
    if cfg.layers is not None:
        state = reduce(state, SetLayers(cfg.layers))
    if cfg.settings is not None:
        state = reduce(state, SetSettings(cfg.settings))
    if cfg.scenarios is not None:
        state = reduce(state, SetScenarios(cfg.scenarios))
    vendors = build_vendors(cfg, state.vendors)
    if vendors != state.vendors:
        state = reduce(state, SetVendors(vendors))
    return state


def build_noise(cfg: StudyConfig) -> Optional[AngularJitter]:
    if cfg.noise is None or cfg.noise.sigma_angle_deg == 0.0:
        return None
    return AngularJitter(sigma_angle_deg=cfg.noise.sigma_angle_deg)


def build_writer(
    path: Path,
    format: Optional[str] = None,
    *,
    compress: Optional[bool] = None,
    point_format: int = 6,
):
    """Point-cloud writer for ``path``; the format defaults to the extension."""
    format_lower = (format or Path(path).suffix.lstrip(".")).lower()
    if format_lower in {"las", "laz"}:
        if compress is None:
            compress = format_lower == "laz"
        return LasWriter(str(path), point_format=point_format, compress=compress)
    if format_lower == "npz":
        return NpzWriter(str(path))
    if format_lower == "ply":
        return PlyWriter(str(path))
    raise ValueError(f"Unsupported output format: {format_lower}")
