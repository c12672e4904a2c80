from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import StudyConfig, load_config
from ..core.constraints import boundary_violations, spacing_violations
from ..core.coverage import CoverageResult, compute_coverage
from ..core.models import SENSOR_TYPES, LayoutState
from ..core.overlap import Overlap, detect_overlaps
from ..core.scenarios import scenario_status
from ..core.serialization import export_state_json
from ..core.utils import get_logger
from ..runtime.builders import build_noise, build_state, build_writer
from ..sensors.lidar import layout_point_batches
from ..sensors.noise import AngularJitter

_log = get_logger()


@dataclass(frozen=True)
class LayoutReport:
    """Derived metrics for one layout snapshot."""

    state: LayoutState
    coverage: CoverageResult
    overlaps: List[Overlap]
    scenarios: Dict[str, bool]
    outside_footprint: List[str]
    too_close: List[Tuple[str, str, float]]
    outputs: Dict[str, Path] = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        cov = self.coverage
        return {
            "presetId": self.state.meta.preset_id,
            "vehicle": self.state.vehicle.type,
            "sensors": len(self.state.sensors),
            "coverage": {
                "total": cov.total,
                "covered": cov.covered,
                "ratio": cov.ratio,
                "byType": {t: cov.by_type.get(t, 0) for t in SENSOR_TYPES},
            },
            "overlaps": [{"pair": list(o.pair), "area": o.area} for o in self.overlaps],
            "scenarios": dict(self.scenarios),
            "audit": {
                "outsideFootprint": list(self.outside_footprint),
                "tooClose": [{"pair": [a, b], "distance": d} for a, b, d in self.too_close],
            },
        }


def evaluate_layout(state: LayoutState, *, sample_count: Optional[int] = None) -> LayoutReport:
    """Coverage, overlaps, scenario flags and audits for ``state``.

    ``sample_count`` overrides the performance-adjusted setting.
    """
    samples = sample_count if sample_count is not None else state.settings.effective_coverage_samples
    coverage = compute_coverage(state.sensors, state.layers, samples)
    return LayoutReport(
        state=state,
        coverage=coverage,
        overlaps=detect_overlaps(state.sensors),
        scenarios=scenario_status(state.sensors, state.layers, state.scenarios),
        outside_footprint=boundary_violations(state.sensors, state.vehicle.polygon),
        too_close=spacing_violations(state.sensors, state.constraints.min_spacing_m),
    )


def export_point_cloud(
    state: LayoutState,
    path: Union[str, Path],
    *,
    point_count: Optional[int] = None,
    noise: Optional[AngularJitter] = None,
    format: Optional[str] = None,
    compress: Optional[bool] = None,
    point_format: int = 6,
) -> int:
    """Write the sampled cloud of every enabled, visible lidar; returns the point count."""
    count = point_count if point_count is not None else state.settings.effective_lidar_points
    batches = layout_point_batches(state.sensors, state.layers, count, noise=noise)
    writer = build_writer(Path(path), format, compress=compress, point_format=point_format)
    total = 0
    try:
        for batch in batches:
            writer.write_batch(batch)
            total += len(batch)
    finally:
        writer.close()
    _log.info("Point cloud: %d points from %d lidar(s)", total, len(batches))
    return total


def evaluate_from_config(
    config: Union[str, Path, StudyConfig],
    *,
    preset: Optional[str] = None,
    report: Optional[Path] = None,
) -> LayoutReport:
    """Build, evaluate and export the layout a study configuration describes.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~fovlab.config.schema.StudyConfig`.
    preset:
        Optional preset id replacing the configured layout source.
    report:
        Optional override for the JSON report path.

    Returns
    -------
    LayoutReport
        Metrics for the built layout; ``outputs`` lists every file written.
    """

    cfg = load_config(config) if not isinstance(config, StudyConfig) else config.model_copy(deep=True)
    if report is not None:
        cfg.outputs.report = Path(report).resolve()

    state = build_state(cfg, preset=preset)
    result = evaluate_layout(state)
    _log.info(
        "Coverage %.1f%% (%d/%d samples), %d overlapping pairs",
        100.0 * result.coverage.ratio,
        result.coverage.covered,
        result.coverage.total,
        len(result.overlaps),
    )

    outputs = result.outputs
    if cfg.outputs.layout is not None:
        cfg.outputs.layout.parent.mkdir(parents=True, exist_ok=True)
        cfg.outputs.layout.write_text(export_state_json(state), encoding="utf-8")
        outputs["layout"] = cfg.outputs.layout
    if cfg.outputs.pointcloud is not None:
        pc = cfg.outputs.pointcloud
        export_point_cloud(
            state,
            pc.path,
            noise=build_noise(cfg),
            format=pc.format,
            compress=pc.compress,
            point_format=pc.point_format,
        )
        outputs["pointcloud"] = pc.path
    if cfg.outputs.report is not None:
        cfg.outputs.report.parent.mkdir(parents=True, exist_ok=True)
        cfg.outputs.report.write_text(json.dumps(result.summary(), indent=2), encoding="utf-8")
        outputs["report"] = cfg.outputs.report
    return result
