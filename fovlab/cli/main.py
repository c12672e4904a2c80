from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from ..config import load_config
from ..core.models import SENSOR_TYPES, LayoutState
from ..core.serialization import export_state_json
from ..core.state import ApplyPreset, SetVehicle, create_initial_state, reduce
from ..runtime.builders import load_layout
from ..sdk.run import evaluate_from_config, evaluate_layout, export_point_cloud
from ..sensors.catalog import vendor_options
from ..sensors.presets import PRESET_ALIASES, PRESETS
from ..sensors.vehicles import VEHICLES

app = typer.Typer(help="fovlab sensor layout utilities")

POINTCLOUD_SUFFIXES = {".las", ".laz", ".npz", ".ply"}


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("fovlab").setLevel(numeric)


def _print_report(summary: dict) -> None:
    cov = summary["coverage"]
    typer.echo(f"Preset: {summary['presetId'] or '-'}  Vehicle: {summary['vehicle']}  Sensors: {summary['sensors']}")
    typer.echo(f"Coverage: {cov['covered']}/{cov['total']} samples ({100.0 * cov['ratio']:.1f}%)")
    for sensor_type, count in cov["byType"].items():
        typer.echo(f"  {sensor_type}: {count}")
    typer.echo(f"Overlapping pairs: {len(summary['overlaps'])}")
    for name, covered in summary["scenarios"].items():
        typer.echo(f"Scenario {name}: {'covered' if covered else 'NOT covered'}")
    audit = summary["audit"]
    if audit["outsideFootprint"]:
        typer.echo(f"Outside footprint: {', '.join(audit['outsideFootprint'])}")
    if audit["tooClose"]:
        typer.echo(f"Pairs closer than min spacing: {len(audit['tooClose'])}")


def _load_layout_file(path: Path) -> LayoutState:
    try:
        return load_layout(path)
    except ValueError as exc:
        typer.echo(f"Invalid layout: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command("evaluate")
def evaluate(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML study configuration."),
    preset: Optional[str] = typer.Option(None, "--preset", help="Override the layout source with a preset id."),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Evaluate the layout described by a study config."""

    _configure_logging(log_level)
    if preset is not None and preset not in PRESETS and preset not in PRESET_ALIASES:
        raise typer.BadParameter(f"Unknown preset '{preset}'", param_hint="--preset")
    try:
        cfg = load_config(config)
    except (ValueError, ValidationError) as exc:
        raise typer.BadParameter(str(exc), param_hint="CONFIG") from exc
    try:
        result = evaluate_from_config(cfg, preset=preset, report=report)
    except ValueError as exc:
        typer.echo(f"Evaluation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _print_report(result.summary())
    for kind, path in result.outputs.items():
        typer.echo(f"Wrote {kind} → {path}")


@app.command("preset")
def preset_cmd(
    preset_id: str = typer.Argument(..., help="Preset id (fsd-camera, tesla-hw4, adas-ncap, robotaxi)."),
    vehicle: str = typer.Option("sedan", "--vehicle", help="Vehicle template (sedan, hatchback, suv)."),
    output: Path = typer.Option(..., "--output", "-o", help="Output layout JSON path."),
) -> None:
    """Export a preset layout as a layout document."""

    if preset_id not in PRESETS and preset_id not in PRESET_ALIASES:
        raise typer.BadParameter(f"Unknown preset '{preset_id}'", param_hint="PRESET_ID")
    if vehicle not in VEHICLES:
        raise typer.BadParameter(f"Unknown vehicle '{vehicle}'", param_hint="--vehicle")
    state = reduce(create_initial_state(), SetVehicle(vehicle))
    state = reduce(state, ApplyPreset(preset_id))
    out = output.resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(export_state_json(state), encoding="utf-8")
    typer.echo(f"Wrote {len(state.sensors)} sensors → {out}")


@app.command("check")
def check(
    layout: Path = typer.Argument(..., exists=True, readable=True, help="Layout JSON file."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Validate a layout document and print its metrics."""

    state = _load_layout_file(layout)
    summary = evaluate_layout(state).summary()
    if as_json:
        typer.echo(json.dumps(summary, indent=2))
    else:
        _print_report(summary)


@app.command("pointcloud")
def pointcloud(
    layout: Path = typer.Argument(..., exists=True, readable=True, help="Layout JSON file."),
    output: Path = typer.Option(..., "--output", "-o", help="Output point cloud path (.las/.laz/.npz/.ply)."),
    points: Optional[int] = typer.Option(None, "--points", help="Points per lidar (defaults to the layout settings)."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Sample the lidar point clouds of a layout."""

    _configure_logging(log_level)
    ext = output.suffix.lower()
    if ext not in POINTCLOUD_SUFFIXES:
        raise typer.BadParameter("Output must end with .las, .laz, .npz, or .ply", param_hint="--output")
    if points is not None and points < 0:
        raise typer.BadParameter("points must be non-negative.", param_hint="--points")
    state = _load_layout_file(layout)
    out = output.resolve()
    total = export_point_cloud(state, out, point_count=points)
    typer.echo(f"Completed {total} points → {out}")


@app.command("vendors")
def vendors(
    sensor_type: Optional[str] = typer.Argument(None, help="Sensor type (camera, radar, ultrasonic, lidar)."),
) -> None:
    """List catalog vendors per sensor type."""

    if sensor_type is not None and sensor_type not in SENSOR_TYPES:
        raise typer.BadParameter(f"Unknown sensor type '{sensor_type}'", param_hint="SENSOR_TYPE")
    for t in [sensor_type] if sensor_type else SENSOR_TYPES:
        ids = ", ".join(vendor_id for vendor_id, _ in vendor_options(t))
        typer.echo(f"{t}: {ids}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
