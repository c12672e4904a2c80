from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from fovlab.config import StudyConfig, load_config
from fovlab.core.serialization import export_state_json
from fovlab.core.models import apply_top_view_drag
from fovlab.core.state import ApplyPreset, UpdateSensor, create_initial_state, reduce
from fovlab.runtime.builders import build_state
from fovlab.sdk import evaluate_from_config, evaluate_layout, export_point_cloud


def _write_config(path: Path, **overrides) -> None:
    config = {
        "vehicle": "sedan",
        "preset": "robotaxi",
        "settings": {"coverage_sample_count": 400, "lidar_point_count": 300},
        "scenarios": {"pedestrian": {"enabled": True}, "intersection": {"enabled": True}},
        "outputs": {
            "report": "out/report.json",
            "layout": "out/layout.json",
            "pointcloud": {"path": "out/cloud.npz", "format": "npz"},
        },
    }
    config.update(overrides)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yaml"
    _write_config(cfg_path)
    cfg = load_config(cfg_path)
    assert cfg.outputs.report == (tmp_path / "out" / "report.json").resolve()
    assert cfg.outputs.pointcloud.path == (tmp_path / "out" / "cloud.npz").resolve()
    assert cfg.settings.coverage_sample_count == 400


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yaml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_config_needs_exactly_one_source() -> None:
    with pytest.raises(ValidationError):
        StudyConfig.model_validate({"vehicle": "sedan"})
    with pytest.raises(ValidationError):
        StudyConfig.model_validate({"preset": "robotaxi", "layout": "x.json"})


def test_laz_output_cannot_disable_compression() -> None:
    with pytest.raises(ValidationError):
        StudyConfig.model_validate(
            {"preset": "robotaxi", "outputs": {"pointcloud": {"path": "a.laz", "format": "laz", "compress": False}}}
        )


def test_build_state_applies_overrides() -> None:
    cfg = StudyConfig.model_validate(
        {
            "vehicle": "suv",
            "preset": "fsd-camera",
            "vendors": {"camera": "mobileye"},
            "layers": {"radar": False},
        }
    )
    state = build_state(cfg)
    assert state.vehicle.type == "suv"
    assert state.meta.preset_id == "fsd-camera"
    assert state.vendors.camera == "mobileye"
    assert state.vendors.radar == "continental"
    assert state.sensors[0].fov.horizontal_deg == 140.0
    assert not state.layers.radar


def test_build_state_from_layout_file(tmp_path: Path) -> None:
    layout = tmp_path / "layout.json"
    layout.write_text(export_state_json(reduce(create_initial_state(), ApplyPreset("adas-ncap"))), encoding="utf-8")
    cfg = StudyConfig.model_validate({"layout": str(layout)})
    state = build_state(cfg)
    assert state.meta.preset_id == "adas-ncap"
    assert any(s.label == "Front Radar" for s in state.sensors)


def test_build_state_reports_bad_layout(tmp_path: Path) -> None:
    layout = tmp_path / "layout.json"
    layout.write_text("{ not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON format."):
        build_state(StudyConfig.model_validate({"layout": str(layout)}))


def test_evaluate_layout_metrics() -> None:
    state = reduce(create_initial_state(), ApplyPreset("robotaxi"))
    report = evaluate_layout(state, sample_count=400)
    assert report.coverage.total == 400
    assert report.coverage.ratio > 0.8
    assert report.outside_footprint == []
    assert report.too_close == []
    assert report.overlaps
    summary = report.summary()
    assert summary["presetId"] == "robotaxi"
    assert set(summary["coverage"]["byType"]) == {"camera", "radar", "ultrasonic", "lidar"}


def test_export_point_cloud_counts_lidar_points(tmp_path: Path) -> None:
    state = reduce(create_initial_state(), ApplyPreset("robotaxi"))
    total = export_point_cloud(state, tmp_path / "cloud.npz", point_count=250)
    assert total == 250
    with np.load(tmp_path / "cloud.npz") as data:
        assert data["xyz"].shape == (250, 3)
        assert set(data["sensor_index"]) == {len(state.sensors) - 1}


def test_evaluate_from_config_writes_outputs(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yaml"
    _write_config(cfg_path)
    result = evaluate_from_config(cfg_path)

    assert set(result.outputs) == {"layout", "pointcloud", "report"}
    report = json.loads((tmp_path / "out" / "report.json").read_text(encoding="utf-8"))
    assert report["coverage"]["total"] == 400
    assert report["scenarios"] == {"pedestrian": True, "intersection": True}
    with np.load(tmp_path / "out" / "cloud.npz") as data:
        assert data["xyz"].shape == (300, 3)
    layout = json.loads((tmp_path / "out" / "layout.json").read_text(encoding="utf-8"))
    assert layout["meta"]["presetId"] == "robotaxi"


def test_evaluate_from_config_preset_override(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yaml"
    _write_config(cfg_path, outputs={})
    result = evaluate_from_config(cfg_path, preset="fsd-camera", report=tmp_path / "r.json")
    assert result.state.meta.preset_id == "fsd-camera"
    assert (tmp_path / "r.json").exists()
    assert all(s.type == "camera" for s in result.state.sensors)


def test_sensor_clamped_to_side_edge_passes_audit() -> None:
    state = reduce(create_initial_state(), ApplyPreset("fsd-camera"))
    moved = apply_top_view_drag(state.sensors[0], 0.0, 1.5)
    state = reduce(state, UpdateSensor(moved))
    assert state.sensors[0].xy == pytest.approx((0.0, 0.9))
    assert evaluate_layout(state, sample_count=100).outside_footprint == []


def test_layout_file_sensors_are_relaxed_on_load(tmp_path: Path) -> None:
    source = reduce(create_initial_state(), ApplyPreset("fsd-camera"))
    doc = json.loads(export_state_json(source))
    doc["sensors"][0]["pose"]["position"]["x"] = 9.0
    layout = tmp_path / "layout.json"
    layout.write_text(json.dumps(doc), encoding="utf-8")

    state = build_state(StudyConfig.model_validate({"layout": str(layout)}))
    assert state.sensors[0].xy[0] <= 2.4 + 1e-9
    assert evaluate_layout(state, sample_count=100).outside_footprint == []
    assert state.selected_sensor_id == state.sensors[0].id
