from __future__ import annotations

import pytest

from fovlab.core.constraints import boundary_violations, spacing_violations
from fovlab.core.models import VendorSelection
from fovlab.core.state import ApplyPreset, SetVehicle, create_initial_state, reduce
from fovlab.sensors.catalog import (
    DEFAULT_CATEGORY_BY_TYPE,
    DEFAULT_VENDOR_BY_TYPE,
    SENSOR_SPECS,
    MissingSpecError,
    find_spec,
    require_spec,
    vendor_options,
)
from fovlab.sensors.presets import PRESETS, preset_sensors, preset_vendors, resolve_preset
from fovlab.sensors.vehicles import VEHICLES, get_vehicle
from fovlab.sensors.vendors import apply_vendor_specs

SEDAN = get_vehicle("sedan")


def _by_label(sensors):
    return {s.label: s for s in sensors}


def test_find_spec_is_case_insensitive() -> None:
    spec = find_spec("camera", "mobileye", "WIDE")
    assert spec is not None
    assert spec.specs.horizontal_fov_deg == 140
    assert find_spec("camera", "mobileye", "ultra") is None
    assert find_spec("lidar", "luminar", "mid") is None


def test_require_spec_raises_for_missing_entry() -> None:
    with pytest.raises(MissingSpecError):
        require_spec("lidar", "innoviz", "long")
    assert issubclass(MissingSpecError, LookupError)


def test_every_catalog_entry_has_provenance() -> None:
    for spec in SENSOR_SPECS:
        assert spec.source.url.startswith("https://")
        assert spec.source.accessed_at
        assert spec.specs.range_m > 0


def test_vendor_options_in_catalog_order() -> None:
    assert vendor_options("camera") == [("mobileye", "Mobileye"), ("onsemi", "onsemi")]
    assert [v for v, _ in vendor_options("lidar")] == ["luminar", "innoviz"]
    assert vendor_options("sonar") == []


def test_defaults_resolve_in_catalog() -> None:
    for sensor_type, vendor in DEFAULT_VENDOR_BY_TYPE.items():
        assert find_spec(sensor_type, vendor, DEFAULT_CATEGORY_BY_TYPE[sensor_type]) is not None


def test_fsd_camera_ids_are_stable() -> None:
    ids = [s.id for s in preset_sensors("fsd-camera", SEDAN)]
    assert ids == [
        "fsd-camera-front-wide",
        "fsd-camera-front-narrow",
        "fsd-camera-front-side-left",
        "fsd-camera-front-side-right",
        "fsd-camera-rear",
        "fsd-camera-rear-left",
        "fsd-camera-rear-right",
    ]


def test_preset_binds_catalog_values() -> None:
    sensors = _by_label(preset_sensors("fsd-camera", SEDAN))
    wide = sensors["Front Wide"]
    assert wide.spec_category == "wide"
    assert wide.fov.horizontal_deg == 120.0
    assert wide.fov.vertical_deg == 60.0
    assert wide.range_m == 110.0
    assert wide.pose.position.z == 1.3


def test_adas_ncap_front_camera_and_radar() -> None:
    sensors = _by_label(preset_sensors("adas-ncap", SEDAN))
    assert sensors["Front"].type == "camera"
    assert sensors["Front"].pose.position.x == pytest.approx(2.15)
    assert sensors["Front Radar"].type == "radar"
    assert sensors["Front Radar"].spec_category == "lrr"
    assert sensors["Front Radar"].pose.position.z == 0.6
    assert {s.type for s in sensors.values()} == {"camera", "radar", "ultrasonic"}


def test_robotaxi_has_roof_lidar() -> None:
    roof = _by_label(preset_sensors("robotaxi", SEDAN))["Roof"]
    assert roof.type == "lidar"
    assert roof.spec_category == "long"
    assert roof.spec_point_rate_kpps == 300.0
    assert roof.pose.position.z == 1.9


def test_tesla_hw4_has_b_pillars() -> None:
    sensors = _by_label(preset_sensors("tesla-hw4", SEDAN))
    left = sensors["B-Pillar Left"]
    right = sensors["B-Pillar Right"]
    assert left.id == "tesla-hw4-b-pillar-left"
    assert left.mirror_group == right.mirror_group == "pillar"
    assert right.pose.position.y == -left.pose.position.y
    assert right.yaw_deg == -left.yaw_deg


def test_front_margin_follows_vehicle_length() -> None:
    front = _by_label(preset_sensors("adas-ncap", get_vehicle("suv")))["Front"]
    assert front.pose.position.x == pytest.approx(4.9 / 2.0 - 0.2)


def test_preset_vendors() -> None:
    assert preset_vendors("fsd-camera").camera == "onsemi"
    assert preset_vendors("adas-ncap").radar == "continental"
    with pytest.raises(ValueError):
        preset_vendors("nope")


def test_unknown_preset_raises() -> None:
    with pytest.raises(ValueError):
        preset_sensors("nope", SEDAN)


def test_missing_catalog_entry_aborts_preset() -> None:
    with pytest.raises(MissingSpecError):
        preset_sensors("robotaxi", SEDAN, VendorSelection(lidar="innoviz"))


def test_mobileye_cameras_resolve_for_every_preset() -> None:
    for preset in PRESETS:
        assert preset_sensors(preset, SEDAN, VendorSelection(camera="mobileye"))


@pytest.mark.parametrize("preset", sorted(PRESETS))
@pytest.mark.parametrize("vehicle", sorted(VEHICLES))
def test_presets_relax_cleanly_on_every_vehicle(preset: str, vehicle: str) -> None:
    raw = preset_sensors(preset, get_vehicle(vehicle))
    assert boundary_violations(raw, get_vehicle(vehicle).polygon) == []

    state = reduce(reduce(create_initial_state(), SetVehicle(vehicle)), ApplyPreset(preset))
    assert [s.id for s in state.sensors] == [s.id for s in raw]
    assert boundary_violations(state.sensors, state.vehicle.polygon) == []
    assert spacing_violations(state.sensors, state.constraints.min_spacing_m) == []
    assert len({s.id for s in state.sensors}) == len(state.sensors)


def test_vendor_rebinding_keeps_category() -> None:
    sensors = preset_sensors("fsd-camera", SEDAN)
    rebound = _by_label(apply_vendor_specs(sensors, VendorSelection(camera="mobileye")))
    narrow = rebound["Front Narrow"]
    assert narrow.spec_category == "narrow"
    assert narrow.fov.horizontal_deg == 45.0
    assert narrow.range_m == 200.0
    # Position is untouched by rebinding.
    assert narrow.xy == _by_label(sensors)["Front Narrow"].xy


def test_vendor_rebinding_leaves_unknown_combination_unchanged() -> None:
    sensors = preset_sensors("robotaxi", SEDAN)
    rebound = apply_vendor_specs(sensors, VendorSelection(lidar="innoviz"))
    assert _by_label(rebound)["Roof"] == _by_label(sensors)["Roof"]


def test_get_vehicle_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        get_vehicle("truck")


@pytest.mark.parametrize("alias, canonical", [("tesla-fsd", "fsd-camera"), ("ncap", "adas-ncap")])
def test_older_preset_ids_resolve(alias: str, canonical: str) -> None:
    assert resolve_preset(alias) == canonical
    vehicle = get_vehicle("sedan")
    assert preset_sensors(alias, vehicle) == preset_sensors(canonical, vehicle)
    state = reduce(create_initial_state(), ApplyPreset(alias))
    assert state.meta.preset_id == canonical
    assert state.sensors[0].id.startswith(f"{canonical}-")


def test_resolve_preset_rejects_unknown_id() -> None:
    with pytest.raises(ValueError, match="Unknown preset 'waymo'"):
        resolve_preset("waymo")
