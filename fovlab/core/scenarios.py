from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from .geometry import Point2
from .models import Layers, Scenarios, Sensor
from .pose import Pose

PEDESTRIAN_HALF_WIDTH_M = 6.0
INTERSECTION_HALF_WIDTH_M = 8.0

# Vertical FOV assumed for the frustum test when a sensor has none.
DEFAULT_VERTICAL_FOV_DEG = 60.0


@dataclass(frozen=True)
class ScenarioPath:
    line: Tuple[Point2, Point2]
    marker: Tuple[float, float, float]


def _crossing(distance_m: float, half_width_m: float) -> ScenarioPath:
    return ScenarioPath(
        line=((distance_m, -half_width_m), (distance_m, half_width_m)),
        marker=(distance_m, 0.0, 0.0),
    )


def pedestrian_path(distance_m: float) -> ScenarioPath:
    return _crossing(distance_m, PEDESTRIAN_HALF_WIDTH_M)


def intersection_path(distance_m: float) -> ScenarioPath:
    return _crossing(distance_m, INTERSECTION_HALF_WIDTH_M)


def scenario_markers(scenarios: Scenarios) -> Dict[str, Tuple[float, float, float]]:
    return {
        "pedestrian": pedestrian_path(scenarios.pedestrian.crossing_distance_m).marker,
        "intersection": intersection_path(scenarios.intersection.center_distance_m).marker,
    }


def is_point_in_sensor_volume(sensor: Sensor, target: Sequence[float]) -> bool:
    """3-D frustum test in the sensor's own frame.

    Unlike the planar wedge used for coverage and overlap, this honours
    pitch and roll and the vertical FOV. The target must be within range
    and in the forward half-space (local x >= 0).
    """
    if not sensor.enabled:
        return False
    pose = Pose.from_sensor_pose(sensor.pose)
    target_v = np.asarray(target, dtype=np.float64)
    if np.linalg.norm(target_v - pose.t) > sensor.range_m:
        return False
    lx, ly, lz = pose.to_local(target_v)[0]

    h_fov = sensor.fov.horizontal_deg
    v_fov = sensor.fov.vertical_deg if sensor.fov.vertical_deg is not None else DEFAULT_VERTICAL_FOV_DEG
    h = abs(np.degrees(np.arctan2(ly, lx)))
    v = abs(np.degrees(np.arctan2(lz, lx)))
    if h_fov < 350.0 and h > h_fov / 2.0:
        return False
    if v_fov and v > v_fov / 2.0:
        return False
    return bool(lx >= 0.0)


def scenario_covered(sensors: Sequence[Sensor], layers: Layers, target: Sequence[float]) -> bool:
    return any(layers.is_visible(s.type) and is_point_in_sensor_volume(s, target) for s in sensors)


def scenario_status(sensors: Sequence[Sensor], layers: Layers, scenarios: Scenarios) -> Dict[str, bool]:
    """Coverage flag for each enabled scenario."""
    markers = scenario_markers(scenarios)
    status: Dict[str, bool] = {}
    if scenarios.pedestrian.enabled:
        status["pedestrian"] = scenario_covered(sensors, layers, markers["pedestrian"])
    if scenarios.intersection.enabled:
        status["intersection"] = scenario_covered(sensors, layers, markers["intersection"])
    return status
