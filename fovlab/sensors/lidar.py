from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from ..core.models import Layers, Sensor
from ..core.pointcloud import PointBatch
from ..core.pose import Pose
from ..core.utils import get_logger
from .noise import AngularJitter

_log = get_logger()

# Vertical FOV assumed by the sampler when a sensor has none.
DEFAULT_VERTICAL_FOV_DEG = 30.0

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def seed_from_id(sensor_id: str) -> int:
    """Stable 32-bit FNV-1a hash of the sensor id (independent of PYTHONHASHSEED)."""
    h = _FNV_OFFSET
    for byte in sensor_id.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


def generate_lidar_points(
    sensor: Sensor,
    point_count: int,
    noise: Optional[AngularJitter] = None,
) -> np.ndarray:
    """Sample a sensor-frame return pattern as a flat ``float32`` xyz buffer.

    Each point draws azimuth, elevation and radius in that order from a
    generator seeded by :func:`seed_from_id`, so the same id and count always
    give identical output. Radius is ``range * sqrt(u)`` so points spread
    evenly over the disk instead of bunching at the origin.
    """
    if point_count < 0:
        raise ValueError("point_count must be non-negative.")
    rng = np.random.default_rng(seed_from_id(sensor.id))
    h_deg = sensor.fov.horizontal_deg
    v_deg = sensor.fov.vertical_deg if sensor.fov.vertical_deg is not None else DEFAULT_VERTICAL_FOV_DEG

    u = rng.random((point_count, 3))
    if h_deg >= 360.0:
        az = u[:, 0] * 2.0 * np.pi
    else:
        az = (u[:, 0] - 0.5) * np.deg2rad(h_deg)
    el = (u[:, 1] - 0.5) * np.deg2rad(v_deg)
    r = sensor.range_m * np.sqrt(u[:, 2])

    if noise is not None:
        az, el = noise.jitter_angles(az, el, rng)

    xyz = np.empty((point_count, 3), dtype=np.float32)
    xyz[:, 0] = r * np.cos(el) * np.cos(az)
    xyz[:, 1] = r * np.cos(el) * np.sin(az)
    xyz[:, 2] = r * np.sin(el)
    return xyz.reshape(-1)


def lidar_point_batch(
    sensor: Sensor,
    point_count: int,
    sensor_index: int = 0,
    noise: Optional[AngularJitter] = None,
) -> PointBatch:
    """Sampled cloud moved into the vehicle frame, tagged for export."""
    local = generate_lidar_points(sensor, point_count, noise=noise).reshape(-1, 3).astype(np.float64)
    pose = Pose.from_sensor_pose(sensor.pose)
    ranges = np.linalg.norm(local, axis=1).astype(np.float32)
    return PointBatch(
        xyz=pose.apply(local),
        attrs={
            "range_m": ranges,
            "sensor_index": np.full(len(local), sensor_index, dtype=np.uint16),
        },
    )


def layout_point_batches(
    sensors: Sequence[Sensor],
    layers: Layers,
    point_count: int,
    noise: Optional[AngularJitter] = None,
) -> List[PointBatch]:
    """One batch per enabled, visible lidar; ``sensor_index`` is its position in ``sensors``."""
    batches: List[PointBatch] = []
    for idx, sensor in enumerate(sensors):
        if sensor.type != "lidar" or not sensor.enabled or not layers.is_visible("lidar"):
            continue
        batches.append(lidar_point_batch(sensor, point_count, sensor_index=idx, noise=noise))
        _log.debug("Sampled %d points for %s", point_count, sensor.id)
    return batches
