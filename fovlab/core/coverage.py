from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence
import math
import numpy as np

from .geometry import points_in_triangle, wedge_triangle
from .models import SENSOR_TYPES, Layers, Sensor
from .utils import get_logger

_log = get_logger()

# Analysis rectangle ahead of and beside the vehicle (metres, vehicle frame).
REGION_X = (0.0, 50.0)
REGION_Y = (-10.0, 10.0)

# At or above this horizontal FOV a sensor counts as omnidirectional.
PANORAMIC_FOV_DEG = 350.0


@dataclass
class CoverageResult:
    total: int
    covered: int
    by_type: Dict[str, int]
    points: np.ndarray            # (N, 2)
    covered_points: np.ndarray    # (M, 2)
    covered_mask: np.ndarray = field(repr=False, default_factory=lambda: np.zeros(0, dtype=bool))

    @property
    def ratio(self) -> float:
        return self.covered / self.total if self.total else 0.0

    def type_ratio(self, sensor_type: str) -> float:
        return self.by_type.get(sensor_type, 0) / self.total if self.total else 0.0


def sample_coverage_region(count: int) -> np.ndarray:
    """Square grid of ``ceil(sqrt(count))**2`` points over the analysis region.

    Rows step along x (outer) then y (inner); the far edges are not sampled.
    """
    grid = int(math.ceil(math.sqrt(count)))
    if grid <= 0:
        return np.zeros((0, 2), dtype=np.float64)
    x_min, x_max = REGION_X
    y_min, y_max = REGION_Y
    xs = x_min + np.arange(grid, dtype=np.float64) * ((x_max - x_min) / grid)
    ys = y_min + np.arange(grid, dtype=np.float64) * ((y_max - y_min) / grid)
    gx, gy = np.meshgrid(xs, ys, indexing="ij")
    return np.column_stack([gx.ravel(), gy.ravel()])


def sensor_coverage_mask(points: np.ndarray, sensor: Sensor) -> np.ndarray:
    """Boolean mask of the sample points one sensor covers (2-D wedge test)."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if not sensor.enabled:
        return np.zeros(len(pts), dtype=bool)
    ox, oy = sensor.xy
    in_range = np.hypot(pts[:, 0] - ox, pts[:, 1] - oy) <= sensor.range_m
    if sensor.fov.horizontal_deg >= PANORAMIC_FOV_DEG:
        return in_range
    tri = wedge_triangle((ox, oy), sensor.yaw_deg, sensor.fov.horizontal_deg, sensor.range_m)
    return in_range & points_in_triangle(pts, tri[0], tri[1], tri[2])


def active_sensors(sensors: Iterable[Sensor], layers: Layers) -> list[Sensor]:
    return [s for s in sensors if s.enabled and layers.is_visible(s.type)]


def compute_coverage(sensors: Sequence[Sensor], layers: Layers, sample_count: int) -> CoverageResult:
    points = sample_coverage_region(sample_count)
    covered = np.zeros(len(points), dtype=bool)
    by_type_mask = {t: np.zeros(len(points), dtype=bool) for t in SENSOR_TYPES}

    for sensor in active_sensors(sensors, layers):
        mask = sensor_coverage_mask(points, sensor)
        covered |= mask
        by_type_mask[sensor.type] |= mask

    by_type = {t: int(m.sum()) for t, m in by_type_mask.items()}
    result = CoverageResult(
        total=len(points),
        covered=int(covered.sum()),
        by_type=by_type,
        points=points,
        covered_points=points[covered],
        covered_mask=covered,
    )
    _log.debug("Coverage: %d/%d samples (%.1f%%)", result.covered, result.total, 100.0 * result.ratio)
    return result
