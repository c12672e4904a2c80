from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .geometry import intersection_area_convex, wedge_triangle
from .models import Sensor
from .utils import get_logger

_log = get_logger()


@dataclass(frozen=True)
class Overlap:
    pair: Tuple[str, str]
    area: float


def _wedge(sensor: Sensor):
    return wedge_triangle(sensor.xy, sensor.yaw_deg, sensor.fov.horizontal_deg, sensor.range_m)


def detect_overlaps(sensors: Sequence[Sensor]) -> List[Overlap]:
    """All unordered pairs of enabled sensors whose wedge triangles intersect.

    Type-agnostic and brute force; any strictly positive area counts.
    """
    overlaps: List[Overlap] = []
    for i in range(len(sensors)):
        a = sensors[i]
        if not a.enabled:
            continue
        a_tri = _wedge(a)
        for j in range(i + 1, len(sensors)):
            b = sensors[j]
            if not b.enabled:
                continue
            area = intersection_area_convex(a_tri, _wedge(b))
            if area > 0.0:
                overlaps.append(Overlap(pair=(a.id, b.id), area=area))
    _log.debug("Overlap check: %d sensors -> %d overlapping pairs", len(sensors), len(overlaps))
    return overlaps
