"""Constraint solver for sensor placement.

The pipeline is fixed: boundary clamp, minimum spacing, mirror placement,
final re-clamp. Each stage returns a new list; sensors are never mutated.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .geometry import Polygon, clamp_point_to_polygon, distance, point_in_polygon
from .models import Constraints, Sensor, VehicleTemplate
from .utils import get_logger

_log = get_logger()

MIRROR_ID_SUFFIX = "-mirror"
MIRROR_LABEL_SUFFIX = " (Mirrored)"

# Distance from the footprint edge still audited as inside.
BOUNDARY_TOL_M = 1e-9


def apply_boundary_clamp(sensor: Sensor, polygon: Polygon) -> Sensor:
    x, y = clamp_point_to_polygon(sensor.xy, polygon)
    return sensor.with_position(x=x, y=y)


def _separate_pair(
    a: Sensor,
    b: Sensor,
    min_spacing: float,
    polygon: Optional[Polygon],
) -> Tuple[Sensor, Sensor]:
    pa = a.xy
    pb = b.xy
    d = distance(pa, pb)
    # Coincident sensors have no separation direction and are left alone.
    if d == 0.0 or d >= min_spacing:
        return a, b
    push = (min_spacing - d) / 2.0
    ux = (pa[0] - pb[0]) / d
    uy = (pa[1] - pb[1]) / d
    next_a = (pa[0] + ux * push, pa[1] + uy * push)
    next_b = (pb[0] - ux * push, pb[1] - uy * push)
    if polygon is not None:
        next_a = clamp_point_to_polygon(next_a, polygon)
        next_b = clamp_point_to_polygon(next_b, polygon)
    return (
        a.with_position(x=next_a[0], y=next_a[1]),
        b.with_position(x=next_b[0], y=next_b[1]),
    )


def apply_min_spacing(
    sensors: Sequence[Sensor],
    polygon: Optional[Polygon],
    min_spacing: float,
) -> List[Sensor]:
    """Push every too-close pair apart once, in index order.

    This is a single sweep, not a fixed-point iteration: with three or more
    mutually close sensors a later push can undo an earlier one. When
    ``polygon`` is given each moved point is clamped back into it.
    """
    updated = list(sensors)
    for i in range(len(updated)):
        for j in range(i + 1, len(updated)):
            a, b = _separate_pair(updated[i], updated[j], min_spacing, polygon)
            if a is not updated[i]:
                _log.debug("Spacing: pushed %s / %s apart", a.id, b.id)
            updated[i] = a
            updated[j] = b
    return updated


def _mirror_of(source: Sensor) -> Sensor:
    return source.with_position(y=-source.pose.position.y).with_orientation(yaw_deg=-source.yaw_deg)


def apply_mirror_placement(sensors: Sequence[Sensor], enabled: bool) -> List[Sensor]:
    """Resolve mirror groups about the vehicle's x axis.

    A lone group member gets a synthesized ``<id>-mirror`` twin appended,
    unless that id is already taken. In a two-member group the member with
    the larger ``|y|`` is the source and the other is recomputed from it
    (pose, FOV, range and spec binding), keeping its own id, label and type.
    """
    updated = list(sensors)
    if not enabled:
        return updated

    groups: Dict[str, List[Sensor]] = {}
    for sensor in updated:
        if sensor.mirror_group:
            groups.setdefault(sensor.mirror_group, []).append(sensor)

    taken = {s.id for s in updated}
    for name, group in groups.items():
        if len(group) == 1:
            original = group[0]
            twin_id = f"{original.id}{MIRROR_ID_SUFFIX}"
            if twin_id in taken:
                _log.warning("Mirror: id %s already in use, group '%s' left unpaired", twin_id, name)
                continue
            taken.add(twin_id)
            twin = _mirror_of(original).model_copy(
                update={
                    "id": twin_id,
                    "label": f"{original.label}{MIRROR_LABEL_SUFFIX}",
                }
            )
            updated.append(twin)
            _log.debug("Mirror: synthesized %s for group '%s'", twin.id, name)
            continue
        a, b = group[0], group[1]
        source = a if abs(a.pose.position.y) >= abs(b.pose.position.y) else b
        target = b if source is a else a
        mirrored = _mirror_of(source)
        next_target = target.model_copy(
            update={
                "pose": mirrored.pose,
                "fov": source.fov,
                "range_m": source.range_m,
                "spec_category": source.spec_category,
                "spec_point_rate_kpps": source.spec_point_rate_kpps,
            }
        )
        for idx, sensor in enumerate(updated):
            if sensor.id == target.id:
                updated[idx] = next_target
                break
    return updated


def enforce_constraints(
    sensors: Sequence[Sensor],
    vehicle: VehicleTemplate,
    constraints: Constraints,
) -> List[Sensor]:
    polygon = vehicle.polygon
    updated = list(sensors)
    if constraints.boundary_clamp:
        updated = [apply_boundary_clamp(s, polygon) for s in updated]
    updated = apply_min_spacing(
        updated,
        polygon if constraints.boundary_clamp else None,
        constraints.min_spacing_m,
    )
    updated = apply_mirror_placement(updated, constraints.mirror_placement)
    if constraints.boundary_clamp:
        updated = [s if point_in_polygon(s.xy, polygon) else apply_boundary_clamp(s, polygon) for s in updated]
    return updated


def boundary_violations(sensors: Sequence[Sensor], polygon: Polygon, tol: float = BOUNDARY_TOL_M) -> List[str]:
    """Ids of sensors whose (x, y) lies outside the footprint.

    A sensor within ``tol`` of the boundary counts as inside, so positions the
    clamp leaves exactly on an edge are never reported.
    """
    return [s.id for s in sensors if distance(s.xy, clamp_point_to_polygon(s.xy, polygon)) > tol]


def spacing_violations(sensors: Sequence[Sensor], min_spacing: float) -> List[Tuple[str, str, float]]:
    out: List[Tuple[str, str, float]] = []
    for i in range(len(sensors)):
        for j in range(i + 1, len(sensors)):
            d = distance(sensors[i].xy, sensors[j].xy)
            if d < min_spacing:
                out.append((sensors[i].id, sensors[j].id, d))
    return out
