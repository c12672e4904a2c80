"""Named starting layouts.

Positions are closed-form offsets from the vehicle's length and width; the
angular and range numbers come from the vendor catalog. A preset that names
a category its vendor does not offer is a programming error and raises
:class:`~fovlab.sensors.catalog.MissingSpecError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..core.models import FieldOfView, Orientation, Sensor, SensorPose, Vec3, VehicleTemplate, VendorSelection
from ..core.utils import get_logger, slugify
from .catalog import require_spec
from .vendors import bind_spec

_log = get_logger()

MOUNT_HEIGHT_M: Dict[str, float] = {
    "camera": 1.3,
    "radar": 0.6,
    "ultrasonic": 0.5,
    "lidar": 1.9,
}

FRONT_MARGIN_M = 0.2
REAR_MARGIN_M = 0.2


@dataclass(frozen=True)
class Mount:
    label: str
    type: str
    category: str
    x: float
    y: float
    yaw_deg: float
    mirror_group: Optional[str] = None


@dataclass(frozen=True)
class _Frame:
    front_x: float
    rear_x: float
    half_w: float


def _pair(label: str, sensor_type: str, category: str, x: float, y: float, yaw_deg: float, group: str) -> List[Mount]:
    """Left/right mounts mirrored about the x axis."""
    return [
        Mount(f"{label} Left", sensor_type, category, x, y, yaw_deg, group),
        Mount(f"{label} Right", sensor_type, category, x, -y, -yaw_deg, group),
    ]


def _fsd_camera(f: _Frame) -> List[Mount]:
    return [
        Mount("Front Wide", "camera", "wide", f.front_x, 0.08, 0.0),
        Mount("Front Narrow", "camera", "narrow", f.front_x, -0.08, 0.0),
        *_pair("Front Side", "camera", "main", f.front_x - 0.25, f.half_w - 0.08, 55.0, "front-side"),
        Mount("Rear", "camera", "wide", f.rear_x, 0.0, 180.0),
        *_pair("Rear", "camera", "main", f.rear_x + 0.2, f.half_w - 0.05, 135.0, "rear-side"),
    ]


def _tesla_hw4(f: _Frame) -> List[Mount]:
    return [
        Mount("Front Wide", "camera", "wide", f.front_x, 0.18, 0.0),
        Mount("Front Main", "camera", "main", f.front_x, 0.0, 0.0),
        Mount("Front Narrow", "camera", "narrow", f.front_x, -0.18, 0.0),
        *_pair("Front Side", "camera", "main", f.front_x - 0.25, f.half_w - 0.08, 55.0, "front-side"),
        *_pair("B-Pillar", "camera", "main", 0.0, f.half_w - 0.05, 100.0, "pillar"),
        Mount("Rear", "camera", "wide", f.rear_x, 0.0, 180.0),
        Mount("Front Radar", "radar", "mrr", f.front_x - 0.25, 0.0, 0.0),
    ]


def _adas_ncap(f: _Frame) -> List[Mount]:
    return [
        Mount("Front", "camera", "main", f.front_x, 0.0, 0.0),
        Mount("Rear", "camera", "wide", f.rear_x, 0.0, 180.0),
        Mount("Front Radar", "radar", "lrr", f.front_x - 0.25, 0.0, 0.0),
        *_pair("Corner Radar", "radar", "srr", f.front_x - 0.3, f.half_w - 0.1, 45.0, "corner-radar"),
        *_pair("Rear Corner Radar", "radar", "srr", f.rear_x + 0.3, f.half_w - 0.1, 135.0, "rear-corner-radar"),
        *_pair("US Front", "ultrasonic", "parking", f.front_x - 0.05, f.half_w - 0.3, 30.0, "us-front"),
        *_pair("US Front Center", "ultrasonic", "parking", f.front_x - 0.05, 0.3, 0.0, "us-front-center"),
        *_pair("US Rear", "ultrasonic", "parking", f.rear_x + 0.05, f.half_w - 0.3, 150.0, "us-rear"),
        *_pair("US Rear Center", "ultrasonic", "parking", f.rear_x + 0.05, 0.3, 180.0, "us-rear-center"),
    ]


def _robotaxi(f: _Frame) -> List[Mount]:
    return [
        Mount("Front Wide", "camera", "wide", f.front_x, 0.08, 0.0),
        Mount("Front Narrow", "camera", "narrow", f.front_x, -0.08, 0.0),
        *_pair("Front Side", "camera", "main", f.front_x - 0.2, f.half_w - 0.05, 60.0, "front-side"),
        Mount("Rear Wide", "camera", "wide", f.rear_x, 0.0, 180.0),
        *_pair("Rear Corner", "camera", "main", f.rear_x + 0.2, f.half_w - 0.05, 135.0, "rear-corner"),
        Mount("Front Radar", "radar", "lrr", f.front_x - 0.25, 0.0, 0.0),
        Mount("Rear Radar", "radar", "mrr", f.rear_x + 0.25, 0.0, 180.0),
        *_pair("Corner Radar", "radar", "srr", 0.0, f.half_w - 0.1, 90.0, "corner-radar"),
        *_pair("US Front", "ultrasonic", "parking", f.front_x - 0.05, f.half_w - 0.3, 30.0, "us-front"),
        *_pair("US Rear", "ultrasonic", "parking", f.rear_x + 0.05, f.half_w - 0.3, 150.0, "us-rear"),
        Mount("Roof", "lidar", "long", 0.0, 0.0, 0.0),
    ]


PRESETS: Dict[str, Callable[[_Frame], List[Mount]]] = {
    "fsd-camera": _fsd_camera,
    "tesla-hw4": _tesla_hw4,
    "adas-ncap": _adas_ncap,
    "robotaxi": _robotaxi,
}

# Preset ids used by older layout files.
PRESET_ALIASES: Dict[str, str] = {
    "tesla-fsd": "fsd-camera",
    "ncap": "adas-ncap",
}


def resolve_preset(preset: str) -> str:
    """Canonical id for ``preset``, accepting the older aliases."""
    preset = PRESET_ALIASES.get(preset, preset)
    if preset not in PRESETS:
        raise ValueError(f"Unknown preset '{preset}'")
    return preset


PRESET_VENDORS: Dict[str, VendorSelection] = {
    "fsd-camera": VendorSelection(),
    "tesla-hw4": VendorSelection(),
    "adas-ncap": VendorSelection(),
    "robotaxi": VendorSelection(),
}


def preset_vendors(preset: str) -> VendorSelection:
    return PRESET_VENDORS[resolve_preset(preset)]


def preset_mounts(preset: str, vehicle: VehicleTemplate) -> List[Mount]:
    preset = resolve_preset(preset)
    dims = vehicle.dimensions
    frame = _Frame(
        front_x=dims.length / 2.0 - FRONT_MARGIN_M,
        rear_x=-dims.length / 2.0 + REAR_MARGIN_M,
        half_w=max(abs(p.y) for p in vehicle.footprint_polygon),
    )
    return PRESETS[preset](frame)


def preset_sensors(
    preset: str,
    vehicle: VehicleTemplate,
    vendors: Optional[VendorSelection] = None,
) -> List[Sensor]:
    """Order-stable sensor list for ``preset`` with catalog specs bound.

    ``vendors`` defaults to the preset's own selection. Ids are
    ``<preset>-<slug(label)>``.
    """
    preset = resolve_preset(preset)
    vendors = vendors if vendors is not None else preset_vendors(preset)
    sensors: List[Sensor] = []
    for mount in preset_mounts(preset, vehicle):
        spec = require_spec(mount.type, vendors.for_type(mount.type), mount.category)
        raw = Sensor(
            id=f"{preset}-{slugify(mount.label)}",
            type=mount.type,
            label=mount.label,
            pose=SensorPose(
                position=Vec3(x=mount.x, y=mount.y, z=MOUNT_HEIGHT_M[mount.type]),
                orientation=Orientation(yaw_deg=mount.yaw_deg),
            ),
            fov=FieldOfView(horizontal_deg=float(spec.specs.horizontal_fov_deg), vertical_deg=None),
            range_m=float(spec.specs.range_m),
            mirror_group=mount.mirror_group,
        )
        sensors.append(bind_spec(raw, spec, mount.category))
    _log.debug("Preset %s: %d sensors on %s", preset, len(sensors), vehicle.type)
    return sensors
