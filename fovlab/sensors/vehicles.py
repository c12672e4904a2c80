from __future__ import annotations

from typing import Dict

from ..core.models import Dimensions, Vec2, VehicleTemplate


def _footprint(half_length: float, nose: float, half_width: float) -> list[Vec2]:
    # Rectangle with a shallow point at the front and rear bumper centres.
    return [
        Vec2(x=-half_length, y=-half_width),
        Vec2(x=half_length, y=-half_width),
        Vec2(x=nose, y=0.0),
        Vec2(x=half_length, y=half_width),
        Vec2(x=-half_length, y=half_width),
        Vec2(x=-nose, y=0.0),
    ]


VEHICLES: Dict[str, VehicleTemplate] = {
    "sedan": VehicleTemplate(
        type="sedan",
        dimensions=Dimensions(length=4.7, width=1.8, wheelbase=2.8),
        footprint_polygon=_footprint(2.3, 2.4, 0.9),
    ),
    "hatchback": VehicleTemplate(
        type="hatchback",
        dimensions=Dimensions(length=4.2, width=1.75, wheelbase=2.6),
        footprint_polygon=_footprint(2.0, 2.1, 0.85),
    ),
    "suv": VehicleTemplate(
        type="suv",
        dimensions=Dimensions(length=4.9, width=2.0, wheelbase=2.9),
        footprint_polygon=_footprint(2.4, 2.5, 1.0),
    ),
}


def get_vehicle(vehicle_type: str) -> VehicleTemplate:
    try:
        return VEHICLES[vehicle_type]
    except KeyError:
        raise ValueError(f"Unknown vehicle type '{vehicle_type}'") from None
